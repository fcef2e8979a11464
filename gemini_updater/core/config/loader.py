"""
Configuration loader — reads gemini-update.yml into an UpdaterConfig.

The file is optional: every field has a default that reproduces the
stock behaviour. Values are resolved in precedence order:

    CLI flag  >  GEMINI_UPDATE_* env var  >  config file  >  default
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_FILE = "gemini-update.yml"
USER_CONFIG_FILE = Path("~/.config/gemini-update/config.yml")

ENV_CONFIG = "GEMINI_UPDATE_CONFIG"
ENV_OVERRIDES: dict[str, str] = {
    "GEMINI_UPDATE_BASE_DIR": "base_dir",
    "GEMINI_UPDATE_RETENTION": "retention",
    "GEMINI_UPDATE_TIMEOUT": "command_timeout",
}

DEFAULT_ENV_ALLOW = [
    "PATH",
    "NODE_PATH",
    "NPM_CONFIG_PREFIX",
    "SHELL",
    "HOME",
    "LANG",
    "CLOUDSDK_CONFIG",
]

DEFAULT_ENV_DENY_PATTERNS = [
    "TOKEN",
    "SECRET",
    "KEY",
    "PASSWORD",
    "PASSWD",
    "CREDENTIAL",
    "AUTH",
]


class ConfigError(Exception):
    """Raised when updater configuration is invalid or missing."""


class BulkRefreshPolicy(BaseModel):
    """Which globally installed npm packages the bulk refresh may touch.

    ``all`` refreshes every global package (optionally minus ``exclude``),
    ``tracked`` only the Gemini CLI and its dependency packages, ``none``
    drops the step entirely.
    """

    mode: Literal["all", "tracked", "none"] = "all"
    exclude: list[str] = Field(default_factory=list)


class BackupEnvPolicy(BaseModel):
    """Environment variables captured in the backup snapshot.

    Only names in ``allow`` are recorded; a name containing any of the
    ``deny_patterns`` (case-insensitive) is never recorded, even if allowed.
    """

    allow: list[str] = Field(default_factory=lambda: list(DEFAULT_ENV_ALLOW))
    deny_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_ENV_DENY_PATTERNS))

    def is_denied(self, name: str) -> bool:
        upper = name.upper()
        return any(pattern.upper() in upper for pattern in self.deny_patterns)


class UpdaterConfig(BaseModel):
    """Root configuration for one updater invocation."""

    # ── Artifacts ────────────────────────────────────────────────
    base_dir: Path = Path("gemini-update-logs")
    retention: int = Field(default=10, ge=1)

    # ── Timeouts (seconds) ───────────────────────────────────────
    command_timeout: float | None = Field(default=None, gt=0)
    integration_timeout: float = Field(default=60, gt=0)
    smoke_timeout: float = Field(default=60, gt=0)
    query_timeout: float = Field(default=30, gt=0)

    # ── Target application ───────────────────────────────────────
    gemini_executable: str = "gemini"
    gemini_package: str = "@google/gemini-cli"
    dependency_packages: list[str] = Field(default_factory=lambda: ["@google/generative-ai"])
    integration_args: list[str] = Field(default_factory=lambda: ["/ide", "enable"])
    smoke_test_args: list[str] = Field(
        default_factory=lambda: ["-p", "Test connection - respond with OK"]
    )

    # Directory searched for a local package.json (default: cwd)
    project_dir: Path | None = None

    # ── Policies ─────────────────────────────────────────────────
    bulk_refresh: BulkRefreshPolicy = Field(default_factory=BulkRefreshPolicy)
    backup_env: BackupEnvPolicy = Field(default_factory=BackupEnvPolicy)

    def resolved_base_dir(self, cwd: Path | None = None) -> Path:
        """Absolute artifact directory; relative paths are taken from ``cwd``."""
        base = self.base_dir.expanduser()
        if base.is_absolute():
            return base
        return (cwd or Path.cwd()) / base


def find_config_file(
    start_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    """Locate the config file: $GEMINI_UPDATE_CONFIG, ./gemini-update.yml, then the user file.

    Returns:
        Path to the config file, or None if there is none.
    """
    env = os.environ if environ is None else environ

    explicit = env.get(ENV_CONFIG)
    if explicit:
        return Path(explicit).expanduser()

    local = (start_dir or Path.cwd()) / CONFIG_FILE
    if local.is_file():
        return local

    user = USER_CONFIG_FILE.expanduser()
    if user.is_file():
        return user

    return None


def load_config(
    path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    start_dir: Path | None = None,
    **overrides: Any,
) -> UpdaterConfig:
    """Load and validate updater configuration.

    Args:
        path: Explicit config file. If None, searches the default locations
            and falls back to built-in defaults when nothing is found.
        environ: Environment used for GEMINI_UPDATE_* overrides (default: os.environ).
        start_dir: Directory searched for ``gemini-update.yml`` (default: cwd).
        **overrides: Highest-precedence values (CLI flags). ``None`` values
            are ignored.

    Raises:
        ConfigError: If an explicit file is missing or any value is invalid.
    """
    env = os.environ if environ is None else environ

    if path is None:
        path = find_config_file(start_dir, env)
        explicit = env.get(ENV_CONFIG) is not None
    else:
        explicit = True

    data: dict[str, Any] = {}
    if path is not None:
        if not path.is_file():
            if explicit:
                raise ConfigError(f"Config file not found: {path}")
        else:
            data = _read_yaml(path)

    for env_name, field_name in ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value:
            logger.debug("Config override from %s", env_name)
            data[field_name] = value

    for key, value in overrides.items():
        if value is not None:
            data[key] = value

    try:
        config = UpdaterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid updater configuration: {e}") from e

    logger.debug("Configuration loaded (source=%s)", path or "defaults")
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    logger.debug("Loading updater config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The file may wrap everything under an "updater" key or be flat
    if isinstance(data.get("updater"), dict):
        data = data["updater"]
    return dict(data)
