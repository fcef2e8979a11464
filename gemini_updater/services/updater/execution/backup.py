"""
L4 Execution — Pre-update backup snapshot.

Captures versions, the global npm package listing, system information,
an allow-listed slice of the environment and the npm configuration,
before any update step runs. The snapshot is reference material for a
manual rollback; nothing restores from it automatically.

The whole document is assembled in memory and written with a single
atomic create. Each section degrades to a placeholder on its own; a
failed sub-query never aborts the snapshot.
"""

from __future__ import annotations

import getpass
import logging
import os
import platform
import re
from collections.abc import Mapping
from pathlib import Path

from gemini_updater import __version__
from gemini_updater.core.config.loader import BackupEnvPolicy
from gemini_updater.core.context import RunContext
from gemini_updater.core.models.state import ToolVersion
from gemini_updater.core.observability.logging_config import log_success
from gemini_updater.core.persistence.artifacts import atomic_write_text
from gemini_updater.services.updater.detection.packages import NPM_LIST_TEXT
from gemini_updater.services.updater.execution.command_runner import CommandRunner

logger = logging.getLogger(__name__)

NOT_SET = "Not set"
REDACTED = "***REDACTED***"

_SENSITIVE_LINE = re.compile(r"(_auth|token|password|passwd|secret|credential)", re.IGNORECASE)


def filter_environment(environ: Mapping[str, str], policy: BackupEnvPolicy) -> dict[str, str]:
    """Allow-listed environment variables; denied names are dropped entirely."""
    captured: dict[str, str] = {}
    for name in policy.allow:
        if policy.is_denied(name):
            continue
        captured[name] = environ.get(name, NOT_SET)
    return captured


def redact_config_lines(text: str) -> str:
    """Mask values on npm config lines that look credential-bearing."""
    lines = []
    for line in text.splitlines():
        if _SENSITIVE_LINE.search(line):
            key = line.split("=", 1)[0].rstrip()
            line = f"{key} = {REDACTED}"
        lines.append(line)
    return "\n".join(lines)


def system_info() -> dict[str, str]:
    """Host details shared by the run log header and the backup."""
    try:
        user = getpass.getuser()
    except Exception:
        user = "unknown"
    return {
        "User": user,
        "OS": f"{platform.system()} {platform.release()}",
        "Architecture": platform.machine() or "unknown",
        "Shell": os.environ.get("SHELL") or os.environ.get("COMSPEC") or "unknown",
        "Working directory": str(Path.cwd()),
    }


class BackupSnapshot:
    """Write the pre-update snapshot to ``backups/backup_<timestamp>.txt``."""

    def __init__(self, ctx: RunContext, runner: CommandRunner):
        self._ctx = ctx
        self._runner = runner

    def capture(
        self,
        original_versions: list[ToolVersion],
        environment: Mapping[str, str] | None = None,
    ) -> Path | None:
        """Render and write the snapshot.

        Returns:
            The backup path, or None if the file could not be written
            (counted as a warning; the run continues).
        """
        logger.info("Creating backup of current configuration...")
        env = os.environ if environment is None else environment
        content = self.render(original_versions, env)

        path = self._ctx.planned_backup_file
        try:
            atomic_write_text(path, content)
        except OSError as e:
            self._ctx.warn("Could not write backup %s: %s", path, e)
            return None

        self._ctx.backup_file = path
        log_success(logger, "Backup created: %s", path)
        return path

    def render(self, original_versions: list[ToolVersion], environment: Mapping[str, str]) -> str:
        ctx = self._ctx
        sections: list[tuple[str, str]] = []

        sections.append(("GEMINI CLI UPDATE BACKUP", "\n".join([
            f"Timestamp: {ctx.started_at:%Y-%m-%d %H:%M:%S}",
            f"Script Version: {__version__}",
            f"Platform: {platform.system()}",
            f"Dry run: {ctx.dry_run}",
        ])))

        sections.append(("SOFTWARE VERSIONS", "\n".join(
            f"{v.label}: {v.version}" for v in original_versions
        ) or "No tools tracked"))

        sections.append(("GLOBAL NPM PACKAGES", self._query_section(
            NPM_LIST_TEXT, "failed to list packages",
        )))

        sections.append(("SYSTEM INFORMATION", "\n".join(
            f"{key}: {value}" for key, value in system_info().items()
        )))

        captured = filter_environment(environment, ctx.config.backup_env)
        sections.append(("ENVIRONMENT VARIABLES", "\n".join(
            f"{key}: {value}" for key, value in captured.items()
        ) or "None captured"))

        npm_config = self._query_section(["npm", "config", "list"], "failed to read npm configuration")
        sections.append(("NPM CONFIGURATION", redact_config_lines(npm_config)))

        return "\n\n".join(f"=== {title} ===\n{body}" for title, body in sections) + "\n"

    def _query_section(self, command: list[str], placeholder: str) -> str:
        if self._runner.which(command[0]) is None:
            return f"{command[0]} not available"
        result = self._runner.query(command)
        output = result.output.strip()
        # npm list exits non-zero on dependency warnings but output is still useful
        if not output:
            return placeholder
        return output
