"""
Tests for configuration loading — gemini-update.yml, env overrides, CLI overrides.
"""

import textwrap
from pathlib import Path

import pytest

from gemini_updater.core.config.loader import (
    CONFIG_FILE,
    BackupEnvPolicy,
    ConfigError,
    UpdaterConfig,
    find_config_file,
    load_config,
)


@pytest.fixture(autouse=True)
def _no_user_config(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content))
    return path


class TestDefaults:
    def test_defaults(self, tmp_path: Path):
        config = load_config(environ={}, start_dir=tmp_path)
        assert config.retention == 10
        assert config.command_timeout is None
        assert config.gemini_package == "@google/gemini-cli"
        assert config.dependency_packages == ["@google/generative-ai"]
        assert config.bulk_refresh.mode == "all"
        assert config.integration_timeout == 60

    def test_resolved_base_dir_relative(self, tmp_path: Path):
        config = UpdaterConfig(base_dir=Path("logs"))
        assert config.resolved_base_dir(tmp_path) == tmp_path / "logs"

    def test_resolved_base_dir_absolute(self, tmp_path: Path):
        config = UpdaterConfig(base_dir=tmp_path / "abs")
        assert config.resolved_base_dir(Path("/elsewhere")) == tmp_path / "abs"


class TestFindConfigFile:
    def test_env_wins(self, tmp_path: Path):
        _write(tmp_path / CONFIG_FILE, "retention: 3\n")
        env_file = _write(tmp_path / "other.yml", "retention: 4\n")
        found = find_config_file(tmp_path, {"GEMINI_UPDATE_CONFIG": str(env_file)})
        assert found == env_file

    def test_local_file(self, tmp_path: Path):
        local = _write(tmp_path / CONFIG_FILE, "retention: 3\n")
        assert find_config_file(tmp_path, {}) == local

    def test_none(self, tmp_path: Path):
        assert find_config_file(tmp_path, {}) is None


class TestLoadConfig:
    def test_flat_file(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", """\
            retention: 5
            base_dir: /var/log/gemini
            dependency_packages: []
        """)
        config = load_config(path, environ={})
        assert config.retention == 5
        assert config.base_dir == Path("/var/log/gemini")
        assert config.dependency_packages == []

    def test_wrapped_file(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", """\
            updater:
              retention: 7
              bulk_refresh:
                mode: all
                exclude: [corepack]
        """)
        config = load_config(path, environ={})
        assert config.retention == 7
        assert config.bulk_refresh.exclude == ["corepack"]

    def test_empty_file(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "")
        assert load_config(path, environ={}).retention == 10

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml", environ={})

    def test_env_path_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(environ={"GEMINI_UPDATE_CONFIG": str(tmp_path / "nope.yml")})

    def test_invalid_yaml(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "retention: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path, environ={})

    def test_non_mapping(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path, environ={})

    def test_invalid_value(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "retention: 0\n")
        with pytest.raises(ConfigError, match="Invalid updater configuration"):
            load_config(path, environ={})

    def test_invalid_bulk_mode(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "bulk_refresh:\n  mode: everything\n")
        with pytest.raises(ConfigError):
            load_config(path, environ={})


class TestOverrides:
    def test_env_overrides_file(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "retention: 5\n")
        config = load_config(path, environ={"GEMINI_UPDATE_RETENTION": "2"})
        assert config.retention == 2

    def test_env_timeout(self, tmp_path: Path):
        config = load_config(environ={"GEMINI_UPDATE_TIMEOUT": "90"}, start_dir=tmp_path)
        assert config.command_timeout == 90

    def test_cli_overrides_env(self, tmp_path: Path):
        config = load_config(
            environ={"GEMINI_UPDATE_BASE_DIR": "/from/env"},
            start_dir=tmp_path,
            base_dir=str(tmp_path / "cli"),
        )
        assert config.base_dir == tmp_path / "cli"

    def test_none_override_ignored(self, tmp_path: Path):
        path = _write(tmp_path / "cfg.yml", "command_timeout: 300\n")
        config = load_config(path, environ={}, command_timeout=None)
        assert config.command_timeout == 300

    def test_invalid_env_value(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            load_config(environ={"GEMINI_UPDATE_RETENTION": "many"}, start_dir=tmp_path)


class TestBackupEnvPolicy:
    def test_deny_is_case_insensitive(self):
        policy = BackupEnvPolicy()
        assert policy.is_denied("GITHUB_TOKEN")
        assert policy.is_denied("npm_config__auth")
        assert policy.is_denied("GEMINI_API_KEY")
        assert not policy.is_denied("PATH")

    def test_custom_patterns(self):
        policy = BackupEnvPolicy(allow=["PATH"], deny_patterns=["PATH"])
        assert policy.is_denied("PATH")
