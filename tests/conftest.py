"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gemini_updater.core.config.loader import UpdaterConfig
from gemini_updater.core.context import RunContext, RunOptions
from gemini_updater.core.models.action import CommandResult
from gemini_updater.services.updater.execution.command_runner import CommandRunner
from gemini_updater.services.updater.execution.subprocess_runner import Shell


class FakeShell:
    """Scripted stand-in for the subprocess layer.

    - ``installed`` is the set of executables on the fake PATH.
    - ``respond(argv, ...)`` scripts the result of one exact command.
      ``installs`` / ``removes`` change ``installed`` when it runs.
    - Unscripted commands exit 0 with no output.
    """

    def __init__(self, installed: set[str] | None = None):
        self.installed: set[str] = set(installed or ())
        self.calls: list[list[str]] = []
        self.call_kwargs: list[dict] = []
        self._responses: dict[tuple[str, ...], dict] = {}

    def respond(
        self,
        argv: list[str],
        exit_code: int = 0,
        output: str = "",
        *,
        timed_out: bool = False,
        installs: tuple[str, ...] = (),
        removes: tuple[str, ...] = (),
    ) -> None:
        self._responses[tuple(argv)] = {
            "exit_code": exit_code,
            "output": output,
            "timed_out": timed_out,
            "installs": installs,
            "removes": removes,
        }

    def set_version(self, executable: str, args: list[str], version: str) -> None:
        self.installed.add(executable)
        self.respond([executable, *args], output=version + "\n")

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.installed else None

    def run(self, cmd, *, timeout=None, cwd=None, merge_stderr=True, env_overrides=None):
        self.calls.append(list(cmd))
        self.call_kwargs.append({"timeout": timeout, "cwd": cwd, "merge_stderr": merge_stderr})
        spec = self._responses.get(tuple(cmd))
        if spec is None:
            return CommandResult(command=list(cmd))
        self.installed.update(spec["installs"])
        self.installed.difference_update(spec["removes"])
        return CommandResult(
            command=list(cmd),
            exit_code=spec["exit_code"],
            output=spec["output"],
            timed_out=spec["timed_out"],
            duration_ms=1000 if spec["timed_out"] else 5,
        )

    def ran(self, argv: list[str]) -> bool:
        return list(argv) in self.calls

    def mutating_calls(self) -> list[list[str]]:
        """Calls other than version queries and listings."""
        read_only = {"-v", "--version", "version", "ls", "list", "config"}
        return [c for c in self.calls if len(c) < 2 or c[1] not in read_only]

    def as_shell(self) -> Shell:
        return Shell(run=self.run, which=self.which)


@pytest.fixture
def fake_shell() -> FakeShell:
    """A machine with every tracked tool installed at a known version."""
    shell = FakeShell(installed={"brew"})
    shell.set_version("node", ["-v"], "v20.11.0")
    shell.set_version("npm", ["-v"], "10.2.4")
    shell.set_version("gemini", ["--version"], "0.9.0")
    shell.set_version("gcloud", ["version", '--format=value("Google Cloud SDK")'], "470.0.0")
    return shell


@pytest.fixture
def config(tmp_path: Path) -> UpdaterConfig:
    """Config writing artifacts under a temporary directory."""
    return UpdaterConfig(base_dir=tmp_path / "logs", project_dir=tmp_path / "project")


@pytest.fixture
def make_context(config: UpdaterConfig):
    """Factory for an isolated RunContext."""

    def _make(dry_run: bool = False, verbose: bool = False, cfg: UpdaterConfig | None = None) -> RunContext:
        return RunContext.create(cfg or config, RunOptions(dry_run=dry_run, verbose=verbose))

    return _make


@pytest.fixture
def ctx(make_context) -> RunContext:
    return make_context()


@pytest.fixture
def runner(ctx: RunContext, fake_shell: FakeShell) -> CommandRunner:
    return CommandRunner(ctx, fake_shell.as_shell())
