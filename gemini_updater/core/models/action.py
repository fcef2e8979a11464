"""
UpdateStep and CommandResult models — the execution contract.

Steps represent requested package-manager operations. Results represent
what the external command actually did. The orchestrator hands steps to
the command runner; the subprocess layer answers with results, never
exceptions.
"""

from __future__ import annotations

import shlex
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def format_command(command: list[str]) -> str:
    """Render an argument vector for display in logs (never for execution)."""
    return shlex.join(command)


class StepPhase(str, Enum):
    """Fixed phases of an update run, in execution order."""

    PACKAGE_MANAGER = "package_manager"
    CLOUD_SDK = "cloud_sdk"
    RUNTIME = "runtime"
    RUNTIME_PACKAGE_MANAGER = "runtime_package_manager"
    APPLICATION = "application"
    DEPENDENCIES = "dependencies"
    INTEGRATION = "integration"
    BULK_REFRESH = "bulk_refresh"


PHASE_ORDER: tuple[StepPhase, ...] = tuple(StepPhase)


class UpdateStep(BaseModel):
    """One named, ordered unit of orchestration.

    ``command`` runs first. ``fallback`` is only tried when the primary
    command fails and the step allows failure (force-then-plain policy).
    ``best_effort`` steps never count as errors: any failure is logged as
    a warning together with the ``remediation`` hints.
    """

    name: str
    phase: StepPhase
    command: list[str]
    fallback: list[str] | None = None
    allow_failure: bool = False
    best_effort: bool = False
    requires: str | None = None      # executable that must be on PATH at run time
    cwd: str | None = None
    timeout: float | None = None
    remediation: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_policy(self) -> UpdateStep:
        if not self.command:
            raise ValueError(f"Step '{self.name}' has an empty command")
        if self.fallback is not None and not self.allow_failure:
            raise ValueError(f"Step '{self.name}' declares a fallback but does not allow failure")
        if self.best_effort and not self.allow_failure:
            raise ValueError(f"Best-effort step '{self.name}' must allow failure")
        return self

    @property
    def command_text(self) -> str:
        return format_command(self.command)


class CommandResult(BaseModel):
    """Outcome of one external command invocation.

    Created at execution time and consumed immediately by the caller;
    only the log lines it produces are retained.
    """

    command: list[str]
    description: str = ""
    exit_code: int = 0
    output: str = ""

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    timed_out: bool = False
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        """Whether the command exited with status zero."""
        return self.exit_code == 0

    @property
    def command_text(self) -> str:
        return format_command(self.command)

    @classmethod
    def planned(cls, command: list[str], description: str = "") -> CommandResult:
        """A result standing in for a command skipped by dry-run mode."""
        return cls(command=list(command), description=description, dry_run=True)
