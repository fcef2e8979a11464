"""
Run state models — tool versions, step outcomes, and the run summary.

A run produces two generations of ToolVersion (before and after the
update steps), one StepOutcome per planned step, and exactly one
RunSummary, which is the authoritative end-of-run record.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from gemini_updater.core.models.action import StepPhase

NOT_INSTALLED = "Not installed"
UNKNOWN = "Unknown"
NOT_VERIFIED = "Not verified"


class ToolVersion(BaseModel):
    """Version of one external tool as an opaque display string."""

    model_config = ConfigDict(frozen=True)

    tool: str
    label: str
    version: str

    @property
    def installed(self) -> bool:
        return self.version != NOT_INSTALLED

    @property
    def known(self) -> bool:
        return self.version not in (NOT_INSTALLED, UNKNOWN)


class VersionChange(BaseModel):
    """Before/after pair for one tracked tool."""

    model_config = ConfigDict(frozen=True)

    tool: str
    label: str
    original: str
    updated: str

    @property
    def changed(self) -> bool:
        return self.original != self.updated

    @property
    def regressed(self) -> bool:
        """Installed before the run but missing afterwards."""
        return self.original != NOT_INSTALLED and self.updated == NOT_INSTALLED


class StepState(str, Enum):
    """Lifecycle of a single update step."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED_RECOVERED = "failed_recovered"   # primary failed, fallback succeeded
    FAILED_WARNED = "failed_warned"         # every attempt failed, failure allowed
    FAILED_FATAL = "failed_fatal"           # aborts the run
    SKIPPED = "skipped"                     # required executable missing


TERMINAL_STATES = frozenset({
    StepState.SUCCEEDED,
    StepState.FAILED_RECOVERED,
    StepState.FAILED_WARNED,
    StepState.FAILED_FATAL,
    StepState.SKIPPED,
})


class StepOutcome(BaseModel):
    """Runtime record of one step."""

    name: str
    phase: StepPhase
    state: StepState = StepState.PENDING
    attempts: int = 0
    exit_code: int | None = None
    dry_run: bool = False

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES


class RunSummary(BaseModel):
    """End-of-run report. Written once to the summary artifact.

    ``interrupted`` marks a partial report written after Ctrl-C: versions
    are not re-probed and steps still RUNNING or PENDING are shown as such.
    """

    model_config = ConfigDict(frozen=True)

    version: str
    platform: str
    dry_run: bool = False

    started_at: datetime
    ended_at: datetime

    versions: list[VersionChange] = Field(default_factory=list)
    steps: list[StepOutcome] = Field(default_factory=list)

    error_count: int = 0
    warning_count: int = 0
    smoke_test_ok: bool | None = None
    interrupted: bool = False

    log_file: Path | None = None
    summary_file: Path | None = None
    backup_file: Path | None = None

    @property
    def ok(self) -> bool:
        """Overall status depends on errors only; warnings never fail a run."""
        return self.error_count == 0

    @property
    def status(self) -> str:
        if self.interrupted:
            return "INTERRUPTED"
        return "SUCCESS" if self.ok else "COMPLETED WITH ERRORS"

    @property
    def duration_seconds(self) -> float:
        return (self.ended_at - self.started_at).total_seconds()
