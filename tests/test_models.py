"""
Tests for domain models — steps, results, versions, and the run summary.
"""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from gemini_updater.core.models import (
    NOT_INSTALLED,
    PHASE_ORDER,
    UNKNOWN,
    CommandResult,
    RunSummary,
    StepOutcome,
    StepPhase,
    StepState,
    ToolVersion,
    UpdateStep,
    VersionChange,
    format_command,
)


class TestUpdateStep:
    def test_minimal(self):
        step = UpdateStep(name="Refresh", phase=StepPhase.PACKAGE_MANAGER, command=["brew", "update"])
        assert step.allow_failure is False
        assert step.fallback is None
        assert step.command_text == "brew update"

    def test_empty_command_rejected(self):
        with pytest.raises(ValidationError, match="empty command"):
            UpdateStep(name="Nothing", phase=StepPhase.RUNTIME, command=[])

    def test_fallback_requires_allow_failure(self):
        with pytest.raises(ValidationError, match="fallback"):
            UpdateStep(
                name="npm",
                phase=StepPhase.RUNTIME_PACKAGE_MANAGER,
                command=["npm", "install", "-g", "npm@latest", "--force"],
                fallback=["npm", "install", "-g", "npm@latest"],
            )

    def test_best_effort_requires_allow_failure(self):
        with pytest.raises(ValidationError, match="Best-effort"):
            UpdateStep(
                name="IDE",
                phase=StepPhase.INTEGRATION,
                command=["gemini", "/ide", "enable"],
                best_effort=True,
            )

    def test_command_text_quotes_arguments(self):
        step = UpdateStep(
            name="Smoke",
            phase=StepPhase.INTEGRATION,
            command=["gemini", "-p", "say OK"],
        )
        assert step.command_text == "gemini -p 'say OK'"


class TestStepPhase:
    def test_phase_order(self):
        assert PHASE_ORDER[0] == StepPhase.PACKAGE_MANAGER
        assert PHASE_ORDER[-1] == StepPhase.BULK_REFRESH
        assert PHASE_ORDER.index(StepPhase.RUNTIME) < PHASE_ORDER.index(StepPhase.APPLICATION)
        assert len(PHASE_ORDER) == 8


class TestCommandResult:
    def test_ok(self):
        assert CommandResult(command=["true"]).ok
        assert not CommandResult(command=["false"], exit_code=1).ok

    def test_planned(self):
        result = CommandResult.planned(["brew", "update"], "Refresh")
        assert result.dry_run
        assert result.ok
        assert result.description == "Refresh"

    def test_started_at_is_set(self):
        assert CommandResult(command=["x"]).started_at

    def test_format_command(self):
        assert format_command(["npm", "install", "-g", "@google/gemini-cli@latest"]) == (
            "npm install -g @google/gemini-cli@latest"
        )


class TestToolVersion:
    def test_installed_and_known(self):
        v = ToolVersion(tool="node", label="Node.js", version="v20.11.0")
        assert v.installed and v.known

    def test_not_installed(self):
        v = ToolVersion(tool="node", label="Node.js", version=NOT_INSTALLED)
        assert not v.installed
        assert not v.known

    def test_unknown_is_installed(self):
        v = ToolVersion(tool="node", label="Node.js", version=UNKNOWN)
        assert v.installed
        assert not v.known

    def test_frozen(self):
        v = ToolVersion(tool="npm", label="npm", version="10.0.0")
        with pytest.raises(ValidationError):
            v.version = "11.0.0"


class TestVersionChange:
    def test_changed(self):
        change = VersionChange(tool="npm", label="npm", original="10.0.0", updated="10.2.4")
        assert change.changed
        assert not change.regressed

    def test_regressed(self):
        change = VersionChange(tool="gemini", label="Gemini CLI", original="0.9.0", updated=NOT_INSTALLED)
        assert change.regressed

    def test_newly_installed_is_not_regression(self):
        change = VersionChange(tool="gcloud", label="Google Cloud SDK", original=NOT_INSTALLED, updated="470.0.0")
        assert change.changed
        assert not change.regressed


class TestStepOutcome:
    def test_pending_is_not_finished(self):
        outcome = StepOutcome(name="x", phase=StepPhase.RUNTIME)
        assert outcome.state == StepState.PENDING
        assert not outcome.finished

    @pytest.mark.parametrize("state", [
        StepState.SUCCEEDED,
        StepState.FAILED_RECOVERED,
        StepState.FAILED_WARNED,
        StepState.FAILED_FATAL,
        StepState.SKIPPED,
    ])
    def test_terminal_states(self, state):
        assert StepOutcome(name="x", phase=StepPhase.RUNTIME, state=state).finished


class TestRunSummary:
    def _summary(self, **kwargs) -> RunSummary:
        start = datetime(2024, 1, 2, 3, 4, 5)
        defaults = {
            "version": "3.1.0",
            "platform": "Linux",
            "started_at": start,
            "ended_at": start + timedelta(seconds=42),
        }
        defaults.update(kwargs)
        return RunSummary(**defaults)

    def test_success_status(self):
        summary = self._summary(warning_count=3)
        assert summary.ok
        assert summary.status == "SUCCESS"

    def test_errors_change_status(self):
        summary = self._summary(error_count=1)
        assert not summary.ok
        assert summary.status == "COMPLETED WITH ERRORS"

    def test_duration(self):
        assert self._summary().duration_seconds == 42
