"""
Domain models — Pydantic types for the updater.

All models are re-exported here for convenient access:

    from gemini_updater.core.models import UpdateStep, CommandResult, RunSummary
"""

from gemini_updater.core.models.action import (
    PHASE_ORDER,
    CommandResult,
    StepPhase,
    UpdateStep,
    format_command,
)
from gemini_updater.core.models.state import (
    NOT_INSTALLED,
    NOT_VERIFIED,
    UNKNOWN,
    RunSummary,
    StepOutcome,
    StepState,
    ToolVersion,
    VersionChange,
)

__all__ = [
    # action.py
    "CommandResult",
    "NOT_INSTALLED",
    "PHASE_ORDER",
    # state.py
    "RunSummary",
    "StepOutcome",
    "StepPhase",
    "StepState",
    "ToolVersion",
    "NOT_VERIFIED",
    "UNKNOWN",
    "UpdateStep",
    "VersionChange",
    "format_command",
]
