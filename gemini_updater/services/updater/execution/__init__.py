"""
L4 Execution — ``__init__.py`` re-exports the command-running layer.

Everything that starts an external process goes through here.
"""

from gemini_updater.services.updater.execution.backup import (  # noqa: F401
    BackupSnapshot,
    filter_environment,
    redact_config_lines,
    system_info,
)
from gemini_updater.services.updater.execution.command_runner import (  # noqa: F401
    CommandRunner,
    StepFailedError,
)
from gemini_updater.services.updater.execution.subprocess_runner import (  # noqa: F401
    Shell,
    _run_subprocess,
)
