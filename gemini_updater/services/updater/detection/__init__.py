"""
L3 Detection — ``__init__.py`` re-exports all detection functions.

These functions READ system state but never WRITE.
"""

from gemini_updater.services.updater.detection.packages import (  # noqa: F401
    list_global_packages,
)
from gemini_updater.services.updater.detection.tool_version import (  # noqa: F401
    TRACKED_TOOLS,
    ToolSpec,
    VersionProbe,
)
