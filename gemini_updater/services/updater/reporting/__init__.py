"""
L6 Reporting — end-of-run verification, summary and cleanup.
"""

from gemini_updater.services.updater.reporting.reporter import (  # noqa: F401
    Reporter,
    pair_versions,
)
from gemini_updater.services.updater.reporting.summary import render_summary  # noqa: F401
