"""
L3 Detection — globally installed npm packages.

Read-only: used by the bulk-refresh policy (to expand an exclusion list
into explicit package names) and by the backup snapshot.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gemini_updater.services.updater.execution.command_runner import CommandRunner

logger = logging.getLogger(__name__)

NPM_LIST_JSON = ["npm", "ls", "-g", "--depth=0", "--json"]
NPM_LIST_TEXT = ["npm", "list", "-g", "--depth=0"]


def list_global_packages(runner: CommandRunner) -> list[str] | None:
    """Names of the globally installed npm packages.

    Returns:
        Sorted package names, or None when npm is missing or its output
        cannot be parsed.
    """
    if runner.which("npm") is None:
        return None

    result = runner.query(NPM_LIST_JSON)
    # npm exits 1 on peer-dependency problems but still prints the tree
    try:
        data = json.loads(result.output or "{}")
    except json.JSONDecodeError as e:
        logger.debug("Unparseable npm listing (exit %d): %s", result.exit_code, e)
        return None

    deps = data.get("dependencies") if isinstance(data, dict) else None
    if not isinstance(deps, dict):
        return []
    return sorted(deps)
