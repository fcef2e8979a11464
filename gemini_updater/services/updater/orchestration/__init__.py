"""
L5 Orchestration — step catalog and the Orchestrator.
"""

from gemini_updater.services.updater.orchestration.orchestrator import (  # noqa: F401
    Orchestrator,
    gather_facts,
)
from gemini_updater.services.updater.orchestration.steps import (  # noqa: F401
    MachineFacts,
    build_update_steps,
)
