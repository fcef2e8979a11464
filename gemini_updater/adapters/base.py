"""
Platform adapter base — the per-OS half of the update plan.

The step sequence and its failure policy live in the orchestration
layer and are the same everywhere. An adapter only answers "which
native commands do this on this machine?" for the three phases that
depend on the native package manager:

    1. refresh the native package manager
    2. install the Google Cloud SDK when it is missing
    3. install/upgrade Node.js

To add a platform:
    1. Subclass PlatformAdapter
    2. Implement name, supports, is_available and the command methods
    3. Register it in the PlatformRegistry
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

WhichFn = Callable[[str], "str | None"]


@dataclass(frozen=True)
class PlatformCommand:
    """A described argument vector supplied by an adapter."""

    description: str
    argv: list[str]


class PlatformAdapter(ABC):
    """Abstract base class for native package-manager adapters."""

    def __init__(self, which_fn: WhichFn = shutil.which):
        self._which = which_fn

    @property
    @abstractmethod
    def name(self) -> str:
        """Adapter identifier (e.g. 'homebrew', 'chocolatey')."""

    @abstractmethod
    def supports(self, system: str) -> bool:
        """Whether this adapter applies to ``platform.system()`` value ``system``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the adapter can be used on this machine. Fast, never raises."""

    @abstractmethod
    def refresh_commands(self) -> list[PlatformCommand]:
        """Refresh (or bootstrap) the native package manager."""

    @abstractmethod
    def cloud_sdk_install_commands(self) -> list[PlatformCommand]:
        """Install the Google Cloud SDK from scratch."""

    @abstractmethod
    def runtime_upgrade_commands(self) -> list[PlatformCommand]:
        """Install or force-upgrade Node.js."""

    def warnings(self) -> list[str]:
        """Conditions worth a counted warning when this adapter is selected."""
        return []

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


# ── Shared POSIX installers ─────────────────────────────────────

GCLOUD_INSTALL_SCRIPT = "curl -fsSL https://sdk.cloud.google.com | bash -s -- --disable-prompts"


def posix_cloud_sdk_install() -> list[PlatformCommand]:
    """Google's official installer; only reachable through a shell pipeline."""
    return [
        PlatformCommand(
            "Installing Google Cloud SDK",
            ["bash", "-c", GCLOUD_INSTALL_SCRIPT],
        ),
    ]
