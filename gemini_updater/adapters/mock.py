"""
Mock adapter — test double for platform-specific commands.

Supplies harmless, recognisable argument vectors so orchestration can
be exercised without any real package manager.
"""

from __future__ import annotations

from gemini_updater.adapters.base import PlatformAdapter, PlatformCommand


class MockPlatformAdapter(PlatformAdapter):
    """Adapter whose commands are ``mockpm <verb>``."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        system: str | None = None,
        warnings: list[str] | None = None,
    ):
        super().__init__(lambda name: None)
        self._name = adapter_name
        self._available = available
        self._system = system
        self._warnings = list(warnings or [])

    @property
    def name(self) -> str:
        return self._name

    def supports(self, system: str) -> bool:
        return self._system is None or system == self._system

    def is_available(self) -> bool:
        return self._available

    def refresh_commands(self) -> list[PlatformCommand]:
        return [PlatformCommand("Refreshing mock package manager", ["mockpm", "refresh"])]

    def cloud_sdk_install_commands(self) -> list[PlatformCommand]:
        return [PlatformCommand("Installing Google Cloud SDK", ["mockpm", "install", "gcloud"])]

    def runtime_upgrade_commands(self) -> list[PlatformCommand]:
        return [PlatformCommand("Upgrading Node.js", ["mockpm", "install", "--force", "node"])]

    def warnings(self) -> list[str]:
        return list(self._warnings)
