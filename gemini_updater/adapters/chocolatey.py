"""
Chocolatey adapter — Windows machines with ``choco`` on PATH.
"""

from __future__ import annotations

from gemini_updater.adapters.base import PlatformAdapter, PlatformCommand


class ChocolateyAdapter(PlatformAdapter):
    """Native package manager: Chocolatey."""

    choco = "choco"

    @property
    def name(self) -> str:
        return "chocolatey"

    def supports(self, system: str) -> bool:
        return system == "Windows"

    def is_available(self) -> bool:
        return self._which("choco") is not None

    def refresh_commands(self) -> list[PlatformCommand]:
        return [
            PlatformCommand("Upgrading Chocolatey", [self.choco, "upgrade", "chocolatey", "-y"]),
            PlatformCommand("Upgrading all Chocolatey packages", [self.choco, "upgrade", "all", "-y"]),
        ]

    def cloud_sdk_install_commands(self) -> list[PlatformCommand]:
        return [
            PlatformCommand(
                "Installing Google Cloud SDK via Chocolatey",
                [self.choco, "install", "gcloudsdk", "-y"],
            ),
        ]

    def runtime_upgrade_commands(self) -> list[PlatformCommand]:
        return [
            PlatformCommand(
                "Installing/upgrading Node.js via Chocolatey (force reinstall)",
                [self.choco, "upgrade", "nodejs", "-y", "--force"],
            ),
        ]
