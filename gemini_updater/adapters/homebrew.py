"""
Homebrew adapter — macOS and Linux machines with ``brew`` on PATH.
"""

from __future__ import annotations

from gemini_updater.adapters.base import (
    PlatformAdapter,
    PlatformCommand,
    posix_cloud_sdk_install,
)


class HomebrewAdapter(PlatformAdapter):
    """Native package manager: Homebrew."""

    @property
    def name(self) -> str:
        return "homebrew"

    def supports(self, system: str) -> bool:
        return system in ("Darwin", "Linux")

    def is_available(self) -> bool:
        return self._which("brew") is not None

    def refresh_commands(self) -> list[PlatformCommand]:
        return [
            PlatformCommand("Updating Homebrew package database", ["brew", "update"]),
            PlatformCommand("Upgrading all Homebrew packages to latest versions", ["brew", "upgrade"]),
        ]

    def cloud_sdk_install_commands(self) -> list[PlatformCommand]:
        return posix_cloud_sdk_install()

    def runtime_upgrade_commands(self) -> list[PlatformCommand]:
        return [
            PlatformCommand(
                "Installing/upgrading Node.js via Homebrew (force reinstall)",
                ["brew", "install", "--force", "node"],
            ),
        ]
