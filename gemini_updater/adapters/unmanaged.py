"""
Unmanaged adapter — no native package manager found.

Step 1 bootstraps one (Homebrew on POSIX, Chocolatey on Windows).
Because PATH is resolved once at startup, the freshly installed
manager is not assumed to be callable by name in the same run: on
POSIX Node.js comes from nvm, on Windows Chocolatey is invoked by its
default install location.
"""

from __future__ import annotations

import os
import shutil

from gemini_updater.adapters.base import (
    PlatformAdapter,
    PlatformCommand,
    WhichFn,
    posix_cloud_sdk_install,
)
from gemini_updater.adapters.chocolatey import ChocolateyAdapter

HOMEBREW_INSTALL_SCRIPT = (
    'NONINTERACTIVE=1 /bin/bash -c '
    '"$(curl -fsSL https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh)"'
)
NVM_INSTALL_SCRIPT = "curl -o- https://raw.githubusercontent.com/nvm-sh/nvm/v0.39.0/install.sh | bash"
NVM_NODE_SCRIPT = (
    'export NVM_DIR="${NVM_DIR:-$HOME/.nvm}"; '
    '. "$NVM_DIR/nvm.sh" && nvm install node --latest-npm'
)
CHOCOLATEY_INSTALL_SCRIPT = (
    "[System.Net.ServicePointManager]::SecurityProtocol = "
    "[System.Net.ServicePointManager]::SecurityProtocol -bor 3072; "
    "iex ((New-Object System.Net.WebClient).DownloadString("
    "'https://community.chocolatey.org/install.ps1'))"
)


def default_choco_path() -> str:
    root = os.environ.get("ProgramData", r"C:\ProgramData")
    return os.path.join(root, "chocolatey", "bin", "choco.exe")


class UnmanagedAdapter(PlatformAdapter):
    """Fallback when neither Homebrew nor Chocolatey is on PATH."""

    def __init__(self, windows: bool = False, which_fn: WhichFn = shutil.which):
        super().__init__(which_fn)
        self._windows = windows

    @property
    def name(self) -> str:
        return "unmanaged-windows" if self._windows else "unmanaged-posix"

    def supports(self, system: str) -> bool:
        if self._windows:
            return system == "Windows"
        return system in ("Darwin", "Linux")

    def is_available(self) -> bool:
        return True

    def refresh_commands(self) -> list[PlatformCommand]:
        if self._windows:
            return [
                PlatformCommand(
                    "Installing Chocolatey package manager",
                    ["powershell", "-NoProfile", "-ExecutionPolicy", "Bypass",
                     "-Command", CHOCOLATEY_INSTALL_SCRIPT],
                ),
            ]
        return [
            PlatformCommand(
                "Installing Homebrew package manager",
                ["bash", "-c", HOMEBREW_INSTALL_SCRIPT],
            ),
        ]

    def cloud_sdk_install_commands(self) -> list[PlatformCommand]:
        if self._windows:
            return self._bootstrapped_choco().cloud_sdk_install_commands()
        return posix_cloud_sdk_install()

    def runtime_upgrade_commands(self) -> list[PlatformCommand]:
        if self._windows:
            return self._bootstrapped_choco().runtime_upgrade_commands()
        return [
            PlatformCommand("Installing NVM (Node Version Manager)", ["bash", "-c", NVM_INSTALL_SCRIPT]),
            PlatformCommand("Installing latest Node.js via NVM", ["bash", "-c", NVM_NODE_SCRIPT]),
        ]

    def warnings(self) -> list[str]:
        if self._windows:
            return ["Chocolatey not found; it will be installed before Node.js"]
        return ["Homebrew not found; Node.js will be installed via nvm"]

    def _bootstrapped_choco(self) -> ChocolateyAdapter:
        adapter = ChocolateyAdapter(self._which)
        adapter.choco = default_choco_path()
        return adapter
