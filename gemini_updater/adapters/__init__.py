"""Adapters — native package-manager bindings per platform.

Public re-exports for convenient access.
"""

from gemini_updater.adapters.base import PlatformAdapter, PlatformCommand
from gemini_updater.adapters.chocolatey import ChocolateyAdapter
from gemini_updater.adapters.homebrew import HomebrewAdapter
from gemini_updater.adapters.mock import MockPlatformAdapter
from gemini_updater.adapters.registry import PlatformRegistry, UnsupportedPlatformError
from gemini_updater.adapters.unmanaged import UnmanagedAdapter

__all__ = [
    "ChocolateyAdapter",
    "HomebrewAdapter",
    "MockPlatformAdapter",
    "PlatformAdapter",
    "PlatformCommand",
    "PlatformRegistry",
    "UnmanagedAdapter",
    "UnsupportedPlatformError",
]
