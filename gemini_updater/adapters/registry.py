"""
Platform registry — resolves the adapter for this machine once at startup.

Adapters are tried in registration order; the first one that supports
the current OS and is available wins. The unmanaged adapters are the
catch-all for machines without a native package manager.
"""

from __future__ import annotations

import logging
import platform
import shutil
from typing import Any

from gemini_updater.adapters.base import PlatformAdapter, WhichFn
from gemini_updater.adapters.chocolatey import ChocolateyAdapter
from gemini_updater.adapters.homebrew import HomebrewAdapter
from gemini_updater.adapters.unmanaged import UnmanagedAdapter

logger = logging.getLogger(__name__)


class UnsupportedPlatformError(Exception):
    """Raised when no adapter supports the current operating system."""


class PlatformRegistry:
    """Ordered collection of platform adapters."""

    def __init__(self, which_fn: WhichFn = shutil.which, register_defaults: bool = True):
        self._adapters: dict[str, PlatformAdapter] = {}
        if register_defaults:
            for adapter in (
                HomebrewAdapter(which_fn),
                ChocolateyAdapter(which_fn),
                UnmanagedAdapter(windows=False, which_fn=which_fn),
                UnmanagedAdapter(windows=True, which_fn=which_fn),
            ):
                self.register(adapter)

    def register(self, adapter: PlatformAdapter) -> None:
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters.keys())

    def adapter_status(self, system: str | None = None) -> dict[str, dict[str, Any]]:
        """Availability of every registered adapter on ``system``."""
        system = system or platform.system()
        status = {}
        for name, adapter in self._adapters.items():
            try:
                available = adapter.supports(system) and adapter.is_available()
            except Exception:
                available = False
            status[name] = {
                "name": name,
                "available": available,
                "type": adapter.__class__.__name__,
            }
        return status

    def resolve(self, system: str | None = None) -> PlatformAdapter:
        """Pick the adapter for ``system`` (default: ``platform.system()``).

        Raises:
            UnsupportedPlatformError: No registered adapter supports ``system``.
        """
        system = system or platform.system()
        for adapter in self._adapters.values():
            if adapter.supports(system) and adapter.is_available():
                logger.debug("Platform %s resolved to adapter %s", system, adapter.name)
                return adapter
        raise UnsupportedPlatformError(
            f"Unsupported operating system: {system or 'unknown'} "
            "(supported: Windows, macOS, Linux)"
        )
