"""
DiskCensus Platform Abstraction Layer.

Provides the platform-specific inventory implementation.
"""

from __future__ import annotations

import platform

from diskcensus.core.config import CensusConfig
from diskcensus.platform.base import AttributeProvider, InventoryBackend, NullAttributeProvider


def get_platform_backend(config: CensusConfig | None = None) -> InventoryBackend:
    """Get the appropriate platform backend for the current OS."""
    system = get_platform_name()

    if system == "windows":
        from diskcensus.platform.windows import WindowsBackend

        return WindowsBackend(config)
    else:
        raise RuntimeError(f"Unsupported platform: {system}")


def get_platform_name() -> str:
    """Get the current platform name."""
    return platform.system().lower()


__all__ = [
    "AttributeProvider",
    "InventoryBackend",
    "NullAttributeProvider",
    "get_platform_backend",
    "get_platform_name",
]
