"""
DiskCensus Core - Models, configuration, logging and export.

Contains the data model shared by the platform translators and the
ambient services used by every layer.
"""

from diskcensus.core.config import CensusConfig
from diskcensus.core.errors import (
    CaptureError,
    CensusError,
    NoDisksDetectedError,
    ProviderError,
    ToolLaunchError,
    ToolTimeoutError,
)
from diskcensus.core.logging import get_logger, setup_logging

__all__ = [
    "CensusConfig",
    "CensusError",
    "CaptureError",
    "NoDisksDetectedError",
    "ProviderError",
    "ToolLaunchError",
    "ToolTimeoutError",
    "get_logger",
    "setup_logging",
]
