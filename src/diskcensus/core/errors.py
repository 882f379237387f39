"""
DiskCensus error taxonomy.

Process-invocation failures abort an inventory run. Parse degradation and
attribute lookups never raise past the platform layer.
"""

from __future__ import annotations

from pathlib import Path


class CensusError(Exception):
    """Base class for fatal inventory failures."""


class ToolLaunchError(CensusError):
    """The external tool could not be started."""

    def __init__(self, command: list[str], reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to launch {command[0] if command else '<empty>'}: {reason}")


class ToolTimeoutError(CensusError):
    """The external tool did not finish before its deadline."""

    def __init__(self, command: list[str], timeout_seconds: float) -> None:
        self.command = command
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"{command[0] if command else 'Command'} timed out after {timeout_seconds:g}s"
        )


class CaptureError(CensusError):
    """The output sink was missing after the tool finished."""

    def __init__(self, sink_path: Path) -> None:
        self.sink_path = sink_path
        super().__init__(f"Tool output was not captured: {sink_path} is missing")


class NoDisksDetectedError(CensusError):
    """Enumeration succeeded but listed no disks."""

    def __init__(self) -> None:
        super().__init__("No disks detected in enumeration output")


class ProviderError(Exception):
    """An attribute provider query failed."""
