"""
DiskCensus Platform Backend Base.

Defines the abstract interfaces for inventory backends and for the
providers that supply boolean disk attributes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from diskcensus.core.models import DiskInventory, DiskProperties


class CommandResult:
    """Result of a command execution."""

    def __init__(
        self,
        returncode: int,
        stdout: str,
        stderr: str,
        command: str | list[str],
        duration_seconds: float = 0.0,
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.command = command
        self.duration_seconds = duration_seconds

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def __repr__(self) -> str:
        cmd = self.command if isinstance(self.command, str) else " ".join(self.command)
        return f"CommandResult(rc={self.returncode}, cmd='{cmd[:50]}...')"


class InventoryBackend(ABC):
    """Abstract base class for platform-specific disk inventory."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform name (e.g., 'windows')."""

    @property
    @abstractmethod
    def requires_admin(self) -> bool:
        """Whether admin privileges are required for inventory."""

    @abstractmethod
    def is_admin(self) -> bool:
        """Check if running with admin privileges."""

    @abstractmethod
    def get_disk_inventory(self, timeout_seconds: float | None = None) -> DiskInventory:
        """Get complete disk inventory."""


class AttributeProvider(ABC):
    """
    Source of disk facts that do not come from the tool's console text.

    Any method may raise; callers treat a failure as absence of evidence.
    """

    @abstractmethod
    def by_disk_number(self, number: int) -> DiskProperties | None:
        """Flags and metadata for one disk, or None if unknown."""

    @abstractmethod
    def drive_letter_map(self) -> dict[str, int]:
        """Map of upper-case drive letter to disk number."""

    @abstractmethod
    def pagefile_paths(self) -> list[str]:
        """Paths of the active page files."""

    @abstractmethod
    def hibernation_file_path(self) -> str | None:
        """Path of the hibernation file if one exists."""

    @abstractmethod
    def crashdump_paths(self) -> list[str]:
        """Configured crash dump file and minidump directory paths."""


class NullAttributeProvider(AttributeProvider):
    """Provider with no data; every attribute fuses to False."""

    def by_disk_number(self, number: int) -> DiskProperties | None:
        return None

    def drive_letter_map(self) -> dict[str, int]:
        return {}

    def pagefile_paths(self) -> list[str]:
        return []

    def hibernation_file_path(self) -> str | None:
        return None

    def crashdump_paths(self) -> list[str]:
        return []
