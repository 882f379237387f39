"""
DiskCensus data models.

Defines the records produced by one inventory run: disks, their volumes,
connection details and boolean attributes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from diskcensus.core.units import bytes_to_human, size_to_bytes

RAW_FILESYSTEM = "RAW"
RAW_VOLUME_TYPE = "Partition"
UNFORMATTED_INFO = "Unformatted"
NO_DATA_INFO = "No volume data"


@dataclass(frozen=True)
class ConnectionInfo:
    """How a disk is attached. Values are opaque tool tokens."""

    path: str | None = None
    target: str | None = None
    lun_id: str | None = None
    location_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "target": self.target,
            "lun_id": self.lun_id,
            "location_path": self.location_path,
        }


@dataclass(frozen=True)
class AttributeSet:
    """Boolean disk attributes. Absence of evidence is False."""

    current_read_only: bool = False
    read_only: bool = False
    boot_disk: bool = False
    pagefile_disk: bool = False
    hibernation_file_disk: bool = False
    crashdump_disk: bool = False
    clustered_disk: bool = False

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in self.names()}


@dataclass(frozen=True)
class VolumeRecord:
    """One row of a disk's volume table."""

    volume: str = ""
    letter: str = ""
    label: str = ""
    filesystem: str = ""
    type: str = ""
    size: str = ""
    status: str = ""
    info: str = ""
    size_bytes: int | None = None
    size_human: str | None = None

    @classmethod
    def sentinel(cls, info: str = NO_DATA_INFO) -> VolumeRecord:
        """Placeholder used when a disk yields no volume data at all."""
        return cls(info=info)

    @classmethod
    def raw_partition(cls, partition: str, size: str) -> VolumeRecord:
        """Synthesize a record for a partition without a mounted filesystem."""
        return cls(
            volume=partition,
            filesystem=RAW_FILESYSTEM,
            type=RAW_VOLUME_TYPE,
            size=size,
            info=UNFORMATTED_INFO,
        )

    @property
    def is_sentinel(self) -> bool:
        return not self.volume and self.info == NO_DATA_INFO

    @property
    def is_raw(self) -> bool:
        return self.filesystem == RAW_FILESYSTEM

    def with_derived_size(self) -> VolumeRecord:
        """Return a copy carrying the byte count and readable size."""
        size_bytes = size_to_bytes(self.size)
        if size_bytes is None:
            return self
        return replace(self, size_bytes=size_bytes, size_human=bytes_to_human(size_bytes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "volume": self.volume,
            "letter": self.letter,
            "label": self.label,
            "filesystem": self.filesystem,
            "type": self.type,
            "size": self.size,
            "status": self.status,
            "info": self.info,
            "size_bytes": self.size_bytes,
            "size_human": self.size_human,
        }


@dataclass(frozen=True)
class EnumeratedDisk:
    """One row of the disk enumeration table."""

    number: int
    status: str = ""
    size: str = ""
    free: str = ""
    is_dynamic: bool = False
    is_gpt: bool = False


@dataclass(frozen=True)
class DiskProperties:
    """Disk flags and metadata from the system management interface."""

    number: int
    is_read_only: bool | None = None
    is_boot: bool | None = None
    is_system: bool | None = None
    is_clustered: bool | None = None
    friendly_name: str | None = None
    serial_number: str | None = None
    bus_type: str | None = None


@dataclass(frozen=True)
class DiskRecord:
    """One physical disk and its volumes."""

    number: int
    bus_type: str = ""
    description: str = ""
    disk_id: str = ""
    connection: ConnectionInfo = field(default_factory=ConnectionInfo)
    attributes: AttributeSet = field(default_factory=AttributeSet)
    volumes: tuple[VolumeRecord, ...] = (VolumeRecord.sentinel(),)
    status: str = ""
    size: str = ""
    free: str = ""
    is_dynamic: bool = False
    is_gpt: bool = False
    model: str = ""
    serial: str = ""

    @property
    def size_bytes(self) -> int | None:
        return size_to_bytes(self.size)

    @property
    def display_name(self) -> str:
        """Human-readable name for display."""
        return self.model or self.description or f"Disk {self.number}"

    @property
    def has_volume_data(self) -> bool:
        return not (len(self.volumes) == 1 and self.volumes[0].is_sentinel)

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "bus_type": self.bus_type,
            "description": self.description,
            "disk_id": self.disk_id,
            "status": self.status,
            "size": self.size,
            "size_bytes": self.size_bytes,
            "free": self.free,
            "is_dynamic": self.is_dynamic,
            "is_gpt": self.is_gpt,
            "model": self.model,
            "serial": self.serial,
            "connection": self.connection.to_dict(),
            "attributes": self.attributes.to_dict(),
            "volumes": [v.to_dict() for v in self.volumes],
        }


@dataclass
class DiskInventory:
    """Complete inventory of all disks in the system."""

    disks: list[DiskRecord] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)
    platform: str = ""
    errors: list[str] = field(default_factory=list)

    @property
    def total_disks(self) -> int:
        return len(self.disks)

    @property
    def total_volumes(self) -> int:
        return sum(1 for d in self.disks for v in d.volumes if not v.is_sentinel)

    @property
    def total_capacity_bytes(self) -> int:
        return sum(d.size_bytes or 0 for d in self.disks)

    def get_disk(self, number: int) -> DiskRecord | None:
        """Find disk by its ordinal number."""
        for disk in self.disks:
            if disk.number == number:
                return disk
        return None

    def filter(self, numbers: set[int] | list[int] | tuple[int, ...]) -> DiskInventory:
        """Return an inventory restricted to the given disk numbers."""
        wanted = set(numbers)
        return DiskInventory(
            disks=[d for d in self.disks if d.number in wanted],
            timestamp=self.timestamp,
            platform=self.platform,
            errors=list(self.errors),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "platform": self.platform,
            "total_disks": self.total_disks,
            "total_volumes": self.total_volumes,
            "total_capacity_bytes": self.total_capacity_bytes,
            "disks": [d.to_dict() for d in self.disks],
            "errors": self.errors,
        }
