"""
Windows Platform Backend Implementation.

Builds the disk inventory from two diskpart runs:
- "list disk" to enumerate disk numbers
- one batched "select disk / detail disk / list partition" script for all disks
"""

from __future__ import annotations

import ctypes
from collections.abc import Callable
from datetime import datetime

from diskcensus.core.config import CensusConfig
from diskcensus.core.errors import NoDisksDetectedError
from diskcensus.core.logging import OperationLogger, get_logger
from diskcensus.core.models import DiskInventory, DiskRecord, EnumeratedDisk
from diskcensus.platform.base import AttributeProvider, InventoryBackend, NullAttributeProvider
from diskcensus.platform.windows.attributes import AttributeFuser, LookupCache
from diskcensus.platform.windows.parsers import (
    ENUMERATION_SCRIPT,
    build_detail_script,
    parse_detail_header,
    parse_disk_list,
    split_detail_sections,
)
from diskcensus.platform.windows.providers import PowerShellDiskProvider
from diskcensus.platform.windows.runner import BoundedProcessRunner
from diskcensus.platform.windows.volumes import parse_volume_rows

logger = get_logger(__name__)

ProviderFactory = Callable[[LookupCache], AttributeProvider]


def assemble_disk_record(
    disk: EnumeratedDisk,
    block: list[str],
    fuser: AttributeFuser,
) -> DiskRecord:
    """Build one DiskRecord from its enumeration row and detail block."""
    header = parse_detail_header(block)
    volumes = tuple(v.with_derived_size() for v in parse_volume_rows(block, disk.number))
    properties = fuser.properties(disk.number)

    return DiskRecord(
        number=disk.number,
        bus_type=header.bus_type or (properties.bus_type if properties and properties.bus_type else ""),
        description=header.description,
        disk_id=header.disk_id,
        connection=header.connection,
        attributes=fuser.fuse(disk.number),
        volumes=volumes,
        status=disk.status or header.status,
        size=disk.size,
        free=disk.free,
        is_dynamic=disk.is_dynamic,
        is_gpt=disk.is_gpt,
        model=(properties.friendly_name or "") if properties else "",
        serial=(properties.serial_number or "") if properties else "",
    )


class WindowsBackend(InventoryBackend):
    """Windows implementation of disk inventory."""

    def __init__(
        self,
        config: CensusConfig | None = None,
        runner: BoundedProcessRunner | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> None:
        self.config = config or CensusConfig()
        self.runner = runner or BoundedProcessRunner(self.config.diskpart)
        self.provider_factory = provider_factory or self._default_provider

    @property
    def name(self) -> str:
        return "windows"

    @property
    def requires_admin(self) -> bool:
        return True

    def is_admin(self) -> bool:
        try:
            return ctypes.windll.shell32.IsUserAnAdmin() != 0
        except Exception:
            return False

    def _default_provider(self, cache: LookupCache) -> AttributeProvider:
        if not self.config.attributes.enabled:
            return NullAttributeProvider()
        return PowerShellDiskProvider(self.config.attributes, cache)

    def enumerate_disks(self, timeout_seconds: float | None = None) -> list[EnumeratedDisk]:
        """Run the enumeration script and return the listed disks."""
        lines = self.runner.run(ENUMERATION_SCRIPT, timeout_seconds)
        disks = parse_disk_list(lines)
        if not disks:
            raise NoDisksDetectedError()
        return disks

    def get_disk_inventory(self, timeout_seconds: float | None = None) -> DiskInventory:
        """Get complete disk inventory using diskpart."""
        inventory = DiskInventory(platform=self.name)

        with OperationLogger("disk inventory", logger) as op:
            disks = self.enumerate_disks(timeout_seconds)
            numbers = [d.number for d in disks]
            op.update(disk_numbers=numbers)

            detail = self.runner.run(build_detail_script(numbers), timeout_seconds)
            sections = split_detail_sections(detail, numbers)

            cache = LookupCache()
            fuser = AttributeFuser(self.provider_factory(cache), cache)

            for disk in disks:
                block = sections.get(disk.number, [])
                try:
                    record = assemble_disk_record(disk, block, fuser)
                except Exception as e:
                    inventory.errors.append(
                        op.issue(f"Failed to parse disk {disk.number}: {e}", disk_number=disk.number)
                    )
                    record = DiskRecord(number=disk.number, status=disk.status, size=disk.size, free=disk.free)
                inventory.disks.append(record)

        inventory.timestamp = datetime.now()
        return inventory
