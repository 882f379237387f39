"""
PowerShell backed attribute provider.

Queries the storage cmdlets and CIM for disk flags, drive letters and the
locations of the page file, hibernation file and crash dumps. Every query
is memoized in the run's LookupCache.
"""

from __future__ import annotations

import json
import subprocess
import sys
import time
from typing import Any

from diskcensus.core.config import AttributeConfig
from diskcensus.core.errors import ProviderError
from diskcensus.core.logging import get_logger
from diskcensus.core.models import DiskProperties
from diskcensus.platform.base import AttributeProvider, CommandResult
from diskcensus.platform.windows.attributes import LookupCache, drive_letter_of

logger = get_logger(__name__)

DISKS_SCRIPT = """
Get-Disk | Select-Object Number, IsReadOnly, IsBoot, IsSystem, IsClustered,
    FriendlyName, SerialNumber, BusType |
ConvertTo-Json -Compress
"""

DRIVE_LETTERS_SCRIPT = """
Get-Partition | Where-Object { $_.DriveLetter } |
Select-Object DiskNumber, @{Name='DriveLetter'; Expression={[string]$_.DriveLetter}} |
ConvertTo-Json -Compress
"""

PAGEFILE_SCRIPT = """
Get-CimInstance -ClassName Win32_PageFileUsage | Select-Object Name |
ConvertTo-Json -Compress
"""

HIBERNATION_SCRIPT = """
$path = Join-Path $env:SystemDrive 'hiberfil.sys'
if (Test-Path -LiteralPath $path) { $path }
"""

CRASHDUMP_SCRIPT = """
$key = Get-ItemProperty -Path 'HKLM:\\SYSTEM\\CurrentControlSet\\Control\\CrashControl'
@($key.DumpFile, $key.MinidumpDir) | Where-Object { $_ } |
ForEach-Object { [Environment]::ExpandEnvironmentVariables($_) }
"""

BUS_TYPES = {
    1: "SCSI",
    2: "ATAPI",
    3: "ATA",
    4: "1394",
    5: "SSA",
    6: "Fibre Channel",
    7: "USB",
    8: "RAID",
    9: "iSCSI",
    10: "SAS",
    11: "SATA",
    12: "SD",
    13: "MMC",
    15: "File Backed Virtual",
    16: "Storage Spaces",
    17: "NVMe",
}


def parse_powershell_json(output: str) -> list[dict[str, Any]]:
    """Parse JSON output from PowerShell commands."""
    output = output.strip()
    if not output:
        return []

    try:
        data = json.loads(output)
        if isinstance(data, list):
            return data
        return [data]
    except json.JSONDecodeError:
        return []


def parse_bus_type(value: Any) -> str | None:
    """Bus type arrives as a name or as the MSFT_Disk enum number."""
    if value is None:
        return None
    if isinstance(value, int):
        return BUS_TYPES.get(value, str(value))
    return str(value)


def build_disk_properties(disk_data: dict[str, Any]) -> DiskProperties | None:
    """Build DiskProperties from one Get-Disk record."""
    number = disk_data.get("Number", disk_data.get("DiskNumber"))
    if number is None:
        return None

    return DiskProperties(
        number=int(number),
        is_read_only=disk_data.get("IsReadOnly"),
        is_boot=disk_data.get("IsBoot"),
        is_system=disk_data.get("IsSystem"),
        is_clustered=disk_data.get("IsClustered"),
        friendly_name=disk_data.get("FriendlyName"),
        serial_number=(disk_data.get("SerialNumber") or "").strip() or None,
        bus_type=parse_bus_type(disk_data.get("BusType")),
    )


class PowerShellDiskProvider(AttributeProvider):
    """AttributeProvider using PowerShell storage cmdlets."""

    def __init__(self, config: AttributeConfig | None = None, cache: LookupCache | None = None) -> None:
        self.config = config or AttributeConfig()
        self.cache = cache if cache is not None else LookupCache()

    def run_command(self, command: list[str], timeout: int | None = None) -> CommandResult:
        """Run a system command."""
        timeout = timeout or self.config.timeout_seconds
        logger.debug("Running command", command=command[0])
        start_time = time.time()

        kwargs: dict[str, Any] = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=timeout,
                **kwargs,
            )
            return CommandResult(
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=command,
                duration_seconds=time.time() - start_time,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
                command=command,
                duration_seconds=timeout,
            )
        except OSError as e:
            return CommandResult(
                returncode=-1,
                stdout="",
                stderr=str(e),
                command=command,
                duration_seconds=time.time() - start_time,
            )

    def _run_powershell(self, script: str) -> str:
        """Run a PowerShell script and return stdout, raising on failure."""
        cmd = [
            self.config.powershell,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy", "Bypass",
            "-Command", script,
        ]
        result = self.run_command(cmd)
        if not result.success:
            raise ProviderError(result.stderr.strip()[:500] or f"exit status {result.returncode}")
        return result.stdout

    def _query(self, key: str, script: str) -> str:
        value, reason = self.cache.fetch(f"powershell:{key}", lambda: self._run_powershell(script))
        if reason:
            raise ProviderError(reason)
        return value

    def _disks(self) -> dict[int, DiskProperties]:
        disks: dict[int, DiskProperties] = {}
        for record in parse_powershell_json(self._query("disks", DISKS_SCRIPT)):
            properties = build_disk_properties(record)
            if properties is not None:
                disks[properties.number] = properties
        return disks

    def by_disk_number(self, number: int) -> DiskProperties | None:
        return self._disks().get(number)

    def drive_letter_map(self) -> dict[str, int]:
        letters: dict[str, int] = {}
        for record in parse_powershell_json(self._query("drive_letters", DRIVE_LETTERS_SCRIPT)):
            letter = drive_letter_of(f"{record.get('DriveLetter') or ''}:")
            number = record.get("DiskNumber")
            if letter and number is not None:
                letters[letter] = int(number)
        return letters

    def pagefile_paths(self) -> list[str]:
        records = parse_powershell_json(self._query("pagefile", PAGEFILE_SCRIPT))
        return [str(r["Name"]) for r in records if r.get("Name")]

    def hibernation_file_path(self) -> str | None:
        output = self._query("hibernation", HIBERNATION_SCRIPT).strip()
        return output or None

    def crashdump_paths(self) -> list[str]:
        output = self._query("crashdump", CRASHDUMP_SCRIPT)
        return [line.strip() for line in output.splitlines() if line.strip()]
