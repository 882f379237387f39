"""
Pytest configuration and fixtures for DiskCensus tests.
"""

import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from diskcensus.core.config import CensusConfig, DiskpartConfig  # noqa: E402

Column = tuple[str, int, str]

DISK_COLUMNS: list[Column] = [
    ("Disk ###", 8, "l"),
    ("Status", 13, "l"),
    ("Size", 7, "r"),
    ("Free", 7, "r"),
    ("Dyn", 3, "c"),
    ("Gpt", 3, "c"),
]
VOLUME_COLUMNS: list[Column] = [
    ("Volume ###", 10, "l"),
    ("Ltr", 3, "c"),
    ("Label", 11, "l"),
    ("Fs", 5, "l"),
    ("Type", 10, "l"),
    ("Size", 7, "r"),
    ("Status", 9, "l"),
    ("Info", 8, "l"),
]
PARTITION_COLUMNS: list[Column] = [
    ("Partition ###", 13, "l"),
    ("Type", 16, "l"),
    ("Size", 7, "r"),
    ("Offset", 7, "r"),
]

BANNER = [
    "",
    "Microsoft DiskPart version 10.0.19041.3636",
    "",
    "Copyright (C) 1999-2013 Microsoft Corporation.",
    "On computer: WORKSTATION",
    "",
]


def render_table(columns: list[Column], rows: list[list[str]], divider: bool = True) -> list[str]:
    """Render a table the way diskpart lays it out."""

    def cell(value: str, width: int, align: str) -> str:
        if align == "r":
            return value.rjust(width)
        if align == "c":
            return value.center(width)
        return value.ljust(width)

    lines = ["  " + "  ".join(title.ljust(width) for title, width, _ in columns)]
    if divider:
        lines.append("  " + "  ".join("-" * width for _, width, _ in columns))
    for row in rows:
        cells = [cell(value, width, align) for value, (_, width, align) in zip(row, columns)]
        lines.append(("  " + "  ".join(cells)).rstrip())
    return [line.rstrip() for line in lines]


def detail_preamble(number: int, model: str, disk_id: str, bus: str, location: str) -> list[str]:
    return [
        f"Disk {number} is now the selected disk.",
        "",
        model,
        f"Disk ID: {disk_id}",
        f"Type   : {bus}",
        "Status : Online",
        "Path   : 0",
        f"Target : {number}",
        "LUN ID : 0",
        f"Location Path : {location}",
        "Current Read-only State : No",
        "Read-only  : No",
        "Boot Disk  : Yes" if number == 0 else "Boot Disk  : No",
        "Pagefile Disk  : Yes" if number == 0 else "Pagefile Disk  : No",
        "Hibernation File Disk  : No",
        "Crashdump Disk  : Yes" if number == 0 else "Crashdump Disk  : No",
        "Clustered Disk  : No",
        "",
    ]


SYSTEM_DISK_VOLUMES = [
    ["Volume 1", "C", "Windows", "NTFS", "Partition", "930 GB", "Healthy", "Boot"],
    ["Volume 2", "", "", "FAT32", "Partition", "100 MB", "Healthy", "System"],
    ["Volume 3", "", "", "NTFS", "Partition", "768 MB", "Healthy", "Hidden"],
]
SYSTEM_DISK_PARTITIONS = [
    ["Partition 1", "System", "100 MB", "1024 KB"],
    ["Partition 2", "Reserved", "16 MB", "101 MB"],
    ["Partition 3", "Primary", "930 GB", "117 MB"],
    ["Partition 4", "Recovery", "768 MB", "930 GB"],
]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def census_config(temp_dir: Path) -> CensusConfig:
    """Configuration whose temporary files stay inside the test directory."""
    return CensusConfig(diskpart=DiskpartConfig(temp_directory=temp_dir))


@pytest.fixture
def table_renderer() -> Callable[..., list[str]]:
    return render_table


@pytest.fixture
def volume_columns() -> list[Column]:
    return VOLUME_COLUMNS


@pytest.fixture
def partition_columns() -> list[Column]:
    return PARTITION_COLUMNS


@pytest.fixture
def list_disk_output() -> list[str]:
    """Enumeration capture listing disks 0 and 1."""
    return BANNER + render_table(
        DISK_COLUMNS,
        [
            ["Disk 0", "Online", "953 GB", "0 B", "", "*"],
            ["Disk 1", "Online", "1863 GB", "1024 KB", "", "*"],
        ],
    ) + [""]


@pytest.fixture
def system_disk_block() -> list[str]:
    """Detail block of an NVMe system disk with a volume and a partition table."""
    return (
        detail_preamble(
            0,
            "Samsung SSD 970 EVO Plus 1TB",
            "{6E1B3C4A-52D1-4F2B-9A7C-0D3E5F6A7B8C}",
            "NVMe",
            "PCIROOT(0)#PCI(0104)#PCI(0000)#NVME(P00T00L00)",
        )[1:]
        + render_table(VOLUME_COLUMNS, SYSTEM_DISK_VOLUMES)
        + [""]
        + render_table(PARTITION_COLUMNS, SYSTEM_DISK_PARTITIONS)
        + [""]
    )


@pytest.fixture
def unformatted_disk_block() -> list[str]:
    """Detail block of a disk with one partition and no volumes."""
    return (
        detail_preamble(1, "ST2000DM008-2FR102", "{0A1B2C3D-0000-4000-8000-112233445566}", "SATA", "UNAVAILABLE")[1:]
        + ["There are no volumes.", ""]
        + render_table(PARTITION_COLUMNS, [["Partition 1", "Primary", "1863 GB", "1024 KB"]])
        + [""]
    )


@pytest.fixture
def detail_output(system_disk_block: list[str]) -> list[str]:
    """Batched detail capture for disks 0 and 1, both with volume tables."""
    data_disk = detail_preamble(
        1, "WDC WD20EZAZ-00GGJB0", "{11223344-5566-4778-899A-ABBCCDDEEFF0}", "SATA", "UNAVAILABLE"
    ) + render_table(
        VOLUME_COLUMNS,
        [["Volume 4", "D", "Data", "NTFS", "Partition", "1863 GB", "Healthy", ""]],
    ) + [""] + render_table(
        PARTITION_COLUMNS, [["Partition 1", "Primary", "1863 GB", "1024 KB"]]
    ) + [""]

    return BANNER + ["Disk 0 is now the selected disk."] + system_disk_block + data_disk


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
