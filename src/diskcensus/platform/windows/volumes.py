"""
Volume row parsers for "detail disk" blocks.

Three parsers are tried in a fixed order and the first one that returns
rows wins:

1. ``parse_span_rows`` slices volume tables on their divider columns.
2. ``parse_token_rows`` classifies loosely separated columns against a
   small English vocabulary, for blocks whose table layout is broken.
3. ``parse_partition_rows`` turns partition table rows into RAW volumes so
   unformatted disks still show up.

A block none of them understands yields a single sentinel record.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from diskcensus.core.logging import get_logger
from diskcensus.core.models import VolumeRecord
from diskcensus.core.units import SIZE_PATTERN
from diskcensus.platform.windows.parsers import find_tables, slice_padded, split_columns

logger = get_logger(__name__)

VOLUME_FIELDS = 8
PARTITION_FIELDS = 4
# Partition tables have four columns, volume tables eight
PARTITION_MAX_COLUMNS = 4

DRIVE_LETTER = re.compile(r"^[A-Za-z]$")
FILESYSTEMS = frozenset({"NTFS", "FAT", "FAT32", "EXFAT", "REFS", "CDFS", "UDF", "RAW"})
VOLUME_TYPES = frozenset(
    {"PARTITION", "SIMPLE", "SPANNED", "STRIPED", "MIRROR", "RAID-5", "REMOVABLE", "DVD-ROM", "CD-ROM"}
)
STATUSES = frozenset(
    {"HEALTHY", "FAILED", "FAILED RD", "MISSING", "NO MEDIA", "OFFLINE", "ONLINE", "REBUILD", "AT RISK", "UNKNOWN"}
)
INFOS = frozenset({"BOOT", "SYSTEM", "HIDDEN", "PAGEFILE", "CRASHDUMP", "HIBERNATION"})

RowParser = Callable[[list[str]], list[VolumeRecord]]

# Checked in order; a token goes to the first matching field still empty
TOKEN_CLASSIFIERS: list[tuple[str, Callable[[str], bool]]] = [
    ("letter", lambda token: bool(DRIVE_LETTER.match(token))),
    ("filesystem", lambda token: token.upper() in FILESYSTEMS),
    ("type", lambda token: token.upper() in VOLUME_TYPES),
    ("size", lambda token: bool(SIZE_PATTERN.match(token))),
    ("status", lambda token: token.upper() in STATUSES),
    ("info", lambda token: token.upper() in INFOS),
]


def parse_span_rows(block: list[str]) -> list[VolumeRecord]:
    """Parse every volume table in the block by its column spans."""
    records: list[VolumeRecord] = []

    for table in find_tables(block):
        if table.column_count <= PARTITION_MAX_COLUMNS:
            continue
        for row in table.rows:
            volume, letter, label, filesystem, vol_type, size, status, info = slice_padded(
                row, VOLUME_FIELDS
            )
            records.append(
                VolumeRecord(
                    volume=volume,
                    letter=letter,
                    label=label,
                    filesystem=filesystem,
                    type=vol_type,
                    size=size,
                    status=status,
                    info=info,
                )
            )

    return records


def classify_columns(columns: list[str]) -> dict[str, str]:
    """Assign column values to volume fields by vocabulary."""
    values: dict[str, str] = {}

    for column in columns:
        for name, matches in TOKEN_CLASSIFIERS:
            if name not in values and matches(column):
                values[name] = column
                break
        else:
            values.setdefault("label", column)

    return values


def parse_token_rows(block: list[str]) -> list[VolumeRecord]:
    """
    Parse numbered lines by classifying their columns.

    Lines without a drive letter, filesystem or volume type are not volume
    rows (partition rows look the same at this level) and are skipped.
    """
    records: list[VolumeRecord] = []

    for line in block:
        parsed = split_columns(line)
        if parsed is None:
            continue
        volume, columns = parsed
        values = classify_columns(columns)
        if not any(key in values for key in ("letter", "filesystem", "type")):
            continue
        records.append(VolumeRecord(volume=volume, **values))

    return records


def parse_partition_rows(block: list[str]) -> list[VolumeRecord]:
    """Synthesize RAW volume records from the partition table."""
    partitions: list[tuple[str, str]] = []

    for table in find_tables(block):
        if table.column_count > PARTITION_MAX_COLUMNS:
            continue
        for row in table.rows:
            token, _part_type, size, _offset = slice_padded(row, PARTITION_FIELDS)
            partitions.append((token, size))

    if not partitions:
        for line in block:
            parsed = split_columns(line)
            if parsed is None:
                continue
            token, columns = parsed
            # "Partition 1    Primary    465 GB  1024 KB": type, size, offset
            if len(columns) == 3 and all(SIZE_PATTERN.match(c) for c in columns[1:]):
                partitions.append((token, columns[1]))

    return [VolumeRecord.raw_partition(token, size) for token, size in partitions]


ROW_PARSERS: list[tuple[str, RowParser]] = [
    ("span", parse_span_rows),
    ("token", parse_token_rows),
    ("partition", parse_partition_rows),
]


def parse_volume_rows(block: list[str], disk_number: int | None = None) -> list[VolumeRecord]:
    """Run the row parsers in order; never returns an empty list."""
    for tier, parser in ROW_PARSERS:
        records = parser(block)
        if records:
            logger.debug("Parsed volume rows", disk=disk_number, tier=tier, rows=len(records))
            return records

    logger.debug("No volume rows found, using placeholder", disk=disk_number, lines=len(block))
    return [VolumeRecord.sentinel()]
