"""
diskpart output parsers.

Column boundaries come from the tool's own dash dividers, and numbered rows
are recognised by the trailing number in their first column, so table
parsing does not depend on the language of the header text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from diskcensus.core.models import ConnectionInfo, EnumeratedDisk
from diskcensus.core.units import SIZE_PATTERN

ENUMERATION_SCRIPT = ["list disk"]

DIVIDER_CHAR = "-"
DASH_RUN = re.compile(r"-+")
HEADER_WORD = re.compile(r"\S+")
NUMBER_MARKER = "###"
HEADER_PATTERN = re.compile(r"^\s*\S+\s+###(?=\s|$)")
ROW_NUMBER = re.compile(r"^\*?\s*(?:\S+\s+)?(\d+)$")
KEY_VALUE = re.compile(r"^\s*([^:]+?)\s*:\s*(.*?)\s*$")
# English-only: the tool prints this after "select disk N"
SELECTED_MARKER = re.compile(r"^\s*Disk\s+(\d+)\s+is\s+now\s+the\s+selected\s+disk", re.IGNORECASE)
LEADING_NUMBERED = re.compile(r"^\s*\*?\s*(\S+\s+\d+)(?=\s|$)(.*)$")
COLUMN_GAP = re.compile(r"\s{2,}")

# Order of the "key : value" lines that follow the description in "detail disk"
DETAIL_FIELDS = ("disk_id", "bus_type", "status", "path", "target", "lun_id", "location_path")

Span = tuple[int, int]


@dataclass
class TextTable:
    """A numbered table found in a capture."""

    header_index: int
    spans: list[Span]
    rows: list[list[str]] = field(default_factory=list)

    @property
    def column_count(self) -> int:
        return len(self.spans)


@dataclass
class DetailHeader:
    """Facts from the key/value preamble of a "detail disk" block."""

    description: str = ""
    disk_id: str = ""
    bus_type: str = ""
    status: str = ""
    connection: ConnectionInfo = field(default_factory=ConnectionInfo)


def compute_spans(header: str, divider: str | None = None) -> list[Span]:
    """
    Compute (start, length) column spans for a fixed-width table.

    Each dash run in the divider is one column. Without a usable divider
    each run of non-space characters in the header is one column, which
    misaligns titles that contain a space.
    """
    if divider and DIVIDER_CHAR in divider:
        return [(m.start(), m.end() - m.start()) for m in DASH_RUN.finditer(divider)]

    spans = [(m.start(), m.end() - m.start()) for m in HEADER_WORD.finditer(header)]
    if not spans and header:
        # Blank header: the whole line is one column
        return [(0, len(header))]
    return spans


def join_number_column(header: str, spans: list[Span]) -> list[Span]:
    """Merge a header-derived "Volume" + "###" span pair into one column."""
    if len(spans) < 2:
        return spans
    (first, _), (start, length) = spans[0], spans[1]
    if header[start:start + length] != NUMBER_MARKER:
        return spans
    return [(first, start + length - first)] + spans[2:]


def slice_fields(line: str, spans: list[Span], count: int | None = None) -> list[str]:
    """
    Slice a row into trimmed fields.

    A field runs from its span start to the next span start; the last field
    runs to the end of the line. With ``count`` the result is padded with
    empty strings or truncated to exactly that many fields.
    """
    values: list[str] = []
    for index, (start, _length) in enumerate(spans):
        end = spans[index + 1][0] if index + 1 < len(spans) else len(line)
        values.append(line[start:end].strip())

    if count is not None:
        values = slice_padded(values, count)
    return values


def slice_padded(values: list[str], count: int) -> list[str]:
    return (values + [""] * count)[:count]


def row_number(value: str) -> int | None:
    """Return the row number of a first-column value like 'Volume 3'."""
    match = ROW_NUMBER.match(value.strip())
    return int(match.group(1)) if match else None


def is_table_header(line: str) -> bool:
    return bool(HEADER_PATTERN.match(line))


def is_divider(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and DIVIDER_CHAR in stripped and set(stripped) <= {DIVIDER_CHAR, " "}


def find_tables(lines: list[str]) -> list[TextTable]:
    """
    Find every numbered table in ``lines``.

    Rows are consumed after each header (and its divider, when present) until
    the first line whose first field carries no row number.
    """
    tables: list[TextTable] = []
    index = 0

    while index < len(lines):
        if not is_table_header(lines[index]):
            index += 1
            continue

        header = lines[index]
        cursor = index + 1
        divider = None
        if cursor < len(lines) and is_divider(lines[cursor]):
            divider = lines[cursor]
            cursor += 1

        spans = compute_spans(header, divider)
        if divider is None:
            spans = join_number_column(header, spans)

        table = TextTable(header_index=index, spans=spans)
        while cursor < len(lines) and table.spans:
            fields = slice_fields(lines[cursor], table.spans)
            if row_number(fields[0]) is None:
                break
            table.rows.append(fields)
            cursor += 1

        tables.append(table)
        index = cursor

    return tables


def split_columns(line: str) -> tuple[str, list[str]] | None:
    """
    Split a numbered line on runs of two or more spaces.

    Returns the leading "token N" value and the remaining column values, or
    None when the line does not start with a numbered token.
    """
    match = LEADING_NUMBERED.match(line)
    if not match:
        return None

    rest = match.group(2).strip()
    return match.group(1), [part for part in COLUMN_GAP.split(rest) if part]


def split_detail_sections(
    lines: list[str],
    disk_numbers: list[int] | None = None,
) -> dict[int, list[str]]:
    """
    Split a batched detail capture into per-disk blocks.

    Lines before the first selection marker are dropped. Disks listed in
    ``disk_numbers`` but never selected get an empty block.
    """
    sections: dict[int, list[str]] = {n: [] for n in disk_numbers or []}
    current: list[str] | None = None

    for line in lines:
        match = SELECTED_MARKER.match(line)
        if match:
            current = sections.setdefault(int(match.group(1)), [])
            continue
        if current is not None:
            current.append(line)

    return sections


def parse_disk_list(lines: list[str]) -> list[EnumeratedDisk]:
    """Parse the enumeration capture into disk rows."""
    disks: list[EnumeratedDisk] = []
    seen: set[int] = set()

    for table in find_tables(lines):
        for row in table.rows:
            number = row_number(row[0])
            if number is None or number in seen:
                continue
            _, status, size, free, dyn, gpt = slice_padded(row, 6)
            seen.add(number)
            disks.append(
                EnumeratedDisk(
                    number=number,
                    status=status,
                    size=size,
                    free=free,
                    is_dynamic=dyn == "*",
                    is_gpt=gpt == "*",
                )
            )

    if disks:
        return disks

    # No table header: accept numbered lines that carry at least one size value
    for line in lines:
        parsed = split_columns(line)
        if parsed is None:
            continue
        token, columns = parsed
        number = row_number(token)
        sizes = [c for c in columns if SIZE_PATTERN.match(c)]
        if number is None or number in seen or not sizes:
            continue
        seen.add(number)
        disks.append(
            EnumeratedDisk(
                number=number,
                status=columns[0] if not SIZE_PATTERN.match(columns[0]) else "",
                size=sizes[0],
                free=sizes[1] if len(sizes) > 1 else "",
            )
        )

    return disks


def parse_detail_header(block: list[str]) -> DetailHeader:
    """
    Parse the description and identification lines of a detail block.

    The key/value lines are mapped by their position, not their key text.
    """
    header = DetailHeader()
    values: dict[str, str] = {}
    positional = iter(DETAIL_FIELDS)

    for line in block:
        if is_table_header(line):
            break
        if not line.strip():
            continue

        match = KEY_VALUE.match(line)
        if match is None:
            if not header.description and not values:
                header.description = line.strip()
            continue

        name = next(positional, None)
        if name is None:
            break
        values[name] = match.group(2)

    header.disk_id = values.get("disk_id", "")
    header.bus_type = values.get("bus_type", "")
    header.status = values.get("status", "")
    header.connection = ConnectionInfo(
        path=values.get("path") or None,
        target=values.get("target") or None,
        lun_id=values.get("lun_id") or None,
        location_path=values.get("location_path") or None,
    )
    return header


def build_detail_script(disk_numbers: list[int]) -> list[str]:
    """Build one script that details every disk in a single tool run."""
    commands: list[str] = []
    for number in sorted(disk_numbers):
        commands.extend([f"select disk {number}", "detail disk", "list partition"])
    return commands
