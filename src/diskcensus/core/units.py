"""
Size normalization between rendered size tokens and byte counts.

Units are base-1024. The two directions are not exact inverses: the
readable form keeps a single fractional digit.
"""

from __future__ import annotations

import re

UNIT_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}

SIZE_PATTERN = re.compile(r"^\s*(\d+)(?:\.(\d+))?\s*(B|KB|MB|GB|TB)\s*$", re.IGNORECASE)


def size_to_bytes(text: str | None) -> int | None:
    """Parse a size token like '953 GB' to bytes. Returns None if it is not one."""
    if not text:
        return None

    match = SIZE_PATTERN.match(text)
    if not match:
        return None

    whole, fraction, unit = match.groups()
    multiplier = UNIT_MULTIPLIERS[unit.upper()]
    value = int(whole) * multiplier
    if fraction:
        value += int(fraction) * multiplier // 10 ** len(fraction)
    return value


def bytes_to_human(size_bytes: int) -> str:
    """Render a byte count with the largest unit that keeps the value >= 1."""
    if size_bytes < UNIT_MULTIPLIERS["KB"]:
        return f"{size_bytes} B"

    unit = "B"
    for name, multiplier in UNIT_MULTIPLIERS.items():
        if size_bytes >= multiplier:
            unit = name
    return f"{size_bytes / UNIT_MULTIPLIERS[unit]:.1f} {unit}"
