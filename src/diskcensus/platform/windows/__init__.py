"""
DiskCensus Windows Platform Backend.

Builds the disk inventory from diskpart console output:
- bounded diskpart runs with a temporary script and output file
- language-independent table parsing with tiered fallbacks
- boolean attributes from PowerShell storage cmdlets
"""

from diskcensus.platform.windows.backend import WindowsBackend
from diskcensus.platform.windows.parsers import (
    compute_spans,
    parse_disk_list,
    split_detail_sections,
)
from diskcensus.platform.windows.runner import BoundedProcessRunner
from diskcensus.platform.windows.volumes import parse_volume_rows

__all__ = [
    "BoundedProcessRunner",
    "WindowsBackend",
    "compute_spans",
    "parse_disk_list",
    "parse_volume_rows",
    "split_detail_sections",
]
