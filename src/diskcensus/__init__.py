"""
DiskCensus - Disk and volume inventory built on diskpart.

Drives the Windows disk partitioning utility, captures its console text
and translates it into structured disk and volume records.
"""

__version__ = "1.0.0"
__author__ = "DiskCensus Team"

from diskcensus.core.config import CensusConfig
from diskcensus.core.models import DiskInventory

__all__ = ["CensusConfig", "DiskInventory", "__version__"]
