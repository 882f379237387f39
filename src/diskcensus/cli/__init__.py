"""
DiskCensus CLI Module.

Provides command-line interface for DiskCensus operations.
"""

from diskcensus.cli.main import main, cli

__all__ = ["main", "cli"]
