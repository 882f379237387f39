"""
Inventory export to JSON and CSV files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from diskcensus.core.models import AttributeSet, DiskInventory

DISK_COLUMNS = [
    "disk_number",
    "disk_model",
    "disk_description",
    "disk_bus_type",
    "disk_id",
    "disk_status",
    "disk_size",
    "disk_free",
    "disk_serial",
    "location_path",
]
VOLUME_COLUMNS = [
    "volume",
    "letter",
    "label",
    "filesystem",
    "type",
    "size",
    "size_bytes",
    "size_human",
    "status",
    "info",
]


def csv_columns() -> list[str]:
    return DISK_COLUMNS + AttributeSet.names() + VOLUME_COLUMNS


def inventory_rows(inventory: DiskInventory) -> list[dict[str, Any]]:
    """Flatten the inventory to one row per volume, disk columns repeated."""
    rows: list[dict[str, Any]] = []
    for disk in inventory.disks:
        disk_values = {
            "disk_number": disk.number,
            "disk_model": disk.model,
            "disk_description": disk.description,
            "disk_bus_type": disk.bus_type,
            "disk_id": disk.disk_id,
            "disk_status": disk.status,
            "disk_size": disk.size,
            "disk_free": disk.free,
            "disk_serial": disk.serial,
            "location_path": disk.connection.location_path or "",
            **disk.attributes.to_dict(),
        }
        for volume in disk.volumes:
            volume_values = volume.to_dict()
            rows.append(
                {
                    **disk_values,
                    **{name: volume_values[name] for name in VOLUME_COLUMNS},
                }
            )
    return rows


def write_json(inventory: DiskInventory, path: Path) -> Path:
    """Write the inventory as an indented JSON document."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(inventory.to_dict(), f, indent=2, default=str)
    return path


def write_csv(inventory: DiskInventory, path: Path, delimiter: str = ",") -> Path:
    """Write the inventory as CSV with one row per volume."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=csv_columns(), delimiter=delimiter)
        writer.writeheader()
        for row in inventory_rows(inventory):
            writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return path
