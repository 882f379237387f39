"""
DiskCensus CLI Main Entry Point.

Provides the command-line interface for listing and exporting the disk
inventory.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import humanize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from diskcensus import __version__
from diskcensus.core.config import CensusConfig, load_config
from diskcensus.core.errors import CensusError
from diskcensus.core.export import write_csv, write_json
from diskcensus.core.logging import setup_logging
from diskcensus.core.models import DiskInventory, DiskRecord
from diskcensus.platform import get_platform_backend
from diskcensus.platform.base import InventoryBackend

console = Console()


def get_backend(ctx: click.Context) -> InventoryBackend:
    """Get or create the inventory backend from context."""
    if "backend" not in ctx.obj:
        ctx.obj["backend"] = get_platform_backend(ctx.obj["config"])
    return ctx.obj["backend"]


def collect_inventory(
    ctx: click.Context,
    disks: tuple[int, ...],
    timeout: float | None,
) -> DiskInventory:
    """Run the inventory, exiting with a message on fatal errors."""
    backend = get_backend(ctx)
    quiet = ctx.obj.get("quiet", False)

    if backend.requires_admin and not backend.is_admin() and not quiet:
        console.print("[yellow]Not running as administrator; diskpart will likely fail[/yellow]")

    try:
        if quiet:
            inventory = backend.get_disk_inventory(timeout)
        else:
            with console.status("Querying disks with diskpart..."):
                inventory = backend.get_disk_inventory(timeout)
    except CensusError as e:
        console.print(f"[red]Inventory failed: {e}[/red]")
        sys.exit(1)

    if disks:
        inventory = inventory.filter(disks)
    return inventory


def attribute_summary(disk: DiskRecord) -> str:
    flags = [name.replace("_", " ") for name, value in disk.attributes.to_dict().items() if value]
    return ", ".join(flags) or "(none)"


@click.group()
@click.version_option(version=__version__, prog_name="DiskCensus")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--verbose", "-v", is_flag=True, help="Log parser and attribute diagnostics")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    json_output: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """
    DiskCensus - Disk and volume inventory.

    Runs diskpart, parses its console output and reports every disk with
    its volumes and boolean attributes.
    """
    ctx.ensure_object(dict)

    if "config" not in ctx.obj:
        ctx.obj["config"] = CensusConfig.load(config) if config else load_config()

    census_config: CensusConfig = ctx.obj["config"]
    if verbose:
        census_config.logging.level = "DEBUG"
    setup_logging(census_config.logging)

    ctx.obj["json_output"] = json_output
    ctx.obj["quiet"] = quiet


@cli.command("list")
@click.option("--disk", "-d", "disks", type=int, multiple=True, help="Only show this disk number")
@click.option("--timeout", type=float, help="diskpart timeout in seconds")
@click.option("--no-attributes", is_flag=True, help="Skip attribute lookups")
@click.pass_context
def list_disks(
    ctx: click.Context,
    disks: tuple[int, ...],
    timeout: float | None,
    no_attributes: bool,
) -> None:
    """List all disks and their volumes."""
    if no_attributes:
        ctx.obj["config"].attributes.enabled = False
    inventory = collect_inventory(ctx, disks, timeout)

    if ctx.obj.get("json_output", False):
        click.echo(json.dumps(inventory.to_dict(), indent=2, default=str))
        return

    table = Table(title="Disk Inventory")
    table.add_column("Disk", style="cyan")
    table.add_column("Model", style="white")
    table.add_column("Bus", style="yellow")
    table.add_column("Size", style="green")
    table.add_column("Status", style="magenta")
    table.add_column("Attributes", style="red")

    for disk in inventory.disks:
        table.add_row(
            str(disk.number),
            disk.display_name[:30],
            disk.bus_type,
            disk.size,
            disk.status,
            attribute_summary(disk),
        )

    console.print(table)
    console.print()

    for disk in inventory.disks:
        vol_table = Table(title=f"Volumes on Disk {disk.number}")
        vol_table.add_column("Volume", style="dim")
        vol_table.add_column("Ltr", style="cyan")
        vol_table.add_column("Label", style="white")
        vol_table.add_column("FS", style="yellow")
        vol_table.add_column("Type", style="blue")
        vol_table.add_column("Size", style="green")
        vol_table.add_column("Status", style="magenta")
        vol_table.add_column("Info", style="white")

        for volume in disk.volumes:
            vol_table.add_row(
                volume.volume,
                volume.letter,
                volume.label,
                volume.filesystem,
                volume.type,
                volume.size_human or volume.size,
                volume.status,
                volume.info,
            )

        console.print(vol_table)
        console.print()

    if not ctx.obj.get("quiet", False):
        console.print(
            f"{inventory.total_disks} disks, {inventory.total_volumes} volumes, "
            f"{humanize.naturalsize(inventory.total_capacity_bytes, binary=True)} total"
        )
    for error in inventory.errors:
        console.print(f"[yellow]{error}[/yellow]")


@cli.command("info")
@click.argument("number", type=int)
@click.option("--timeout", type=float, help="diskpart timeout in seconds")
@click.pass_context
def disk_info(ctx: click.Context, number: int, timeout: float | None) -> None:
    """Show detailed information about one disk."""
    inventory = collect_inventory(ctx, (number,), timeout)
    disk = inventory.get_disk(number)
    if disk is None:
        console.print(f"[red]Disk not found: {number}[/red]")
        sys.exit(1)

    if ctx.obj.get("json_output", False):
        click.echo(json.dumps(disk.to_dict(), indent=2, default=str))
        return

    size = humanize.naturalsize(disk.size_bytes, binary=True) if disk.size_bytes else disk.size
    panel = Panel(
        f"""[cyan]Disk:[/cyan] {disk.number}
[cyan]Description:[/cyan] {disk.description or "(unknown)"}
[cyan]Model:[/cyan] {disk.model or "(unknown)"}
[cyan]Serial:[/cyan] {disk.serial or "(unknown)"}
[cyan]Disk ID:[/cyan] {disk.disk_id or "(unknown)"}
[cyan]Bus:[/cyan] {disk.bus_type or "(unknown)"}
[cyan]Size:[/cyan] {size}
[cyan]Free:[/cyan] {disk.free}
[cyan]GPT:[/cyan] {"Yes" if disk.is_gpt else "No"}
[cyan]Dynamic:[/cyan] {"Yes" if disk.is_dynamic else "No"}
[cyan]Location:[/cyan] {disk.connection.location_path or "(unknown)"}
[cyan]Attributes:[/cyan] {attribute_summary(disk)}
[cyan]Volumes:[/cyan] {len(disk.volumes) if disk.has_volume_data else 0}""",
        title="Disk Information",
    )
    console.print(panel)


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["json", "csv"]),
    help="Output format (default: from file extension)",
)
@click.option("--disk", "-d", "disks", type=int, multiple=True, help="Only export this disk number")
@click.option("--timeout", type=float, help="diskpart timeout in seconds")
@click.pass_context
def export_inventory(
    ctx: click.Context,
    output: Path,
    fmt: str | None,
    disks: tuple[int, ...],
    timeout: float | None,
) -> None:
    """Export the inventory to a JSON or CSV file."""
    config: CensusConfig = ctx.obj["config"]
    if fmt is None:
        suffix = output.suffix.lower().lstrip(".")
        if suffix in ("json", "csv"):
            fmt = suffix
        elif config.export.default_format == "csv":
            fmt = "csv"
        else:
            fmt = "json"

    inventory = collect_inventory(ctx, disks, timeout)

    if fmt == "csv":
        write_csv(inventory, output, delimiter=config.export.csv_delimiter)
    else:
        write_json(inventory, output)

    if not ctx.obj.get("quiet", False):
        console.print(f"[green]Wrote {inventory.total_disks} disks to {output}[/green]")


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
