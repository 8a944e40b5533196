"""Rich rendering helpers shared by the CLI commands."""

from rich.console import Console
from rich.table import Table

from raid_protocols import ArraySummary, Batch, Role

from raid_core.validator import ValidationReport


def _ids(values: frozenset[str]) -> str:
    return ", ".join(sorted(values, key=lambda v: (len(v), v))) or "-"


def render_batches(console: Console, batches: list[Batch], title: str = "Update Plan") -> None:
    """Print one row per planned batch."""
    if not batches:
        console.print("[green]No changes. Membership is up to date.[/green]")
        return

    table = Table(title=title)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Phase", style="green")
    table.add_column("Action")
    table.add_column("Devices")
    table.add_column("Partitions")

    for batch in batches:
        for prefix in ("add", "remove"):
            for role in Role:
                devices = getattr(batch, f"{prefix}_{role.value}_devices")
                partitions = getattr(batch, f"{prefix}_{role.value}_partitions")
                if not devices and not partitions:
                    continue
                table.add_row(
                    str(batch.phase.number),
                    batch.phase.value,
                    f"{prefix} {role.value}",
                    _ids(devices),
                    _ids(partitions),
                )

    console.print(table)


def render_report(console: Console, report: ValidationReport) -> None:
    """Print violations in red and warnings in yellow."""
    for violation in report.violations:
        console.print(f"[red]✗ {violation.kind.value}: {violation.message}[/red]")
    for warning in report.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    if report.ok:
        console.print("[green]✓ Topology is valid[/green]")


def render_summary(console: Console, summary: ArraySummary) -> None:
    """Print an array's membership and filesystem."""
    topology = summary.topology
    table = Table(title=f"RAID {summary.name} ({summary.ref})")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Level", topology.level.value)
    table.add_row("Size", f"{summary.size_gigabytes} GB")
    table.add_row("Active devices", _ids(topology.active_devices))
    table.add_row("Active partitions", _ids(topology.active_partitions))
    table.add_row("Spare devices", _ids(topology.spare_devices))
    table.add_row("Spare partitions", _ids(topology.spare_partitions))
    table.add_row("Filesystem", summary.fs_type or "[dim]unformatted[/dim]")
    mount = summary.mount_point or "[dim]not mounted[/dim]"
    if summary.mount_options:
        mount = f"{mount} ({summary.mount_options})"
    table.add_row("Mount", mount)

    console.print(table)
