"""Offline topology CLI commands.

These commands never contact a controller:
- validate: Check a declaration against topology constraints
- plan: Show the staged batches that turn one declaration into another

Per project patterns:
- Use typer.Typer() subcommand group
- Rich Table for formatted output, JSON for automation
"""

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from raid_core.declaration import RAIDSpec
from raid_core.differ import diff_topologies
from raid_core.planner import plan_batches, simulate
from raid_core.cli.render import render_batches, render_report
from raid_core.validator import validate_topology

topology_app = typer.Typer(help="Validate and plan RAID topologies offline")
console = Console()


def _load_spec(path: Path) -> RAIDSpec:
    try:
        return RAIDSpec.from_file(path)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Cannot load {path}: {e}[/red]")
        raise typer.Exit(1)


@topology_app.command("validate")
def validate(
    spec_path: Path = typer.Argument(..., help="RAID declaration (JSON)"),
    boot_disk: str = typer.Option(None, "--boot-disk", help="Boot disk block device id"),
    partitioned: list[str] = typer.Option(
        [], "--partitioned", "-p", help="Block device id that has partitions (repeatable)"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Validate a declaration without contacting the controller."""
    spec = _load_spec(spec_path)

    report = validate_topology(
        spec.to_topology(),
        boot_disk_id=boot_disk,
        partitioned_device_ids=partitioned,
    )

    if json_output:
        data = {
            "ok": report.ok,
            "violations": [
                {
                    "kind": v.kind.value,
                    "message": v.message,
                    "device": str(v.device) if v.device else None,
                }
                for v in report.violations
            ],
            "warnings": report.warnings,
        }
        print(json.dumps(data, indent=2))
    else:
        render_report(console, report)

    if not report.ok:
        raise typer.Exit(1)


@topology_app.command("plan")
def plan(
    old_path: Path = typer.Argument(..., help="Currently applied declaration (JSON)"),
    new_path: Path = typer.Argument(..., help="Desired declaration (JSON)"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show the staged batches between two declarations."""
    old = _load_spec(old_path).to_topology()
    new = _load_spec(new_path).to_topology()

    report = validate_topology(new)
    if not report.ok:
        render_report(console, report)
        raise typer.Exit(1)

    if old.level != new.level:
        console.print(
            f"[red]Cannot change RAID level from {old.level.value} to "
            f"{new.level.value} in place[/red]"
        )
        raise typer.Exit(1)

    diff = diff_topologies(old, new)
    batches = plan_batches(diff)

    if json_output:
        data = {
            "diff": diff.to_dict(),
            "batches": [b.to_dict() for b in batches],
        }
        print(json.dumps(data, indent=2))
        return

    render_batches(console, batches)

    # Dry run: every intermediate state keeps the minimum, and the end state is NEW
    for batch, state in zip(batches, simulate(old, batches)):
        console.print(
            f"[dim]after phase {batch.phase.number}: "
            f"{state.active_count} active, {state.spare_count} spare[/dim]"
        )
    final = simulate(old, batches)[-1] if batches else old
    if final != new:
        console.print("[red]Plan does not reach the desired topology[/red]")
        raise typer.Exit(1)
