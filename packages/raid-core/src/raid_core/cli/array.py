"""RAID array CLI commands against a controller.

Provides commands for managing arrays on the provisioning controller:
- show: Display an array's membership and filesystem
- create: Create an array from a declaration
- apply: Reconcile an existing array with a declaration (staged)
- delete: Delete an array

Connection settings come from options with environment fallbacks
(MAAS_API_URL, MAAS_API_KEY, MAAS_API_VERSION).
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console

from raid_core.cli.controller_factory import AVAILABLE_CONTROLLERS, create_controller
from raid_core.cli.render import render_batches, render_summary
from raid_core.config import (
    API_KEY_ENV,
    API_URL_ENV,
    API_VERSION_ENV,
    DEFAULT_API_VERSION,
    DEFAULT_TIMEOUT_SECONDS,
    ControllerConfig,
)
from raid_core.declaration import RAIDSpec
from raid_core.exceptions import ApplyError, ReconcileError, TopologyValidationError
from raid_core.reconciler import RAIDReconciler

array_app = typer.Typer(help="Manage RAID arrays on the controller")
console = Console()

T = TypeVar("T")


@array_app.callback()
def connect(
    ctx: typer.Context,
    controller: str = typer.Option(
        "maas",
        "--controller",
        "-c",
        help=f"Controller type ({', '.join(AVAILABLE_CONTROLLERS)})",
    ),
    api_url: str = typer.Option(
        None, "--url", envvar=API_URL_ENV, help="Controller URL (e.g., http://maas:5240/MAAS)"
    ),
    api_key: str = typer.Option(
        None, "--api-key", envvar=API_KEY_ENV, help="API key (consumer:token:secret)"
    ),
    api_version: str = typer.Option(
        DEFAULT_API_VERSION, "--api-version", envvar=API_VERSION_ENV, help="API version"
    ),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT_SECONDS, "--timeout", help="Per-call timeout in seconds"
    ),
) -> None:
    """Controller connection options shared by every array command."""
    ctx.obj = {
        "controller": controller,
        "config": ControllerConfig(
            api_url=api_url or "",
            api_key=api_key or "",
            api_version=api_version,
            timeout_seconds=timeout,
        ),
    }


def _run(ctx: typer.Context, action: Callable[[RAIDReconciler], Awaitable[T]]) -> T:
    """Build a reconciler, run one action, and map errors to exit codes."""
    config: ControllerConfig = ctx.obj["config"]
    if not config.api_url or not config.api_key:
        console.print(
            f"[red]Controller URL and API key are required "
            f"(--url/{API_URL_ENV}, --api-key/{API_KEY_ENV})[/red]"
        )
        raise typer.Exit(1)

    async def _main() -> T:
        client = create_controller(ctx.obj["controller"], config)
        try:
            return await action(RAIDReconciler(client=client))
        finally:
            await client.aclose()

    try:
        return asyncio.run(_main())
    except TopologyValidationError as e:
        for violation in e.violations:
            console.print(f"[red]✗ {violation.kind.value}: {violation.message}[/red]")
        raise typer.Exit(1)
    except ApplyError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)
    except ReconcileError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        console.print(
            f"[red]Controller returned {e.response.status_code}: {e.response.text}[/red]"
        )
        raise typer.Exit(1)
    except (httpx.HTTPError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _load_spec(path: Path) -> RAIDSpec:
    try:
        return RAIDSpec.from_file(path)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Cannot load {path}: {e}[/red]")
        raise typer.Exit(1)


@array_app.command("show")
def show(
    ctx: typer.Context,
    machine: str = typer.Argument(..., help="Machine system ID, hostname, FQDN or MAC"),
    array_id: int = typer.Argument(..., help="RAID id"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show an array."""
    summary = _run(ctx, lambda r: r.read(machine, array_id))

    if json_output:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        render_summary(console, summary)


@array_app.command("create")
def create(
    ctx: typer.Context,
    spec_path: Path = typer.Argument(..., help="RAID declaration (JSON)"),
) -> None:
    """Create an array from a declaration."""
    spec = _load_spec(spec_path)
    summary = _run(ctx, lambda r: r.create(spec))

    console.print(f"[green]Created RAID {summary.name} (id {summary.id})[/green]")
    render_summary(console, summary)


@array_app.command("apply")
def apply(
    ctx: typer.Context,
    spec_path: Path = typer.Argument(..., help="RAID declaration (JSON)"),
    array_id: int = typer.Argument(..., help="RAID id"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the plan without applying it"),
) -> None:
    """Reconcile an existing array with a declaration."""
    spec = _load_spec(spec_path)

    if dry_run:
        preview = _run(ctx, lambda r: r.preview(array_id, spec))
        if preview.rename:
            console.print(f"Rename: {preview.current.name} -> {preview.rename}")
        render_batches(console, preview.batches)
        return

    summary = _run(ctx, lambda r: r.update(array_id, spec))
    console.print(f"[green]RAID {summary.name} is up to date[/green]")
    render_summary(console, summary)


@array_app.command("delete")
def delete(
    ctx: typer.Context,
    machine: str = typer.Argument(..., help="Machine system ID, hostname, FQDN or MAC"),
    array_id: int = typer.Argument(..., help="RAID id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete an array."""
    if not yes:
        typer.confirm(f"Delete RAID {array_id} on {machine}?", abort=True)

    _run(ctx, lambda r: r.delete(machine, array_id))
    console.print(f"[green]Deleted RAID {array_id}[/green]")
