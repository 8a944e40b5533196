"""RAID CLI - declarative RAID management for bare-metal controllers."""

import logging

import typer

from raid_core.cli.array import array_app
from raid_core.cli.topology import topology_app

app = typer.Typer(
    name="raid",
    help="Declarative RAID management for bare-metal provisioning controllers",
    no_args_is_help=True,
)

# Add command groups
app.add_typer(topology_app, name="topology")
app.add_typer(array_app, name="array")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
