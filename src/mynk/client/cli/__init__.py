"""Command-line interface for mynk.

This module provides the main CLI entry point and assembles all commands.

Commands:
- init: Make a directory a sync root and run the first sync
- sync: Synchronize the current sync root with its remote
- status: Show pending local changes without syncing
"""

from __future__ import annotations

import click

from mynk import __version__
from mynk.client.cli.config import EXIT_ERROR, EXIT_OK, EXIT_PARTIAL, setup_logging
from mynk.client.cli.init import init
from mynk.client.cli.sync import status, sync


@click.group()
@click.version_option(version=__version__, prog_name="mynk")
@click.option("--verbose", "-v", count=True, help="Show progress logs (-vv for debug).")
def cli(verbose: int) -> None:
    """mynk - synchronize a directory with a remote copy."""
    setup_logging(verbose)


cli.add_command(init)
cli.add_command(sync)
cli.add_command(status)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "EXIT_ERROR",
    "EXIT_OK",
    "EXIT_PARTIAL",
    "cli",
    "main",
]
