"""Init command for mynk CLI.

Commands:
- init: Make a directory a sync root and run the first sync
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from mynk.client.anchor import AnchorExists, create_anchor
from mynk.client.cli.config import EXIT_ERROR
from mynk.client.cli.sync import run_round


@click.command()
@click.option("--uri", required=True, help="Base URI of the remote sync endpoint.")
@click.option(
    "--path",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory to synchronize.",
)
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retry the first sync this many times if the server cannot be reached.",
)
def init(uri: str, directory: Path, retries: int) -> None:
    """Initialize a sync root bound to URI and run the first sync."""
    try:
        anchor = create_anchor(directory, uri)
    except (AnchorExists, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    click.echo(f"Initialized {anchor.root}")
    run_round(anchor, retries=retries)
