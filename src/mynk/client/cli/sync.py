"""Sync and status commands for mynk CLI.

Commands:
- sync: Run one sync round against the remote
- status: Show what the next round would send
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from mynk.client.anchor import Anchor, RootNotFound, find_anchor
from mynk.client.api import NetworkError
from mynk.client.cli.config import EXIT_ERROR, EXIT_PARTIAL, make_client
from mynk.client.state import StateCorrupt, StateStore
from mynk.client.sync import (
    FilesystemError,
    PartialSyncError,
    SyncEngine,
    SyncLocked,
    SyncResult,
    load_ignore_patterns,
    pending_changes,
    reconcile,
    retry_with_backoff,
    scan_directory,
)
from mynk.core.types import Action

ACTION_SYMBOLS = {
    Action.CREATE: "+",
    Action.EDIT: "~",
    Action.DELETE: "✗",
}


def resolve_anchor() -> Anchor:
    """Find the sync root for the current directory, exiting if there is none."""
    try:
        return find_anchor(Path.cwd())
    except RootNotFound as e:
        click.echo(f"Error: {e}. Run 'mynk init --uri <URI>' first.", err=True)
        sys.exit(EXIT_ERROR)


def display_summary(result: SyncResult) -> None:
    """Display sync results summary."""
    for path in result.created + result.edited:
        click.echo(f"  ↑ {path}")
    for path in result.deleted:
        click.echo(f"  ✗ {path} (remote)")
    for path in result.applied.written:
        click.echo(f"  ↓ {path}")
    for path in result.applied.removed:
        click.echo(f"  ✗ {path}")

    if result.applied.skipped:
        click.echo(click.style("\nSkipped:", fg="yellow"))
        for path in result.applied.skipped:
            click.echo(f"  ! {path}")

    if result.is_noop:
        click.echo("Everything is up to date.")
    else:
        click.echo(
            f"\nSync complete: {len(result.created)} created, "
            f"{len(result.edited)} edited, "
            f"{len(result.deleted)} deleted, "
            f"{len(result.applied.written)} downloaded, "
            f"{len(result.applied.removed)} removed locally"
        )


def run_round(anchor: Anchor, retries: int = 0) -> SyncResult:
    """Run one sync round for anchor, reporting failures and exiting on error."""
    click.echo(f"Syncing {anchor.root} with {anchor.uri}...")

    def on_retry(attempt: int, error: Exception, delay: float) -> None:
        click.echo(f"Server unreachable ({error}), retrying in {delay:.0f}s...", err=True)

    try:
        with make_client(anchor) as client:
            engine = SyncEngine(anchor, client)
            result = retry_with_backoff(engine.run, max_retries=retries, on_retry=on_retry)
    except PartialSyncError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        if e.touched:
            click.echo("Files already changed locally:", err=True)
            for path in e.touched:
                click.echo(f"  {path}", err=True)
        click.echo("The baseline may be behind the files. Run 'mynk sync' again.", err=True)
        sys.exit(EXIT_PARTIAL)
    except (SyncLocked, StateCorrupt, FilesystemError, NetworkError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    display_summary(result)
    return result


@click.command()
@click.option(
    "--retries",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Retry the round this many times if the server cannot be reached.",
)
def sync(retries: int) -> None:
    """Synchronize this directory with its remote.

    Sends local creations, edits and deletions, then applies the
    remote's answer to the files and the baseline.
    """
    run_round(resolve_anchor(), retries=retries)


@click.command()
def status() -> None:
    """Show local changes the next sync would send.

    Nothing is sent and nothing is written.
    """
    anchor = resolve_anchor()
    try:
        baseline = StateStore(anchor.baseline_path).load()
    except StateCorrupt as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    snapshot = scan_directory(anchor.root, load_ignore_patterns(anchor.ignore_path))
    mapping = reconcile(baseline, snapshot)
    changes = pending_changes(mapping)
    click.echo(f"Sync root: {anchor.root}")
    click.echo(f"Remote: {anchor.uri}")
    if not changes:
        click.echo(f"Nothing to sync ({len(mapping)} files tracked).")
        return

    for entry in changes:
        click.echo(f"  {ACTION_SYMBOLS[entry.action]} {entry.filename} (v{entry.version})")
    click.echo(f"\n{len(changes)} pending, {len(mapping) - len(changes)} unchanged.")
