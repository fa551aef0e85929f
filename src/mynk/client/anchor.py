"""Sync root discovery.

This module provides:
- Anchor: Handle on a sync root and its remote endpoint
- find_anchor: Walk ancestor directories looking for the root marker
- create_anchor: Write a new marker and empty baseline (used by init)

The marker is a plain text file holding the endpoint base URI and nothing
else. Every other component receives the Anchor explicitly instead of
resolving the root on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from mynk.core.types import MynkError

logger = logging.getLogger(__name__)

MARKER_NAME = ".mynk"
BASELINE_NAME = ".mynk-db"
LOCK_NAME = ".mynk.lock"
IGNORE_FILE_NAME = ".mynkignore"


class RootNotFound(MynkError):
    """No root marker in the start directory or any of its ancestors."""

    def __init__(self, start: Path) -> None:
        self.start = start
        super().__init__(
            f"No {MARKER_NAME} marker found in {start} or any parent directory"
        )


class AnchorExists(MynkError):
    """The directory is already a sync root."""


@dataclass(frozen=True)
class Anchor:
    """A located sync root.

    Attributes:
        root: Absolute path of the synchronized directory.
        uri: Remote endpoint base URI read from the marker.
    """

    root: Path
    uri: str

    @property
    def marker_path(self) -> Path:
        return self.root / MARKER_NAME

    @property
    def baseline_path(self) -> Path:
        return self.root / BASELINE_NAME

    @property
    def lock_path(self) -> Path:
        return self.root / LOCK_NAME

    @property
    def ignore_path(self) -> Path:
        return self.root / IGNORE_FILE_NAME


def _read_marker(marker: Path) -> str:
    """Read the endpoint URI from a marker file."""
    return marker.read_text(encoding="utf-8").strip()


def find_anchor(start: Path | None = None) -> Anchor:
    """Find the sync root containing start.

    Args:
        start: Directory to search from (default: current directory).

    Returns:
        Anchor for the nearest enclosing root.

    Raises:
        RootNotFound: If no marker exists in start or any ancestor.
    """
    start = (start or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        marker = directory / MARKER_NAME
        if marker.is_file():
            uri = _read_marker(marker)
            logger.debug(f"Found sync root {directory} -> {uri}")
            return Anchor(root=directory, uri=uri)
    raise RootNotFound(start)


def create_anchor(directory: Path, uri: str) -> Anchor:
    """Turn directory into a sync root bound to uri.

    Writes the marker and an empty baseline. Creates directory if needed.

    Args:
        directory: Directory to initialize.
        uri: Remote endpoint base URI.

    Returns:
        The new Anchor.

    Raises:
        AnchorExists: If directory already holds a marker.
        ValueError: If uri is empty.
    """
    uri = uri.strip()
    if not uri:
        raise ValueError("Endpoint URI must not be empty")

    directory = directory.resolve()
    marker = directory / MARKER_NAME
    if marker.exists():
        raise AnchorExists(f"{directory} is already a sync root")

    directory.mkdir(parents=True, exist_ok=True)
    marker.write_text(uri, encoding="utf-8")
    baseline = directory / BASELINE_NAME
    if not baseline.exists():
        baseline.touch()

    logger.info(f"Initialized sync root {directory} for {uri}")
    return Anchor(root=directory, uri=uri)
