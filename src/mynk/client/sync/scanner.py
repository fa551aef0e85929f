"""Directory scanner producing content snapshots.

This module provides:
- scan_directory: Walk a sync root and hash every regular file
- load_ignore_patterns: Build IgnorePatterns from a .mynkignore file

A snapshot is a plain mapping of root-relative "/"-separated path to
content hash. Scanning is best-effort: symlinks are skipped, and files that
vanish or cannot be read during the walk are left out with a warning
instead of failing the scan.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from mynk.client.sync.ignore import IgnorePatterns
from mynk.core.hashing import compute_file_hash

logger = logging.getLogger(__name__)

Snapshot = dict[str, str]


def load_ignore_patterns(ignore_file: Path) -> IgnorePatterns:
    """Create IgnorePatterns from ignore_file; a missing file yields no rules."""
    ignore = IgnorePatterns()
    ignore.load_from_file(ignore_file)
    return ignore


def scan_directory(root: Path, ignore: IgnorePatterns | None = None) -> Snapshot:
    """Hash every regular file under root.

    Args:
        root: Sync root directory.
        ignore: Patterns to exclude (mynk's own files are always excluded).

    Returns:
        Mapping of relative filename to SHA-256 hex digest.
    """
    root = Path(root).resolve()
    ignore = ignore or IgnorePatterns()
    snapshot: Snapshot = {}

    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot list {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        current = Path(dirpath)

        # Prune ignored directories and directory symlinks in place
        dirnames[:] = [
            d for d in dirnames if not ignore.should_ignore(current / d, root)
        ]

        for name in filenames:
            full_path = current / name
            if ignore.should_ignore(full_path, root):
                continue
            if not full_path.is_file():
                # Sockets, FIFOs, devices
                continue

            rel = full_path.relative_to(root).as_posix()
            try:
                snapshot[rel] = compute_file_hash(full_path)
            except OSError as e:
                logger.warning(f"Skipping {rel}: {e}")

    logger.debug(f"Scanned {len(snapshot)} files under {root}")
    return snapshot
