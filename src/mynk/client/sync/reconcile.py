"""Reconciliation of a fresh scan against the persisted baseline.

Rules, applied per filename over the union of baseline and scan:

| Baseline          | Scan     | Result                                  |
|-------------------|----------|-----------------------------------------|
| absent            | present  | CREATE, version 1                       |
| DELETE            | absent   | dropped                                 |
| any other action  | absent   | DELETE, baseline hash and version       |
| DELETE            | present  | pending DELETE carried forward as is    |
| same hash         | present  | PASS, baseline version                  |
| different hash    | present  | EDIT, baseline version + 1              |

A pending deletion is never turned back into a CREATE by the next scan, and
running twice over an unchanged tree settles every entry to PASS.
"""

from __future__ import annotations

import logging
from collections import Counter

from mynk.client.state import FileEntry, StateMapping
from mynk.core.types import Action

logger = logging.getLogger(__name__)

INITIAL_VERSION = 1


def _tentative(scan: dict[str, str]) -> StateMapping:
    """Materialize a snapshot as brand-new entries."""
    return {
        filename: FileEntry(
            filename=filename,
            hash=file_hash,
            version=INITIAL_VERSION,
            action=Action.CREATE,
        )
        for filename, file_hash in scan.items()
    }


def reconcile_entry(old: FileEntry | None, seen: FileEntry | None) -> FileEntry | None:
    """Decide the new entry for one filename.

    Args:
        old: Baseline entry, or None if the file was never tracked.
        seen: Tentative CREATE entry from the scan, or None if the file
            is not on disk.

    Returns:
        The reconciled entry, or None if the filename leaves the mapping.
    """
    if old is None:
        return seen

    if seen is None:
        if old.action is Action.DELETE:
            return None
        return FileEntry(
            filename=old.filename,
            hash=old.hash,
            version=old.version,
            action=Action.DELETE,
        )

    if old.action is Action.DELETE:
        return FileEntry(
            filename=old.filename,
            hash=old.hash,
            version=old.version,
            action=Action.DELETE,
        )

    if old.hash != seen.hash:
        return FileEntry(
            filename=old.filename,
            hash=seen.hash,
            version=old.version + 1,
            action=Action.EDIT,
        )

    return FileEntry(
        filename=old.filename,
        hash=old.hash,
        version=old.version,
        action=Action.PASS,
    )


def reconcile(old: StateMapping, scan: dict[str, str]) -> StateMapping:
    """Compare a scan with the baseline and tag every entry with an action.

    Args:
        old: Baseline from the previous round (may be empty).
        scan: Fresh snapshot, filename -> content hash.

    Returns:
        New StateMapping. Inputs are not modified.
    """
    tentative = _tentative(scan)
    new: StateMapping = {}

    for filename in old.keys() | tentative.keys():
        entry = reconcile_entry(old.get(filename), tentative.get(filename))
        if entry is not None:
            new[filename] = entry

    counts = count_actions(new)
    logger.info(
        f"Reconciled {len(new)} entries: "
        f"{counts[Action.CREATE]} create, {counts[Action.EDIT]} edit, "
        f"{counts[Action.DELETE]} delete, {counts[Action.PASS]} pass"
    )
    return new


def pending_changes(mapping: StateMapping) -> list[FileEntry]:
    """Entries with something to send, sorted by filename."""
    return [
        mapping[name]
        for name in sorted(mapping)
        if mapping[name].action is not Action.PASS
    ]


def count_actions(mapping: StateMapping) -> Counter[Action]:
    """Count entries per action."""
    return Counter(entry.action for entry in mapping.values())
