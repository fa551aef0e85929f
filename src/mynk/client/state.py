"""Local baseline persistence for the sync client.

This module provides:
- FileEntry: One tracked file (hash, version, pending action)
- StateMapping: filename -> FileEntry
- StateStore: JSON-backed load/save of the baseline

Architecture:
    The baseline is a single JSON array at the sync root. It is the source
    of truth between rounds and is only rewritten once a round's exchange
    with the remote has succeeded.

    Writes go to a temporary file in the same directory which then
    replaces the baseline with os.replace(), so a crash mid-save leaves
    the previous baseline intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mynk.core.types import Action, MynkError

logger = logging.getLogger(__name__)


class StateCorrupt(MynkError):
    """The baseline file is non-empty but cannot be read as a baseline."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Baseline {path} is corrupt: {reason}")


@dataclass
class FileEntry:
    """A tracked file.

    Attributes:
        filename: Path relative to the sync root, "/"-separated.
        hash: SHA-256 of the content at last observation.
        version: Version counter; 1 on first creation, never decreases.
        action: Classification for the current reconciliation pass.
    """

    filename: str
    hash: str
    version: int
    action: Action = Action.PASS

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the baseline record shape."""
        return {
            "filename": self.filename,
            "hash": self.hash,
            "version": self.version,
            "action": self.action.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileEntry:
        """Create from a baseline record.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        filename = data.get("filename")
        file_hash = data.get("hash")
        version = data.get("version")
        action = data.get("action")

        if not isinstance(filename, str) or not filename:
            raise ValueError(f"invalid filename {filename!r}")
        if not isinstance(file_hash, str):
            raise ValueError(f"invalid hash for {filename}")
        # bool is an int subclass
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise ValueError(f"invalid version {version!r} for {filename}")
        if not isinstance(action, str):
            raise ValueError(f"invalid action {action!r} for {filename}")

        return cls(
            filename=filename,
            hash=file_hash,
            version=version,
            action=Action(action),
        )


StateMapping = dict[str, FileEntry]


class StateStore:
    """Load and save the baseline for one sync root."""

    def __init__(self, path: Path) -> None:
        """Initialize the store.

        Args:
            path: Path of the baseline file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StateMapping:
        """Load the baseline.

        A missing or empty file is a valid "nothing synced yet" baseline.

        Returns:
            The persisted StateMapping.

        Raises:
            StateCorrupt: If the file has content that is not a valid baseline.
        """
        if not self._path.exists():
            logger.debug(f"No baseline at {self._path}, starting empty")
            return {}

        try:
            raw = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StateCorrupt(self._path, f"not UTF-8 text ({e})") from e
        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StateCorrupt(self._path, f"invalid JSON ({e})") from e

        if not isinstance(data, list):
            raise StateCorrupt(self._path, "expected a JSON array of entries")

        mapping: StateMapping = {}
        for index, record in enumerate(data):
            if not isinstance(record, dict):
                raise StateCorrupt(self._path, f"entry {index} is not an object")
            try:
                entry = FileEntry.from_dict(record)
            except ValueError as e:
                raise StateCorrupt(self._path, f"entry {index}: {e}") from e
            if entry.filename in mapping:
                raise StateCorrupt(self._path, f"duplicate entry for {entry.filename}")
            mapping[entry.filename] = entry

        logger.debug(f"Loaded {len(mapping)} entries from {self._path}")
        return mapping

    def save(self, mapping: StateMapping) -> None:
        """Persist the baseline atomically, replacing the previous one.

        Args:
            mapping: The full StateMapping to write.

        Raises:
            OSError: If the baseline cannot be written.
        """
        records = [mapping[name].to_dict() for name in sorted(mapping)]

        fd, tmp_path = tempfile.mkstemp(
            dir=str(self._path.parent),
            prefix=f"{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2)
                fh.write("\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

        logger.debug(f"Saved {len(records)} entries to {self._path}")
