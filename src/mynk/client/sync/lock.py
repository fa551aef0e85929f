"""Advisory lock held for the duration of a sync round.

Two rounds against the same root would race on the baseline file, so each
round creates the lock file exclusively and removes it when done, whatever
the outcome.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from mynk.core.types import MynkError

logger = logging.getLogger(__name__)


class SyncLocked(MynkError):
    """Another sync round holds the lock for this root."""

    def __init__(self, lock_path: Path, owner: str | None = None) -> None:
        self.lock_path = lock_path
        self.owner = owner
        held_by = f" (held by pid {owner})" if owner else ""
        super().__init__(
            f"Another sync is running{held_by}. "
            f"If it is not, remove {lock_path} and retry."
        )


class RoundLock:
    """Exclusive lock file, usable as a context manager."""

    def __init__(self, lock_path: Path) -> None:
        self._path = Path(lock_path)
        self._held = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        """Create the lock file.

        Raises:
            SyncLocked: If the lock file already exists.
        """
        try:
            fd = os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            raise SyncLocked(self._path, self._read_owner()) from None

        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(str(os.getpid()))
        self._held = True
        logger.debug(f"Acquired {self._path}")

    def release(self) -> None:
        """Remove the lock file if this instance holds it."""
        if not self._held:
            return
        try:
            self._path.unlink()
        except FileNotFoundError:
            logger.warning(f"Lock file {self._path} disappeared before release")
        self._held = False
        logger.debug(f"Released {self._path}")

    def _read_owner(self) -> str | None:
        try:
            return self._path.read_text(encoding="utf-8").strip() or None
        except OSError:
            return None

    def __enter__(self) -> RoundLock:
        self.acquire()
        return self

    def __exit__(self, *args: object) -> None:
        self.release()
