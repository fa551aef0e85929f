"""Shared types and dataclasses for sync rounds.

This module provides:
- FilesystemError, PartialSyncError: Exception classes
- ApplyReport: What applying a server response changed locally
- SyncResult: Overall result of one sync round
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mynk.core.types import MynkError


class FilesystemError(MynkError):
    """A read or write under the sync root failed.

    Attributes:
        path: Relative path involved, when known.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class PartialSyncError(MynkError):
    """The remote answered but the response was only partly applied.

    The filesystem may now be ahead of the baseline. Re-running sync lets the
    next reconciliation pass re-derive the right actions.

    Attributes:
        touched: Relative paths already written or deleted locally.
    """

    def __init__(self, message: str, touched: list[str] | None = None) -> None:
        super().__init__(message)
        self.touched = list(touched or [])


@dataclass
class ApplyReport:
    """Local changes made while applying a server response."""

    written: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    settled: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def touched(self) -> list[str]:
        """Paths whose files were modified on disk."""
        return self.written + self.removed


@dataclass
class SyncResult:
    """Result of a sync round.

    Attributes:
        created: Files sent as new.
        edited: Files sent with new content.
        deleted: Local deletions sent to the remote.
        unchanged: Number of tracked files with nothing to send.
        applied: Changes made locally from the response.
    """

    created: list[str] = field(default_factory=list)
    edited: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    unchanged: int = 0
    applied: ApplyReport = field(default_factory=ApplyReport)

    @property
    def sent(self) -> int:
        """Number of file records sent to the remote."""
        return len(self.created) + len(self.edited) + len(self.deleted)

    @property
    def is_noop(self) -> bool:
        """True when nothing was sent and nothing changed on disk."""
        return self.sent == 0 and not self.applied.touched
