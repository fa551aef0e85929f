"""Sync round components.

Architecture:
    scan_directory -> reconcile -> SyncEngine (request, exchange, apply)

Components:
- **scan_directory**: Snapshot of the tree, filename -> content hash
- **reconcile**: Diff of a snapshot against the baseline, with action tags
- **SyncEngine**: Builds the request, talks to the remote, applies the answer
- **RoundLock**: Advisory lock file held for the duration of a round
- **retry_with_backoff**: Caller-side retry for rounds that failed on the network
"""

from mynk.client.sync.engine import SyncEngine
from mynk.client.sync.ignore import RESERVED_PATTERNS, IgnorePatterns, is_reserved
from mynk.client.sync.lock import RoundLock, SyncLocked
from mynk.client.sync.reconcile import (
    INITIAL_VERSION,
    count_actions,
    pending_changes,
    reconcile,
    reconcile_entry,
)
from mynk.client.sync.retry import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_INITIAL_BACKOFF,
    DEFAULT_MAX_BACKOFF,
    DEFAULT_MAX_RETRIES,
    RETRYABLE_EXCEPTIONS,
    backoff_delays,
    retry_with_backoff,
)
from mynk.client.sync.scanner import Snapshot, load_ignore_patterns, scan_directory
from mynk.client.sync.types import (
    ApplyReport,
    FilesystemError,
    PartialSyncError,
    SyncResult,
)

__all__ = [
    # Engine
    "SyncEngine",
    # Ignore
    "IgnorePatterns",
    "RESERVED_PATTERNS",
    "is_reserved",
    # Lock
    "RoundLock",
    "SyncLocked",
    # Reconcile
    "INITIAL_VERSION",
    "count_actions",
    "pending_changes",
    "reconcile",
    "reconcile_entry",
    # Retry
    "DEFAULT_BACKOFF_MULTIPLIER",
    "DEFAULT_INITIAL_BACKOFF",
    "DEFAULT_MAX_BACKOFF",
    "DEFAULT_MAX_RETRIES",
    "RETRYABLE_EXCEPTIONS",
    "backoff_delays",
    "retry_with_backoff",
    # Scanner
    "Snapshot",
    "load_ignore_patterns",
    "scan_directory",
    # Types
    "ApplyReport",
    "FilesystemError",
    "PartialSyncError",
    "SyncResult",
]
