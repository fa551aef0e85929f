"""Sync engine: one strictly sequential round against the remote.

Round:
    lock -> load baseline -> scan -> reconcile -> build request
    -> POST /sync -> apply directives -> save baseline -> unlock

Failure guarantees:
- Anything failing before the remote answers (lock, baseline load, content
  read, network) leaves the filesystem and the baseline untouched, so the
  round can simply be run again.
- Once the remote has answered, a failure while applying directives or
  saving the baseline raises PartialSyncError: some files may have changed
  while the baseline still describes the previous round.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mynk.client.api import Directive, OutgoingFile, SummaryEntry, SyncRequest
from mynk.client.state import FileEntry, StateMapping, StateStore
from mynk.client.sync.ignore import IgnorePatterns, is_reserved
from mynk.client.sync.lock import RoundLock
from mynk.client.sync.reconcile import pending_changes, reconcile
from mynk.client.sync.scanner import Snapshot, load_ignore_patterns, scan_directory
from mynk.client.sync.types import (
    ApplyReport,
    FilesystemError,
    PartialSyncError,
    SyncResult,
)
from mynk.core.hashing import compute_file_hash, hash_bytes
from mynk.core.types import Action

if TYPE_CHECKING:
    from mynk.client.anchor import Anchor
    from mynk.client.api import HTTPClient

logger = logging.getLogger(__name__)


def _safe_local_path(root: Path, filename: str) -> Path | None:
    """Resolve a remote-provided filename inside root, None if it escapes or is invalid."""
    try:
        local_path = (root / filename).resolve()
    except (OSError, ValueError):
        return None
    if not local_path.is_relative_to(root) or local_path == root:
        return None
    return local_path


class SyncEngine:
    """Runs sync rounds for one anchored directory."""

    def __init__(
        self,
        anchor: Anchor,
        client: HTTPClient,
        ignore: IgnorePatterns | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            anchor: The sync root and its endpoint.
            client: Transport for the sync exchange.
            ignore: Scan exclusions (default: loaded from .mynkignore).
        """
        self._anchor = anchor
        self._root = anchor.root.resolve()
        self._client = client
        self._ignore = ignore if ignore is not None else load_ignore_patterns(anchor.ignore_path)
        self._store = StateStore(anchor.baseline_path)

    # === Local analysis ===

    def scan(self) -> Snapshot:
        """Snapshot the tree under the sync root."""
        return scan_directory(self._root, self._ignore)

    def plan(self) -> tuple[StateMapping, StateMapping]:
        """Load the baseline and reconcile it with a fresh scan.

        Returns:
            (baseline, reconciled) mappings.

        Raises:
            StateCorrupt: If the baseline cannot be read.
        """
        old = self._store.load()
        new = reconcile(old, self.scan())
        return old, new

    # === Request ===

    def _read_contents(self, filename: str) -> bytes:
        path = self._root / filename
        try:
            return path.read_bytes()
        except OSError as e:
            raise FilesystemError(f"Cannot read {filename}: {e}", filename) from e

    def build_request(self, mapping: StateMapping) -> SyncRequest:
        """Build the outbound request from a reconciled mapping.

        Contents of created and edited files are read from disk here, before
        the network call. Each sent entry's hash is taken from the bytes
        actually read, so the request never pairs stale hashes with new
        content.

        Raises:
            FilesystemError: If a changed file cannot be read.
        """
        files: list[OutgoingFile] = []
        for entry in pending_changes(mapping):
            contents = b""
            if entry.action in (Action.CREATE, Action.EDIT):
                contents = self._read_contents(entry.filename)
                read_hash = hash_bytes(contents)
                if read_hash != entry.hash:
                    logger.warning(f"{entry.filename} changed since scan, sending current content")
                    entry.hash = read_hash
            files.append(
                OutgoingFile(
                    filename=entry.filename,
                    version=entry.version,
                    hash=entry.hash,
                    action=entry.action,
                    contents=contents,
                )
            )

        summary = [
            SummaryEntry(filename=e.filename, hash=e.hash, version=e.version)
            for e in (mapping[name] for name in sorted(mapping))
        ]
        return SyncRequest(files=files, summary=summary)

    # === Response ===

    def _remove_local(self, path: Path) -> bool:
        """Delete a file and prune parent directories left empty."""
        if not path.exists() and not path.is_symlink():
            return False
        path.unlink()
        parent = path.parent
        while parent != self._root and parent.is_relative_to(self._root):
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent
        return True

    def _apply_directive(
        self, mapping: StateMapping, directive: Directive, report: ApplyReport
    ) -> None:
        path = _safe_local_path(self._root, directive.filename)
        if path is None or is_reserved(path.relative_to(self._root).as_posix()):
            logger.warning(f"Skipping directive for unsafe path: {directive.filename}")
            report.skipped.append(directive.filename)
            return
        filename = path.relative_to(self._root).as_posix()

        if directive.action is Action.DELETE:
            if self._remove_local(path):
                report.removed.append(filename)
                logger.info(f"Deleted {filename}")
            mapping.pop(filename, None)
            return

        if directive.contents is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(directive.contents)
            mapping[filename] = FileEntry(
                filename=filename,
                hash=hash_bytes(directive.contents),
                version=directive.version,
                action=Action.PASS,
            )
            report.written.append(filename)
            logger.info(f"Wrote {filename} (v{directive.version})")
            return

        # Settle without content: keep local bytes, adopt the server version
        if path.is_file():
            file_hash = compute_file_hash(path)
        elif filename in mapping:
            file_hash = mapping[filename].hash
        else:
            logger.warning(f"Cannot settle {filename}: no contents and no local file")
            report.skipped.append(filename)
            return
        mapping[filename] = FileEntry(
            filename=filename,
            hash=file_hash,
            version=directive.version,
            action=Action.PASS,
        )
        report.settled.append(filename)

    def apply_response(
        self,
        mapping: StateMapping,
        directives: list[Directive],
        report: ApplyReport | None = None,
    ) -> ApplyReport:
        """Apply the remote's directives to the filesystem and mapping.

        The mapping is updated in place. Every entry left in it is settled
        to PASS. A deletion the remote did not acknowledge keeps its entry, so
        the next scan finds the file still missing and sends it again.

        Args:
            mapping: Reconciled mapping the request was built from.
            directives: The remote's response.
            report: Report to fill in (lets callers see progress on failure).

        Raises:
            FilesystemError: If a file cannot be written or deleted.
        """
        report = report if report is not None else ApplyReport()
        for directive in directives:
            try:
                self._apply_directive(mapping, directive, report)
            except OSError as e:
                raise FilesystemError(
                    f"Cannot apply {directive.action.value} to {directive.filename}: {e}",
                    directive.filename,
                ) from e

        for entry in mapping.values():
            entry.action = Action.PASS
        return report

    # === Round ===

    def run(self) -> SyncResult:
        """Run one complete sync round.

        Raises:
            SyncLocked: If another round is running on this root.
            StateCorrupt: If the baseline cannot be read.
            FilesystemError: If changed content cannot be read.
            NetworkError: If the exchange fails.
            PartialSyncError: If applying or saving fails after the exchange.
        """
        with RoundLock(self._anchor.lock_path):
            _, mapping = self.plan()
            request = self.build_request(mapping)

            result = SyncResult(unchanged=len(mapping) - len(request.files))
            for outgoing in request.files:
                if outgoing.action is Action.CREATE:
                    result.created.append(outgoing.filename)
                elif outgoing.action is Action.EDIT:
                    result.edited.append(outgoing.filename)
                else:
                    result.deleted.append(outgoing.filename)

            directives = self._client.sync(request)

            report = ApplyReport()
            try:
                self.apply_response(mapping, directives, report)
                self._store.save(mapping)
            except (FilesystemError, OSError) as e:
                raise PartialSyncError(
                    f"Sync was only partly applied: {e}. Run sync again to reconcile.",
                    report.touched,
                ) from e

            result.applied = report
            logger.info(
                f"Round complete: {result.sent} sent, "
                f"{len(report.written)} written, {len(report.removed)} removed"
            )
            return result
