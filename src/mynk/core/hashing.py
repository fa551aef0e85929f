"""Content hashing for mynk.

Digests depend on file bytes only (never on mtime or permissions), so the
same content hashes identically on every platform. The baseline, the scan
and the wire all carry the lowercase hex form.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

# Read size for streaming hashes
HASH_BLOCK_SIZE = 8192


def hash_bytes(data: bytes) -> str:
    """SHA-256 hex digest of data already in memory."""
    return hashlib.sha256(data).hexdigest()


def compute_file_hash(path: Path) -> str:
    """SHA-256 hex digest of a file's content.

    The file is streamed in HASH_BLOCK_SIZE reads, so large files are never
    loaded whole.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(HASH_BLOCK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()
