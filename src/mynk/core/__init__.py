"""Core module - Shared hashing, configuration and types."""

from mynk.core.config import DEFAULT_TIMEOUT, ServerConfig
from mynk.core.hashing import HASH_BLOCK_SIZE, compute_file_hash, hash_bytes
from mynk.core.types import Action, MynkError

__all__ = [
    # Config
    "DEFAULT_TIMEOUT",
    "ServerConfig",
    # Hashing
    "HASH_BLOCK_SIZE",
    "compute_file_hash",
    "hash_bytes",
    # Types
    "Action",
    "MynkError",
]
