"""Shared configuration classes for mynk.

The endpoint URI itself lives in the root marker; transport settings can be
tuned through environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TIMEOUT = 30.0

_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class ServerConfig:
    """Configuration for connecting to a mynk remote.

    Attributes:
        server_url: Base URI of the remote (e.g., "https://sync.example.com").
        timeout: Request/connection timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
    """

    server_url: str
    timeout: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True

    def __post_init__(self) -> None:
        """Normalize server URL."""
        self.server_url = self.server_url.strip().rstrip("/")

    @classmethod
    def from_env(cls, server_url: str) -> ServerConfig:
        """Build a config for server_url, reading overrides from the environment.

        Recognized variables:
            MYNK_TIMEOUT: Request timeout in seconds.
            MYNK_VERIFY_SSL: Set to 0/false/no/off to skip certificate checks.

        Raises:
            ValueError: If MYNK_TIMEOUT is not a positive number.
        """
        timeout = DEFAULT_TIMEOUT
        raw_timeout = os.environ.get("MYNK_TIMEOUT")
        if raw_timeout:
            timeout = float(raw_timeout)
            if timeout <= 0:
                raise ValueError(f"MYNK_TIMEOUT must be positive, got {raw_timeout!r}")

        verify_ssl = os.environ.get("MYNK_VERIFY_SSL", "1").strip().lower() not in _FALSE_VALUES
        return cls(server_url=server_url, timeout=timeout, verify_ssl=verify_ssl)

    @property
    def sync_url(self) -> str:
        """Full URL of the sync endpoint."""
        return f"{self.server_url}/sync"

    @property
    def is_secure(self) -> bool:
        """Check if using HTTPS.

        Returns:
            True if server uses HTTPS.
        """
        return self.server_url.startswith("https://")
