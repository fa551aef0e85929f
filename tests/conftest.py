"""Shared fixtures for mynk tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from mynk.client.anchor import Anchor, create_anchor
from mynk.client.api import HTTPClient
from mynk.core.config import ServerConfig

SERVER_URL = "http://test"
SYNC_URL = f"{SERVER_URL}/sync"


@pytest.fixture
def anchor(tmp_path: Path) -> Anchor:
    """An initialized sync root with an empty baseline."""
    return create_anchor(tmp_path / "root", SERVER_URL)


@pytest.fixture
def client() -> Generator[HTTPClient, None, None]:
    """HTTP client pointed at the mocked remote."""
    with HTTPClient(ServerConfig(server_url=SERVER_URL)) as c:
        yield c


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host overrides out of the tests."""
    monkeypatch.delenv("MYNK_TIMEOUT", raising=False)
    monkeypatch.delenv("MYNK_VERIFY_SSL", raising=False)
