"""Tests for CLI commands - init, sync, status."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mynk.client.anchor import BASELINE_NAME, MARKER_NAME, create_anchor
from mynk.client.api import encode_contents
from mynk.client.cli import EXIT_ERROR, EXIT_PARTIAL, cli
from mynk.client.state import FileEntry, StateStore
from mynk.core.hashing import hash_bytes
from mynk.core.types import Action

SERVER_URL = "http://test"
SYNC_URL = f"{SERVER_URL}/sync"


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An initialized sync root used as the working directory."""
    create_anchor(tmp_path, SERVER_URL)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestInitCommand:
    """Tests for 'mynk init' command."""

    def test_init_creates_root_and_syncs(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, httpx_mock
    ) -> None:  # type: ignore[no-untyped-def]
        """Init should write marker and baseline, then run a sync."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "a.txt").write_text("hello")
        httpx_mock.add_response(url=SYNC_URL, method="POST", json=[])

        result = runner.invoke(cli, ["init", "--uri", SERVER_URL])

        assert result.exit_code == 0, result.output
        assert (tmp_path / MARKER_NAME).read_text() == SERVER_URL
        assert "Initialized" in result.output
        assert "1 created" in result.output
        assert "a.txt" in StateStore(tmp_path / BASELINE_NAME).load()

    def test_init_with_path(self, runner: CliRunner, tmp_path: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """Init should honor --path."""
        target = tmp_path / "project"
        httpx_mock.add_response(url=SYNC_URL, method="POST", json=[])

        result = runner.invoke(cli, ["init", "--uri", SERVER_URL, "--path", str(target)])

        assert result.exit_code == 0, result.output
        assert (target / MARKER_NAME).exists()

    def test_init_requires_uri(self, runner: CliRunner, tmp_path: Path) -> None:
        """Init without --uri is a usage error."""
        result = runner.invoke(cli, ["init", "--path", str(tmp_path)])

        assert result.exit_code != 0
        assert not (tmp_path / MARKER_NAME).exists()

    def test_init_fails_if_already_initialized(self, runner: CliRunner, root: Path) -> None:
        """Init should refuse an existing sync root."""
        result = runner.invoke(cli, ["init", "--uri", "http://other"])

        assert result.exit_code == EXIT_ERROR
        assert "already" in result.output.lower()
        assert (root / MARKER_NAME).read_text() == SERVER_URL

    def test_init_keeps_root_when_server_down(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, httpx_mock
    ) -> None:  # type: ignore[no-untyped-def]
        """A failed first sync leaves the initialized root in place."""
        monkeypatch.chdir(tmp_path)
        httpx_mock.add_response(url=SYNC_URL, method="POST", status_code=503)

        result = runner.invoke(cli, ["init", "--uri", SERVER_URL])

        assert result.exit_code == EXIT_ERROR
        assert (tmp_path / MARKER_NAME).exists()
        assert (tmp_path / BASELINE_NAME).read_bytes() == b""


class TestSyncCommand:
    """Tests for 'mynk sync' command."""

    def test_sync_without_root(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Sync should fail when no marker can be found."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == EXIT_ERROR
        assert "mynk init" in result.output

    def test_sync_up_to_date(self, runner: CliRunner, root: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """An empty tree with an empty answer is up to date."""
        httpx_mock.add_response(url=SYNC_URL, method="POST", json=[])

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 0, result.output
        assert "Everything is up to date." in result.output

    def test_sync_from_subdirectory(
        self, runner: CliRunner, root: Path, monkeypatch: pytest.MonkeyPatch, httpx_mock
    ) -> None:  # type: ignore[no-untyped-def]
        """Sync finds the root from a nested directory and applies downloads."""
        (root / "nested").mkdir()
        monkeypatch.chdir(root / "nested")
        httpx_mock.add_response(
            url=SYNC_URL,
            method="POST",
            json=[{"filename": "remote.txt", "action": "create", "version": 2, "contents": encode_contents(b"r")}],
        )

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 0, result.output
        assert "↓ remote.txt" in result.output
        assert (root / "remote.txt").read_bytes() == b"r"

    def test_sync_network_error(self, runner: CliRunner, root: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A failed exchange exits non-zero and reports the status."""
        httpx_mock.add_response(url=SYNC_URL, method="POST", status_code=500)

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == EXIT_ERROR
        assert "500" in result.output

    def test_sync_retries(self, runner: CliRunner, root: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """--retries runs the round again after a network failure."""
        httpx_mock.add_response(url=SYNC_URL, method="POST", status_code=503)
        httpx_mock.add_response(url=SYNC_URL, method="POST", json=[])

        with patch("mynk.client.sync.retry.time.sleep"):
            result = runner.invoke(cli, ["sync", "--retries", "2"])

        assert result.exit_code == 0, result.output
        assert "retrying" in result.output
        assert len(httpx_mock.get_requests()) == 2

    def test_sync_corrupt_baseline(self, runner: CliRunner, root: Path) -> None:
        """A corrupt baseline is reported and left alone."""
        (root / BASELINE_NAME).write_text("garbage")

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == EXIT_ERROR
        assert "corrupt" in result.output
        assert (root / BASELINE_NAME).read_text() == "garbage"

    def test_sync_locked(self, runner: CliRunner, root: Path) -> None:
        """A held lock stops the round."""
        (root / ".mynk.lock").write_text("4242")

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == EXIT_ERROR
        assert "4242" in result.output

    def test_sync_partial(self, runner: CliRunner, root: Path, httpx_mock) -> None:  # type: ignore[no-untyped-def]
        """A partly applied response has its own exit code."""
        (root / "taken").mkdir()
        (root / "taken/inner.txt").write_text("i")
        httpx_mock.add_response(
            url=SYNC_URL,
            method="POST",
            json=[
                {"filename": "b.txt", "action": "create", "version": 1, "contents": encode_contents(b"b")},
                {"filename": "taken", "action": "create", "version": 1, "contents": encode_contents(b"x")},
            ],
        )

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == EXIT_PARTIAL
        assert "b.txt" in result.output
        assert "mynk sync" in result.output


class TestStatusCommand:
    """Tests for 'mynk status' command."""

    def test_status_lists_pending(self, runner: CliRunner, root: Path) -> None:
        """Status shows pending changes without contacting the remote."""
        (root / "new.txt").write_text("n")
        (root / "same.txt").write_text("s")
        store = StateStore(root / BASELINE_NAME)

        store.save(
            {
                "same.txt": FileEntry("same.txt", hash_bytes(b"s"), 1),
                "gone.txt": FileEntry("gone.txt", "h", 3),
            }
        )

        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0, result.output
        assert "+ new.txt (v1)" in result.output
        assert "✗ gone.txt (v3)" in result.output
        assert "same.txt" not in result.output
        assert "2 pending, 1 unchanged" in result.output
        # Nothing persisted
        assert store.load()["gone.txt"].action is Action.PASS

    def test_status_clean(self, runner: CliRunner, root: Path) -> None:
        """Status on a clean tree says so."""
        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert "Nothing to sync" in result.output


class TestGlobalOptions:
    """Tests for group-level options."""

    def test_version(self, runner: CliRunner) -> None:
        """--version prints the program version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "mynk" in result.output

    def test_verbose_flag_accepted(self, runner: CliRunner, root: Path) -> None:
        """-vv is accepted before a command."""
        result = runner.invoke(cli, ["-vv", "status"])

        assert result.exit_code == 0
