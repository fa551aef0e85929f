"""HTTP client for the mynk remote.

This module provides:
- HTTPClient: Performs the single sync exchange with the remote
- OutgoingFile, SummaryEntry, SyncRequest: Request payload
- Directive: One authoritative per-file decision from the remote
- NetworkError: Any failure of the exchange

Wire format:
    POST {base}/sync
    {"files": [{filename, version, hash, action, contents}],
     "summary": [{filename, hash, version}]}

    Response: [{filename, action, version, contents}, ...]

File contents travel base64-encoded since JSON has no byte type.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from mynk.core.config import ServerConfig
from mynk.core.types import Action, MynkError

logger = logging.getLogger(__name__)


class NetworkError(MynkError):
    """The sync exchange failed; nothing has been changed locally.

    Attributes:
        status_code: HTTP status when the remote answered, else None.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def encode_contents(data: bytes) -> str:
    """Encode file bytes for the wire."""
    return base64.b64encode(data).decode("ascii")


def decode_contents(text: str) -> bytes:
    """Decode file bytes from the wire.

    Raises:
        ValueError: If text is not valid base64.
    """
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError(f"invalid base64 contents: {e}") from e


@dataclass
class OutgoingFile:
    """A changed file sent to the remote."""

    filename: str
    version: int
    hash: str
    action: Action
    contents: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "version": self.version,
            "hash": self.hash,
            "action": self.action.value,
            "contents": encode_contents(self.contents),
        }


@dataclass
class SummaryEntry:
    """Client-known state of one tracked file."""

    filename: str
    hash: str
    version: int

    def to_dict(self) -> dict[str, Any]:
        return {"filename": self.filename, "hash": self.hash, "version": self.version}


@dataclass
class SyncRequest:
    """Body of the sync request."""

    files: list[OutgoingFile] = field(default_factory=list)
    summary: list[SummaryEntry] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Create the JSON body."""
        return {
            "files": [f.to_dict() for f in self.files],
            "summary": [s.to_dict() for s in self.summary],
        }


@dataclass
class Directive:
    """The remote's decision for one file.

    Attributes:
        filename: Root-relative path.
        action: What to do locally.
        version: Server-authoritative version.
        contents: File bytes to write, or None when the remote sent none.
    """

    filename: str
    action: Action
    version: int
    contents: bytes | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Directive:
        """Create from a response item.

        Raises:
            ValueError: If the item is malformed.
        """
        filename = data.get("filename")
        version = data.get("version", 0)
        raw_contents = data.get("contents")

        if not isinstance(filename, str) or not filename or "\x00" in filename:
            raise ValueError(f"invalid filename {filename!r}")
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise ValueError(f"invalid version {version!r} for {filename}")
        try:
            action = Action(str(data.get("action", "")).lower())
        except ValueError:
            raise ValueError(f"invalid action {data.get('action')!r} for {filename}") from None
        if raw_contents is not None and not isinstance(raw_contents, str):
            raise ValueError(f"invalid contents for {filename}")

        contents = decode_contents(raw_contents) if raw_contents is not None else None
        return cls(filename=filename, action=action, version=version, contents=contents)


class HTTPClient:
    """HTTP client for the mynk remote."""

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the client.

        Args:
            config: Server configuration (URL, timeout, SSL verification).
        """
        self._config = config
        self._client = httpx.Client(
            base_url=config.server_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
        )

    @property
    def server_url(self) -> str:
        return self._config.server_url

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise NetworkError for any non-success status."""
        if response.is_success:
            return response
        detail = response.reason_phrase or "Unknown error"
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("detail"):
                detail = str(body["detail"])
        except ValueError:
            pass
        raise NetworkError(
            f"Remote returned {response.status_code}: {detail}",
            response.status_code,
        )

    def sync(self, request: SyncRequest) -> list[Directive]:
        """Send the client's changes and summary, return the remote's directives.

        Args:
            request: Outbound changes and summary.

        Returns:
            Directives in the order the remote sent them.

        Raises:
            NetworkError: On connection failure, timeout, non-2xx status or
                a malformed response body.
        """
        logger.info(
            f"POST {self._config.sync_url}: "
            f"{len(request.files)} changed, {len(request.summary)} tracked"
        )
        try:
            response = self._client.post("/sync", json=request.to_payload())
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out talking to {self.server_url}: {e}") from e
        except httpx.RequestError as e:
            raise NetworkError(f"Cannot reach {self.server_url}: {e}") from e

        self._handle_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"Response is not valid JSON: {e}", response.status_code) from e

        if not isinstance(data, list):
            raise NetworkError("Response is not a list of directives", response.status_code)

        directives: list[Directive] = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise NetworkError(f"Directive {index} is not an object", response.status_code)
            try:
                directives.append(Directive.from_dict(item))
            except ValueError as e:
                raise NetworkError(f"Directive {index}: {e}", response.status_code) from e

        logger.info(f"Received {len(directives)} directives")
        return directives
