"""Scripted HTTP capability for testing with network blocking.

Provides a mock HTTP client that:
- Returns scripted responses for registered URLs
- Blocks all unregistered URLs
- Records all request attempts, including headers, for audit
"""

import json
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from configcat_cache.fetch.models import (
    HttpResponse,
    TransportError,
    TransportErrorClass,
    TransportFailure,
)
from configcat_cache.observability.logging import get_logger


logger = get_logger(__name__)

Responder = Callable[[str, dict[str, str]], HttpResponse]
ScriptEntry = HttpResponse | TransportError | Responder


class NetworkAccessBlockedError(Exception):
    """Raised when a request targets a URL with no scripted response."""

    def __init__(self, url: str) -> None:
        """Initialize the error.

        Args:
            url: URL that was blocked.
        """
        self.url = url
        super().__init__(
            f"Network access blocked: {url}. "
            "Scripted client serves registered responses only."
        )


@dataclass
class RequestRecord:
    """Record of an HTTP request attempt.

    Attributes:
        url: Requested URL.
        headers: Request headers as sent.
        timestamp: When request was made.
        matched: Whether a scripted response was found.
    """

    url: str
    headers: dict[str, str]
    timestamp: datetime
    matched: bool = True


@dataclass
class MockTransportStats:
    """Statistics for scripted client usage."""

    requests_total: int = 0
    requests_matched: int = 0
    requests_blocked: int = 0
    request_log: list[RequestRecord] = field(default_factory=list)


class ScriptedHttpClient:
    """HTTP capability that replays scripted responses per URL.

    Each URL holds a queue of entries. Entries are consumed in order and
    the last one keeps answering once the queue is down to it. An entry is
    an ``HttpResponse``, a ``TransportError`` (raised as ``TransportFailure``),
    or a callable receiving the URL and headers.
    """

    def __init__(self, allow_unmatched: bool = False) -> None:
        """Initialize the scripted client.

        Args:
            allow_unmatched: If True, answer unknown URLs with 404 instead of
                raising.
        """
        self._allow_unmatched = allow_unmatched
        self._scripts: dict[str, deque[ScriptEntry]] = {}
        self._stats = MockTransportStats()
        self._lock = threading.Lock()
        self._log = logger.bind(component="e2e")

    @property
    def stats(self) -> MockTransportStats:
        """Get transport statistics."""
        return self._stats

    @property
    def requests(self) -> list[RequestRecord]:
        """All recorded requests in order."""
        return list(self._stats.request_log)

    def add(self, url: str, entry: ScriptEntry) -> "ScriptedHttpClient":
        """Append a scripted entry for a URL."""
        self._scripts.setdefault(url, deque()).append(entry)
        return self

    def add_json(
        self,
        url: str,
        document: dict[str, Any],
        status_code: int = 200,
        etag: str | None = None,
    ) -> "ScriptedHttpClient":
        """Append a JSON response, optionally carrying an ETag header."""
        headers = {"content-type": "application/json"}
        if etag is not None:
            headers["etag"] = etag
        return self.add(
            url,
            HttpResponse(
                status_code=status_code,
                headers=headers,
                body_bytes=json.dumps(document).encode(),
            ),
        )

    def add_status(
        self, url: str, status_code: int, body: bytes = b""
    ) -> "ScriptedHttpClient":
        """Append a bodyless or plain-body response with a status code."""
        return self.add(url, HttpResponse(status_code=status_code, body_bytes=body))

    def add_transport_error(
        self,
        url: str,
        error_class: TransportErrorClass = TransportErrorClass.CONNECTION_ERROR,
        message: str = "Connection refused",
    ) -> "ScriptedHttpClient":
        """Append a transport failure."""
        return self.add(url, TransportError(error_class=error_class, message=message))

    def get(self, url: str, headers: dict[str, str]) -> HttpResponse:
        """Answer a GET request from the script.

        Raises:
            TransportFailure: If the scripted entry is a transport error.
            NetworkAccessBlockedError: If the URL is not scripted and
                unmatched requests are not allowed.
        """
        with self._lock:
            self._stats.requests_total += 1
            script = self._scripts.get(url)
            matched = bool(script)
            self._stats.request_log.append(
                RequestRecord(
                    url=url,
                    headers=dict(headers),
                    timestamp=datetime.now(UTC),
                    matched=matched,
                )
            )
            if script:
                self._stats.requests_matched += 1
                entry = script.popleft() if len(script) > 1 else script[0]
            else:
                self._stats.requests_blocked += 1

        if not matched:
            self._log.warning("mock_fetch_blocked", url=url)
            if not self._allow_unmatched:
                raise NetworkAccessBlockedError(url)
            return HttpResponse(status_code=404, body_bytes=b"Not Found")

        self._log.debug("mock_fetch_matched", url=url)
        if isinstance(entry, TransportError):
            raise TransportFailure(entry)
        if isinstance(entry, HttpResponse):
            return entry
        return entry(url, dict(headers))

    def get_request_log(self) -> list[dict[str, object]]:
        """Get the request log as a list of dictionaries."""
        return [
            {
                "url": r.url,
                "headers": r.headers,
                "timestamp": r.timestamp.isoformat(),
                "matched": r.matched,
            }
            for r in self._stats.request_log
        ]
