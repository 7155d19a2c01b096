"""Configuration fetcher with ETag revalidation and redirect routing."""

import json
import threading
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Protocol

import httpx
import structlog

from configcat_cache import __version__
from configcat_cache.fetch.cache import RevalidationCache
from configcat_cache.fetch.config import FetcherOptions
from configcat_cache.fetch.constants import (
    BASE_PATH,
    CONFIG_FILENAME,
    DATA_GOVERNANCE_DASHBOARD_URL,
    DEFAULT_TIMEOUT_SECONDS,
    HEADER_CONFIGCAT_USER_AGENT,
    HEADER_USER_AGENT,
    MAX_REDIRECT_HOPS,
    PRODUCT_NAME,
    SDK_KEY_DASHBOARD_URL,
)
from configcat_cache.fetch.metrics import FetchMetrics
from configcat_cache.fetch.models import (
    ConfigUnchanged,
    ConfigUpdated,
    FetchFailed,
    FetchResult,
    FetchState,
    HttpResponse,
    Preferences,
    ResponseError,
    TransportError,
    TransportErrorClass,
    TransportFailure,
)
from configcat_cache.fetch.redact import redact_sdk_key, redact_url_credentials
from configcat_cache.fetch.routing import initial_base_url, resolve_redirect
from configcat_cache.observability.logging import get_logger


logger = get_logger(__name__)

_SSL_MARKERS = ("ssl", "certificate", "tls")


class HttpCapability(Protocol):
    """Protocol for the HTTP GET operation used by the fetcher.

    Abstracts the transport to enable testing and alternative clients.
    """

    def get(self, url: str, headers: dict[str, str]) -> HttpResponse:
        """Perform a GET request.

        Args:
            url: Absolute request URL.
            headers: Request headers.

        Returns:
            The response, whatever its status code.

        Raises:
            TransportFailure: If no response could be obtained.
        """
        ...


class HttpxCapability:
    """HTTP capability backed by a pooled ``httpx.Client``.

    Connect/read timeouts and proxy settings live here, not in the fetcher.
    HTTP-level redirects are not followed; origin changes are driven by the
    redirect preferences inside the configuration document.
    """

    def __init__(
        self,
        http_proxy: str | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the capability.

        Args:
            http_proxy: Optional proxy URL for all requests.
            timeout_seconds: Connect and read timeout.
            transport: Optional transport override, used by tests.
        """
        self.http_proxy = http_proxy
        self.timeout_seconds = timeout_seconds
        self._client = httpx.Client(
            timeout=timeout_seconds,
            follow_redirects=False,
            proxy=http_proxy,
            transport=transport,
        )

    def get(self, url: str, headers: dict[str, str]) -> HttpResponse:
        """Perform a GET request and map httpx errors to transport errors."""
        try:
            response = self._client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportFailure(
                TransportError(
                    error_class=TransportErrorClass.NETWORK_TIMEOUT,
                    message=f"Request timed out: {e}",
                )
            ) from e
        except httpx.ProxyError as e:
            raise TransportFailure(
                TransportError(
                    error_class=TransportErrorClass.PROXY_ERROR,
                    message=f"Proxy error: {e}",
                )
            ) from e
        except httpx.ConnectError as e:
            text = str(e).lower()
            error_class = (
                TransportErrorClass.SSL_ERROR
                if any(marker in text for marker in _SSL_MARKERS)
                else TransportErrorClass.CONNECTION_ERROR
            )
            raise TransportFailure(
                TransportError(
                    error_class=error_class, message=f"Connection failed: {e}"
                )
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailure(
                TransportError(
                    error_class=TransportErrorClass.UNKNOWN,
                    message=f"{type(e).__name__}: {e}",
                )
            ) from e

        return HttpResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body_bytes=response.content,
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()


@dataclass(frozen=True)
class _Attempt:
    """Outcome of one HTTP round trip within a fetch transaction."""

    result: FetchResult
    state: FetchState
    redirect_to: str | None = None


def build_user_agent(mode: str) -> str:
    """Build the product/mode/version user agent string."""
    return f"{PRODUCT_NAME}/{mode}-{__version__}"


def build_config_url(state: FetchState) -> str:
    """Build the configuration document URL for a state.

    Args:
        state: Fetch state holding base URL and SDK key.

    Returns:
        ``{base_url}/configuration-files/{sdk_key}/config_v5.json``
    """
    base = state.base_url.rstrip("/")
    return f"{base}/{BASE_PATH}/{state.sdk_key}/{CONFIG_FILENAME}"


class ConfigFetcher:
    """Fetches the configuration document for one SDK key.

    Each call to ``fetch`` is a complete transaction: a primary attempt and,
    when the server redirects to another origin, exactly one redirected
    attempt. Redirects advertised by the redirected attempt are not followed
    within the same call; they only shape the next call. The entity tag and
    base URL carried between calls are swapped in under a per-instance lock,
    so overlapping calls are serialized.
    """

    def __init__(
        self,
        options: FetcherOptions,
        http: HttpCapability | None = None,
        etag: str | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            options: Construction options.
            http: HTTP capability; an ``HttpxCapability`` is created and
                owned by the fetcher when omitted.
            etag: Entity tag of a document the caller already holds.
        """
        self._options = options
        self._name = options.name or "fetcher"
        self._owns_http = http is None
        self._http: HttpCapability = (
            http
            if http is not None
            else HttpxCapability(
                http_proxy=options.http_proxy,
                timeout_seconds=options.timeout_seconds,
            )
        )
        self._state = FetchState(
            sdk_key=options.sdk_key,
            base_url=initial_base_url(options.base_url, options.data_governance),
            custom_endpoint=options.custom_endpoint,
            data_governance=options.data_governance,
            http_proxy=options.http_proxy,
            etag=etag,
        )
        self._user_agent = build_user_agent(options.mode)
        self._cache = RevalidationCache(self._name)
        self._metrics = FetchMetrics.get_instance()
        self._lock = threading.Lock()
        self._advisory_emitted = False
        self._log = logger.bind(component="fetch", fetcher=self._name)

        self._log.debug(
            "config_fetcher_created",
            base_url=self._state.base_url,
            custom_endpoint=self._state.custom_endpoint,
            data_governance=self._state.data_governance.value,
            http_proxy=(
                redact_url_credentials(options.http_proxy)
                if options.http_proxy
                else None
            ),
        )

    @property
    def name(self) -> str:
        """Logical instance name."""
        return self._name

    @property
    def state(self) -> FetchState:
        """Snapshot of the state the next fetch will start from.

        Does not wait for an in-flight fetch; the state is immutable and
        replaced by a single assignment when a fetch completes.
        """
        return self._state

    @property
    def base_url(self) -> str:
        """Origin the next request will be sent to."""
        return self.state.base_url

    @property
    def etag(self) -> str | None:
        """Entity tag the next request will revalidate with."""
        return self.state.etag

    @property
    def user_agent(self) -> str:
        """User agent sent with every request."""
        return self._user_agent

    def fetch(self) -> FetchResult:
        """Fetch the configuration document once.

        Blocks on network I/O. Never retries and never raises for network
        or HTTP problems; those are reported as ``FetchFailed``.

        Returns:
            ConfigUpdated, ConfigUnchanged, or FetchFailed.
        """
        with self._lock:
            start_time_ns = time.perf_counter_ns()
            result, self._state = self._run_transaction(self._state)
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_duration(duration_ms)

            self._log.info(
                "config_fetch_complete",
                result=result.kind,
                base_url=self._state.base_url,
                etag=self._state.etag,
                duration_ms=round(duration_ms, 2),
            )
            return result

    def _run_transaction(self, state: FetchState) -> tuple[FetchResult, FetchState]:
        """Run one fetch transaction against an explicit state.

        Must be called with the fetcher lock held.

        Args:
            state: State to fetch with.

        Returns:
            The result and the state for the next transaction. A failed
            result always comes with ``state`` unchanged.
        """
        primary = self._attempt(state, hop=0)
        if primary.redirect_to is None:
            return primary.result, primary.state

        self._metrics.record_redirect()
        self._log.info(
            "config_fetch_redirect",
            from_url=state.base_url,
            to_url=primary.redirect_to,
        )
        redirected = self._attempt(primary.state, hop=1)
        if isinstance(redirected.result, FetchFailed):
            return redirected.result, state
        if redirected.redirect_to is not None:
            self._log.warning(
                "config_fetch_redirect_limit_reached",
                base_url=primary.state.base_url,
                next_base_url=redirected.redirect_to,
                max_hops=MAX_REDIRECT_HOPS,
            )
        return redirected.result, redirected.state

    def _attempt(self, state: FetchState, hop: int) -> _Attempt:
        """Perform one HTTP round trip and classify the response.

        Args:
            state: State to build the request from.
            hop: 0 for the primary attempt, 1 for the redirected attempt.

        Returns:
            Attempt outcome. ``redirect_to`` is set when the response must be
            replaced by an attempt against another origin; the returned state
            then already points there and keeps the original entity tag.
        """
        url = build_config_url(state)
        headers = self._build_headers(state)
        log = self._log.bind(url=redact_sdk_key(url, state.sdk_key), hop=hop)
        log.info("config_fetch_started")

        try:
            response = self._http.get(url, headers)
        except TransportFailure as e:
            self._metrics.record_failure(e.error.error_class)
            self._log_failure(
                log,
                error_class=e.error.error_class.value,
                detail=e.error.message,
            )
            return _Attempt(result=FetchFailed(error=e.error), state=state)

        self._metrics.record_request(response.status_code, len(response.body_bytes))
        log.info(
            "config_fetch_response",
            status_code=response.status_code,
            cached=self._cache.extract_etag(response.headers),
        )

        if response.is_not_modified:
            self._metrics.record_not_modified()
            return _Attempt(result=ConfigUnchanged(), state=state)

        if not response.is_success:
            return self._failed_response(
                log, state, response, f"Unexpected HTTP status {response.status_code}"
            )

        document = self._parse_document(response)
        if document is None:
            return self._failed_response(
                log, state, response, "Response body is not a JSON object"
            )

        decision = resolve_redirect(state, Preferences.from_document(document))
        if decision.advisory:
            self._emit_advisory()

        if decision.redirect:
            return _Attempt(
                result=ConfigUpdated(document=document),
                state=state.with_base_url(decision.base_url),
                redirect_to=decision.base_url,
            )

        next_state = self._cache.apply(state, response).with_base_url(
            decision.base_url
        )
        return _Attempt(result=ConfigUpdated(document=document), state=next_state)

    def _build_headers(self, state: FetchState) -> dict[str, str]:
        headers = {
            HEADER_USER_AGENT: self._user_agent,
            HEADER_CONFIGCAT_USER_AGENT: self._user_agent,
        }
        headers.update(self._cache.conditional_headers(state))
        return headers

    @staticmethod
    def _parse_document(response: HttpResponse) -> dict[str, Any] | None:
        try:
            document = json.loads(response.body_bytes)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return document if isinstance(document, dict) else None

    def _failed_response(
        self,
        log: structlog.stdlib.BoundLogger,
        state: FetchState,
        response: HttpResponse,
        message: str,
    ) -> _Attempt:
        self._metrics.record_failure(response.status_code)
        self._log_failure(log, status_code=response.status_code, detail=message)
        error = ResponseError(
            status_code=response.status_code,
            body=response.body_text,
            headers=dict(response.headers),
            message=message,
        )
        return _Attempt(result=FetchFailed(error=error), state=state)

    @staticmethod
    def _log_failure(log: structlog.stdlib.BoundLogger, **fields: Any) -> None:
        log.error(
            "config_fetch_failed",
            hint=f"Double-check your SDK Key at {SDK_KEY_DASHBOARD_URL}.",
            **fields,
        )

    def _emit_advisory(self) -> None:
        if self._advisory_emitted:
            return
        self._advisory_emitted = True
        self._metrics.record_advisory()
        self._log.warning(
            "data_governance_mismatch",
            data_governance=self._state.data_governance.value,
            message=(
                "The data_governance parameter is not in sync with the "
                "preferences on the ConfigCat Dashboard: "
                f"{DATA_GOVERNANCE_DASHBOARD_URL}. "
                "Only Organization Admins can set this preference."
            ),
        )

    def close(self) -> None:
        """Close the HTTP capability if this fetcher created it."""
        if self._owns_http and isinstance(self._http, HttpxCapability):
            self._http.close()

    def __enter__(self) -> "ConfigFetcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
