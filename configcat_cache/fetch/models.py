"""Data models for the configuration fetch layer."""

from enum import Enum, IntEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from configcat_cache.fetch.constants import (
    HTTP_STATUS_NOT_MODIFIED,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    PREFERENCES_ALIASES,
    PREFERENCES_BASE_URL_ALIASES,
    REDIRECT_ALIASES,
)
from configcat_cache.observability.logging import get_logger


logger = get_logger(__name__)


class DataGovernance(str, Enum):
    """Regional origin preference declared by the caller.

    - GLOBAL: Use the global CDN origin
    - EU_ONLY: Keep traffic on the EU origin
    """

    GLOBAL = "global"
    EU_ONLY = "eu_only"


class RedirectMode(IntEnum):
    """Server-advertised instruction about the origin the client used."""

    NO_REDIRECT = 0
    SHOULD_REDIRECT = 1
    FORCE_REDIRECT = 2


class TransportErrorClass(str, Enum):
    """Classification of transport-level failures.

    - NETWORK_TIMEOUT: Connect or read timed out
    - CONNECTION_ERROR: Could not establish connection (DNS, refused)
    - PROXY_ERROR: The configured proxy rejected or failed the request
    - SSL_ERROR: SSL/TLS certificate or handshake error
    - UNKNOWN: Unclassified error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    PROXY_ERROR = "PROXY_ERROR"
    SSL_ERROR = "SSL_ERROR"
    UNKNOWN = "UNKNOWN"


class Preferences(BaseModel):
    """Redirect preferences embedded in a configuration document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    redirect_base_url: str | None = None
    redirect_mode: RedirectMode | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Preferences":
        """Extract preferences from a parsed configuration document.

        Missing or malformed values are treated as absent; the fetch still
        succeeds with whatever could be read.

        Args:
            document: Parsed configuration document.

        Returns:
            Preferences with absent fields set to None.
        """
        raw = _first_present(document, PREFERENCES_ALIASES)
        if not isinstance(raw, dict):
            return cls()

        base_url = _first_present(raw, PREFERENCES_BASE_URL_ALIASES)
        if not isinstance(base_url, str) or not base_url:
            base_url = None

        mode_value = _first_present(raw, REDIRECT_ALIASES)
        mode: RedirectMode | None = None
        if mode_value is not None:
            try:
                mode = RedirectMode(mode_value)
            except (ValueError, TypeError):
                logger.warning(
                    "unknown_redirect_mode",
                    component="fetch",
                    redirect_mode=repr(mode_value),
                )

        return cls(redirect_base_url=base_url, redirect_mode=mode)


def _first_present(mapping: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


class FetchState(BaseModel):
    """Request-shaping memory carried between fetch calls.

    Owned by exactly one fetcher. Values are immutable; each transaction
    produces a new state which the fetcher swaps in under its lock.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sdk_key: Annotated[str, Field(min_length=1)]
    base_url: Annotated[str, Field(min_length=1)]
    custom_endpoint: bool = False
    data_governance: DataGovernance = DataGovernance.GLOBAL
    etag: str | None = None
    http_proxy: str | None = None

    def with_etag(self, etag: str | None) -> "FetchState":
        """Return a copy carrying a new entity tag."""
        return self.model_copy(update={"etag": etag})

    def with_base_url(self, base_url: str) -> "FetchState":
        """Return a copy pointing at a new origin."""
        return self.model_copy(update={"base_url": base_url})


class HttpResponse(BaseModel):
    """Raw response returned by an HTTP capability."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(ge=100, le=999, description="HTTP status code")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    body_bytes: bytes = Field(default=b"", description="Response body")

    @property
    def is_success(self) -> bool:
        """Check if the status is in the 2xx range."""
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def is_not_modified(self) -> bool:
        """Check if the server confirmed the cached document is current."""
        return self.status_code == HTTP_STATUS_NOT_MODIFIED

    @property
    def body_text(self) -> str:
        """Decode the body for error reporting."""
        return self.body_bytes.decode("utf-8", errors="replace")


class TransportError(BaseModel):
    """The HTTP capability could not complete the request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["transport"] = "transport"
    error_class: TransportErrorClass = Field(description="Classification")
    message: Annotated[str, Field(min_length=1, description="Human-readable message")]


class ResponseError(BaseModel):
    """The server answered, but not with a usable configuration document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["response"] = "response"
    status_code: int = Field(ge=100, le=999, description="HTTP status code")
    body: str = Field(default="", description="Response body as text")
    headers: dict[str, str] = Field(default_factory=dict)
    message: Annotated[str, Field(min_length=1)]


FetchError = Annotated[TransportError | ResponseError, Field(discriminator="kind")]


class ConfigUpdated(BaseModel):
    """A new configuration document was downloaded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["updated"] = "updated"
    document: dict[str, Any]


class ConfigUnchanged(BaseModel):
    """The server confirmed the caller's cached document is still current."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["unchanged"] = "unchanged"


class FetchFailed(BaseModel):
    """The fetch attempt failed; the caller keeps its previous document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["failed"] = "failed"
    error: FetchError


FetchResult = Annotated[
    ConfigUpdated | ConfigUnchanged | FetchFailed, Field(discriminator="kind")
]


class TransportFailure(Exception):  # noqa: N818
    """Raised by an HTTP capability when no response could be obtained."""

    def __init__(self, error: TransportError) -> None:
        """Initialize the failure.

        Args:
            error: Structured description of the transport error.
        """
        super().__init__(error.message)
        self.error = error
