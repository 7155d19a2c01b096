"""Configuration fetch layer with revalidation and redirect routing.

This module provides the fetch-and-cache core:
- ETag conditional requests against the configuration CDN
- Base URL routing across custom endpoints, data governance and
  server-advertised redirects
- A single bounded redirect hop per fetch
- Typed results instead of raised network errors
"""

from configcat_cache.fetch.cache import RevalidationCache
from configcat_cache.fetch.client import (
    ConfigFetcher,
    HttpCapability,
    HttpxCapability,
    build_config_url,
    build_user_agent,
)
from configcat_cache.fetch.config import FetcherOptions
from configcat_cache.fetch.constants import (
    BASE_URL_EU_ONLY,
    BASE_URL_GLOBAL,
    CONFIG_FILENAME,
    HTTP_STATUS_NOT_MODIFIED,
    MAX_REDIRECT_HOPS,
)
from configcat_cache.fetch.metrics import FetchMetrics
from configcat_cache.fetch.models import (
    ConfigUnchanged,
    ConfigUpdated,
    DataGovernance,
    FetchError,
    FetchFailed,
    FetchResult,
    FetchState,
    HttpResponse,
    Preferences,
    RedirectMode,
    ResponseError,
    TransportError,
    TransportErrorClass,
    TransportFailure,
)
from configcat_cache.fetch.redact import (
    redact_headers,
    redact_sdk_key,
    redact_url_credentials,
)
from configcat_cache.fetch.routing import (
    RoutingDecision,
    initial_base_url,
    resolve_redirect,
)


__all__ = [
    # Client
    "ConfigFetcher",
    "HttpCapability",
    "HttpxCapability",
    "build_config_url",
    "build_user_agent",
    # Cache
    "RevalidationCache",
    # Config
    "FetcherOptions",
    # Routing
    "RoutingDecision",
    "initial_base_url",
    "resolve_redirect",
    # Models
    "ConfigUpdated",
    "ConfigUnchanged",
    "FetchFailed",
    "FetchResult",
    "FetchError",
    "TransportError",
    "TransportErrorClass",
    "TransportFailure",
    "ResponseError",
    "FetchState",
    "HttpResponse",
    "Preferences",
    "RedirectMode",
    "DataGovernance",
    # Constants
    "BASE_URL_GLOBAL",
    "BASE_URL_EU_ONLY",
    "CONFIG_FILENAME",
    "HTTP_STATUS_NOT_MODIFIED",
    "MAX_REDIRECT_HOPS",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_headers",
    "redact_sdk_key",
    "redact_url_credentials",
]
