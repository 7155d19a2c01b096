"""In-process test doubles for exercising fetchers without network access."""

from configcat_cache.e2e.mock_transport import (
    MockTransportStats,
    NetworkAccessBlockedError,
    RequestRecord,
    ScriptedHttpClient,
)


__all__ = [
    "MockTransportStats",
    "NetworkAccessBlockedError",
    "RequestRecord",
    "ScriptedHttpClient",
]
