"""Observability module for logging."""

from configcat_cache.observability.logging import (
    bind_fetcher_context,
    clear_fetcher_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_fetcher_context",
    "clear_fetcher_context",
    "configure_logging",
    "get_logger",
]
