"""Shared fixtures for the test suite."""

from collections.abc import Generator

import pytest
import structlog

from configcat_cache.fetch.metrics import FetchMetrics


@pytest.fixture(autouse=True)
def _isolate_global_state() -> Generator[None]:
    """Reset logging configuration and metrics around every test."""
    structlog.reset_defaults()
    FetchMetrics.reset()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    FetchMetrics.reset()
