"""Metrics collection for the configuration fetch layer."""

from dataclasses import dataclass, field
from typing import ClassVar

from configcat_cache.fetch.models import TransportErrorClass


@dataclass
class FetchMetrics:
    """Metrics for configuration fetch operations.

    Singleton class that tracks fetch-related metrics including
    request counts, not-modified responses, redirects, and failures.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_not_modified_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    redirect_hops_total: int = 0
    governance_advisories_total: int = 0
    fetch_duration_ms_total: float = 0.0
    fetch_count: int = 0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP request.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of bytes received.
        """
        self.http_requests_total[status_code] = (
            self.http_requests_total.get(status_code, 0) + 1
        )
        self.http_bytes_total += bytes_received

    def record_not_modified(self) -> None:
        """Record a 304 revalidation hit."""
        self.http_not_modified_total += 1

    def record_failure(self, error_class: TransportErrorClass | int) -> None:
        """Record a fetch failure.

        Args:
            error_class: Transport error class, or the HTTP status code of an
                error response.
        """
        key = (
            error_class.value
            if isinstance(error_class, TransportErrorClass)
            else f"HTTP_{error_class}"
        )
        self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_redirect(self) -> None:
        """Record a redirected attempt."""
        self.redirect_hops_total += 1

    def record_advisory(self) -> None:
        """Record a data governance advisory."""
        self.governance_advisories_total += 1

    def record_duration(self, duration_ms: float) -> None:
        """Record the duration of one fetch call.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.fetch_duration_ms_total += duration_ms
        self.fetch_count += 1

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_not_modified_total": self.http_not_modified_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "redirect_hops_total": self.redirect_hops_total,
            "governance_advisories_total": self.governance_advisories_total,
            "fetch_duration_ms_total": self.fetch_duration_ms_total,
            "fetch_count": self.fetch_count,
        }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average fetch duration.

        Returns:
            Average duration in milliseconds.
        """
        if self.fetch_count == 0:
            return 0.0
        return self.fetch_duration_ms_total / self.fetch_count
