"""Prometheus collectors for the HTTP layer."""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class MetricsSink:
    """Request duration/count observations plus pool and cache gauges.

    Each sink owns its registry so several applications (tests, mostly) can
    live in one process without colliding on metric names.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.http_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests.",
            ["path", "method"],
            registry=self.registry,
        )
        self.http_requests = Counter(
            "http_requests_total",
            "Count of HTTP requests.",
            ["path", "method", "status"],
            registry=self.registry,
        )
        self.db_connections = Gauge(
            "database_connections_active",
            "Number of active database connections.",
            registry=self.registry,
        )
        self.cache_size = Gauge(
            "cache_entries_total",
            "Number of entries in cache.",
            registry=self.registry,
        )

    def observe_request(
        self, path: str, method: str, status_code: int, duration_s: float
    ) -> None:
        self.http_duration.labels(path=path, method=method).observe(duration_s)
        self.http_requests.labels(path=path, method=method, status=str(status_code)).inc()

    def set_db_connections(self, active: int) -> None:
        self.db_connections.set(active)

    def set_cache_size(self, entries: int) -> None:
        self.cache_size.set(entries)

    def render(self) -> tuple[bytes, str]:
        """Exposition payload and its content type."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
