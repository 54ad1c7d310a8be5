"""Prometheus metrics for the JSON database engine."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all query engine metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Query metrics
        self.queries_total = Counter(
            "jsondb_queries_total",
            "Total number of commands executed",
            ["statement", "status"],  # status: success, error
            registry=self._registry,
        )

        self.query_latency_seconds = Histogram(
            "jsondb_query_latency_seconds",
            "Command latency in seconds",
            ["statement"],  # create_table, insert, select, update, delete, noop
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry,
        )

        self.rows_returned_total = Counter(
            "jsondb_rows_returned_total",
            "Total rows returned or affected",
            ["statement"],
            registry=self._registry,
        )

        # Persistence metrics
        self.persists_total = Counter(
            "jsondb_persists_total",
            "Total full-document writes",
            registry=self._registry,
        )

        self.persist_latency_seconds = Histogram(
            "jsondb_persist_latency_seconds",
            "Full-document write latency in seconds, including queueing",
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        self.document_size_bytes = Gauge(
            "jsondb_document_size_bytes",
            "Size of the last written document in bytes",
            registry=self._registry,
        )

        self.load_fallbacks_total = Counter(
            "jsondb_load_fallbacks_total",
            "Times a fresh database replaced a missing or unreadable file",
            registry=self._registry,
        )

        # Server info
        self.info = Info(
            "jsondb",
            "JSON database engine information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The underlying Prometheus collector registry."""
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from jsondb import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
