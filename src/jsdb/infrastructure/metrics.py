"""Prometheus metrics for jsdb."""

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
    """Registry of all jsdb metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Container mutations
        self.mutations_total = Counter(
            "jsdb_mutations_total",
            "Total container mutations",
            ["level", "operation"],  # level: database, table, row, column; operation: insert, replace, delete, noop
            registry=self._registry,
        )

        self.containers = Gauge(
            "jsdb_containers",
            "Containers per level, refreshed on stats()",
            ["level"],
            registry=self._registry,
        )

        # Query metrics
        self.queries_total = Counter(
            "jsdb_queries_total",
            "Total number of selects executed",
            ["status"],  # success, not_found, error
            registry=self._registry,
        )

        self.query_latency_seconds = Histogram(
            "jsdb_query_latency_seconds",
            "Select latency in seconds",
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        # Lock metrics
        self.lock_wait_seconds = Histogram(
            "jsdb_lock_wait_seconds",
            "Time spent waiting for the environment lock",
            ["mode"],  # read, write
            buckets=(0.0001, 0.001, 0.01, 0.1, 0.5, 1.0, 5.0),
            registry=self._registry,
        )

        self.info = Info(
            "jsdb",
            "jsdb information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """The prometheus registry the collectors are registered on."""
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None
_server_ports: set[int] = set()


def setup_metrics(port: int = 8011, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Safe to call more than once. Collectors already registered on the
    target registry by get_metrics() or an earlier call are reused, and the
    HTTP server is started at most once per port.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    target = registry or REGISTRY
    if _metrics is None or _metrics.registry is not target:
        _metrics = MetricsRegistry(target)

    from jsdb import __version__
    _metrics.info.info({
        "version": __version__,
    })

    if port not in _server_ports:
        start_http_server(port, registry=target)
        _server_ports.add(port)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
