"""Wire logging, tracing and metrics from configuration, then build a Store."""

from __future__ import annotations

from typing import Any

from jsdb.application.store import Store
from jsdb.infrastructure.config import Config, get_config
from jsdb.infrastructure.logging import get_logger, setup_logging
from jsdb.infrastructure.metrics import get_metrics, setup_metrics
from jsdb.infrastructure.tracing import setup_tracing


def bootstrap(config: Config | None = None) -> Store[Any]:
    """Configure observability and return a ready Store.

    Args:
        config: Configuration to use. Read from the environment if None.

    Returns:
        A Store configured from config.store and config.query
    """
    config = config or get_config()
    obs = config.observability

    setup_logging(level=obs.log_level, log_format=obs.log_format, service_name=obs.otel_service_name)
    setup_tracing(service_name=obs.otel_service_name, otlp_endpoint=obs.otel_endpoint)
    metrics = setup_metrics(port=obs.metrics_port) if obs.metrics_enabled else get_metrics()

    store: Store[Any] = Store.from_config(config, metrics=metrics)

    get_logger(__name__).info(
        "jsdb_store_initialized",
        thread_safe=store.thread_safe,
        metrics_enabled=obs.metrics_enabled,
        tracing_endpoint=obs.otel_endpoint,
    )
    return store
