"""Structured logging configuration.

Store events carry container paths (database, table, primary key, column)
and the payload written: ``value`` for a column, ``columns`` for a whole
row. Values are whatever type the environment was built for and may be
large or sensitive, so ``redact_payload`` reduces them to a type name or
the sorted column names before rendering.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

PAYLOAD_KEYS = frozenset({"value", "values", "columns"})


def redact_payload(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Replace payload fields with a short type description."""
    for key in PAYLOAD_KEYS & event_dict.keys():
        payload = event_dict[key]
        if isinstance(payload, dict):
            event_dict[key] = sorted(str(name) for name in payload)
        else:
            event_dict[key] = f"<{type(payload).__name__}>"
    return event_dict


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    service_name: str = "jsdb",
) -> None:
    """
    Set up structured logging with structlog.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
        service_name: Bound to every event as ``service``
    """
    log_level = getattr(logging, level.upper())
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_payload,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer: Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """
    Get a bound logger instance.

    Args:
        name: Logger name (module name typically)
        **initial_context: Initial context to bind to the logger

    Returns:
        A bound structlog logger
    """
    logger = structlog.get_logger(name or "jsdb")
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
