"""Structured logging configuration.

Log records go through the standard library under the ``jsondb`` logger
namespace, so an application embedding the engine keeps control of its
own root handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

# Event keys that may carry bound parameter values
_PARAMETER_KEYS = ("value", "values")

_REDACTED = "<redacted>"


def redact_parameters(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask bound parameter values; they can hold user data."""
    for key in _PARAMETER_KEYS:
        if key in event_dict:
            event_dict[key] = _REDACTED
    return event_dict


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_parameter_values: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure structlog on top of the ``jsondb`` stdlib logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: 'json' for one JSON object per line, 'console' for humans
        log_parameter_values: Keep parameter values in log events instead of
            masking them

    Returns:
        A logger bound to the ``jsondb`` namespace
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if not log_parameter_values:
        shared_processors.append(redact_parameters)

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    package_logger = logging.getLogger("jsondb")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())
    package_logger.propagate = False

    return get_logger("jsondb")


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a bound logger instance.

    Args:
        name: Logger name, normally the module's ``__name__``
        **initial_context: Initial context to bind to the logger

    Returns:
        A bound structlog logger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
