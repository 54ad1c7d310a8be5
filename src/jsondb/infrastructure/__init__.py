"""Infrastructure layer - cross-cutting concerns."""

from jsondb.infrastructure.config import Config, get_config
from jsondb.infrastructure.logging import setup_logging, get_logger
from jsondb.infrastructure.metrics import setup_metrics, MetricsRegistry
from jsondb.infrastructure.tracing import setup_tracing, get_tracer

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
]
