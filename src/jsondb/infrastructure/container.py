"""Dependency injection container for the JSON database engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import structlog
from opentelemetry import trace

from jsondb.adapters.outbound.json_file_store import JsonFileStore
from jsondb.application.database_engine import DatabaseEngine
from jsondb.infrastructure.config import Config, get_config
from jsondb.infrastructure.logging import setup_logging
from jsondb.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from jsondb.infrastructure.tracing import setup_tracing


@dataclass
class Container:
    """Wires configuration, observability, the store and the engine."""

    config: Config
    logger: structlog.stdlib.BoundLogger
    tracer: trace.Tracer
    metrics: MetricsRegistry
    store: JsonFileStore
    engine: DatabaseEngine

    _instance: ClassVar["Container | None"] = None

    @classmethod
    def create(
        cls,
        config: Config | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> "Container":
        """Create and initialize the container with all dependencies.

        Args:
            config: Configuration (default: environment-derived global config).
            metrics: Metrics registry (default: exporter on the configured
                port, or the global registry when no port is set).
        """
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        config.ensure_directories()
        observability = config.observability

        logger = setup_logging(
            observability.log_level,
            observability.log_format,
            log_parameter_values=observability.log_parameter_values,
        )
        tracer = setup_tracing(
            service_name=observability.otel_service_name,
            otlp_endpoint=observability.otel_endpoint,
        )
        if metrics is None:
            if observability.metrics_port is not None:
                metrics = setup_metrics(observability.metrics_port)
            else:
                metrics = get_metrics()

        store = JsonFileStore(
            config.storage.db_path,
            default_table=config.storage.default_table,
            sync_mode=config.storage.sync_mode,
            indent=config.storage.indent,
            metrics=metrics,
        )
        engine = DatabaseEngine(
            store,
            update_policy=config.engine.update_policy,
            metrics=metrics,
        )

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
            store=store,
            engine=engine,
        )

        logger.info(
            "jsondb_container_initialized",
            db_path=str(config.storage.db_path),
            update_policy=config.engine.update_policy,
        )

        return cls._instance

    @classmethod
    def get(cls) -> "Container":
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        if cls._instance is not None:
            cls._instance.store.clear_cache()
        cls._instance = None
