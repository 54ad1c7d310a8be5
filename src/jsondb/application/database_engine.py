"""Database Engine - unified entry point for the JSON document store.

This module provides the DatabaseEngine class that ties together the
template binder, command parser, statement executor and document store.

Usage:
    from jsondb.adapters.outbound import JsonFileStore
    from jsondb.application import DatabaseEngine

    store = JsonFileStore("data/db.json")
    async with DatabaseEngine(store) as db:
        await db.query("CREATE TABLE albums (id TEXT, title TEXT)")
        await db.sql(["INSERT INTO albums (id, title) VALUES (", ", ", ")"], "a1", "Coast")
        result = await db.sql(["SELECT * FROM albums WHERE id = ", ""], "a1")
        print(result.rows)
"""

from __future__ import annotations

import time
from typing import Sequence

from jsondb.adapters.inbound.command_parser import CommandParser
from jsondb.adapters.inbound.template_binder import bind_template
from jsondb.application.executor import StatementExecutor
from jsondb.domain.entities import Primitive, QueryResult
from jsondb.domain.errors import ConnectionCheckError
from jsondb.infrastructure.logging import get_logger
from jsondb.infrastructure.metrics import MetricsRegistry, get_metrics
from jsondb.infrastructure.tracing import query_span
from jsondb.ports.outbound import DocumentStore

logger = get_logger(__name__)


class DatabaseEngine:
    """Main engine: parse, execute and persist SQL-shaped commands.

    The engine owns nothing global. The store passed in holds the database
    cache, and closing the engine clears it.

    Concurrency:
        All methods are coroutines for a single event loop. Only file reads
        and writes suspend; parsing, filtering and in-memory mutation run
        without yielding, so they are atomic with respect to other calls.
    """

    def __init__(
        self,
        store: DocumentStore,
        update_policy: str = "error",
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Document store holding the database.
            update_policy: 'error' raises on UPDATE; 'ignore' reports zero rows.
            metrics: Metrics registry (default: global registry).
        """
        self._store = store
        self._parser = CommandParser()
        self._executor = StatementExecutor(store, update_policy=update_policy)
        self._metrics = metrics or get_metrics()

    @property
    def store(self) -> DocumentStore:
        """The document store backing this engine."""
        return self._store

    async def query(
        self, command: str, values: Sequence[Primitive] = ()
    ) -> QueryResult:
        """Execute a command with ``$N`` placeholders.

        Args:
            command: Command text.
            values: Parameter values; ``$N`` refers to ``values[N-1]``.

        Returns:
            Result rows and row count.

        Raises:
            InvalidArgumentError: If an INSERT has no usable column list.
            UnsupportedStatementError: For UPDATE under the 'error' policy.
            StorageError: If a mutation could not be persisted.
        """
        start = time.perf_counter()
        statement = "unparsed"
        try:
            parsed = self._parser.parse(command)
            statement = parsed.statement_type.value
            with query_span(
                statement,
                table=parsed.table,
                param_count=len(values),
            ):
                result = await self._executor.execute(parsed, values)
        except Exception as e:
            self._metrics.queries_total.labels(statement=statement, status="error").inc()
            logger.warning("query_failed", statement=statement, error=str(e))
            raise

        self._metrics.queries_total.labels(statement=statement, status="success").inc()
        self._metrics.rows_returned_total.labels(statement=statement).inc(result.row_count)
        self._metrics.query_latency_seconds.labels(statement=statement).observe(
            time.perf_counter() - start
        )
        logger.debug("query_executed", statement=statement, row_count=result.row_count)
        return result

    async def sql(self, fragments: Sequence[str], *values: Primitive) -> QueryResult:
        """Execute a template: literal fragments around positional values.

        Args:
            fragments: Text surrounding each value; one more than ``values``.
            *values: Parameter values, bound to ``$1``, ``$2``, ... in order.

        Raises:
            InvalidArgumentError: If the template shape is wrong.
        """
        bound = bind_template(fragments, values)
        return await self.query(bound.text, bound.values)

    async def test_connection(self) -> QueryResult:
        """Check that the store can be opened.

        Returns:
            A single ``{"count": "1"}`` row.

        Raises:
            ConnectionCheckError: If loading the store failed.
        """
        try:
            await self._store.load()
        except Exception as e:
            raise ConnectionCheckError(f"Database connection failed: {e}") from e
        return QueryResult(rows=[{"count": "1"}], row_count=1)

    async def close(self) -> None:
        """Release the store's in-process cache."""
        self._store.clear_cache()

    async def __aenter__(self) -> "DatabaseEngine":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
