"""Statement executor.

Runs one parsed command against the document store and returns a
QueryResult. Every mutation rewrites the full document before returning.

Pipeline for a row-returning SELECT:

    table rows -> equality filter -> stable sort -> OFFSET -> LIMIT

COUNT(*) SELECTs share the filter stage and collapse the filtered rows into
one synthetic row, with any MIN/MAX aliases alongside the count. MIN/MAX
without COUNT(*) leave the row pipeline untouched.

Mutations go through DocumentStore.update, which applies them to a copy of
the tables, so a failed write never leaves the cached database changed.

Absent tables are never an error: reads return empty results, COUNT(*)
returns ``{"count": "0"}``, DELETE reports zero rows.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Sequence

from jsondb.domain.entities import (
    AggregateFunc,
    CreateTableCommand,
    Database,
    DeleteCommand,
    EqualityPredicate,
    InsertCommand,
    NoOpCommand,
    ParsedCommand,
    Primitive,
    QueryResult,
    Row,
    RowBound,
    SelectCommand,
    UpdateCommand,
)
from jsondb.domain.errors import UnsupportedStatementError
from jsondb.domain.services import compare, reduce_extreme, strict_equals
from jsondb.infrastructure.logging import get_logger
from jsondb.ports.outbound import DocumentStore

logger = get_logger(__name__)


def _resolve_param(values: Sequence[Primitive], index: int) -> Primitive:
    """Value for 1-based placeholder ``index``; None when out of range."""
    if 1 <= index <= len(values):
        return values[index - 1]
    return None


def _matches(row: Row, predicate: EqualityPredicate, value: Primitive) -> bool:
    return strict_equals(row.get(predicate.column), value)


def _resolve_bound(bound: RowBound | None, values: Sequence[Primitive]) -> int | None:
    """Row count for LIMIT/OFFSET; None when unbounded or not a usable integer."""
    if bound is None:
        return None
    if bound.literal is not None:
        return bound.literal
    value = _resolve_param(values, bound.param_index)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning("row_bound_ignored", placeholder=str(bound), value=repr(value))
        return None
    return value


class StatementExecutor:
    """Executes parsed commands against a DocumentStore.

    Example:
        >>> executor = StatementExecutor(store)
        >>> result = await executor.execute(InsertCommand("t", ("a",)), [1])
        >>> result.rows
        [{'a': 1}]
    """

    def __init__(self, store: DocumentStore, update_policy: str = "error") -> None:
        """Initialize the executor.

        Args:
            store: Store holding the database.
            update_policy: 'error' raises on UPDATE; 'ignore' reports zero rows.
        """
        if update_policy not in ("error", "ignore"):
            raise ValueError(f"Unknown update policy: {update_policy}")
        self._store = store
        self._update_policy = update_policy

    async def execute(
        self, command: ParsedCommand, values: Sequence[Primitive] = ()
    ) -> QueryResult:
        """Execute a parsed command.

        Args:
            command: The command variant to run.
            values: Positional parameter values; ``$N`` reads ``values[N-1]``.

        Returns:
            The uniform query result.

        Raises:
            UnsupportedStatementError: For UPDATE under the 'error' policy.
            StorageError: If a mutation could not be persisted.
        """
        if isinstance(command, NoOpCommand):
            logger.debug("command_ignored", reason=command.reason)
            return QueryResult.empty()

        database = await self._store.load()

        if isinstance(command, CreateTableCommand):
            return await self._execute_create_table(database, command)
        elif isinstance(command, InsertCommand):
            return await self._execute_insert(command, values)
        elif isinstance(command, SelectCommand):
            return self._execute_select(database, command, values)
        elif isinstance(command, UpdateCommand):
            return self._execute_update(database, command)
        elif isinstance(command, DeleteCommand):
            return await self._execute_delete(database, command, values)
        else:
            raise TypeError(f"Unsupported command type: {type(command).__name__}")

    async def _execute_create_table(
        self, database: Database, command: CreateTableCommand
    ) -> QueryResult:
        if command.table not in database:

            def add_table(draft: Database) -> None:
                draft.setdefault(command.table, [])

            await self._store.update(add_table)
            logger.info("table_created", table=command.table)
        return QueryResult.empty()

    async def _execute_insert(
        self, command: InsertCommand, values: Sequence[Primitive]
    ) -> QueryResult:
        # Columns beyond the supplied values stay absent from the row
        row: Row = dict(zip(command.columns, values))

        def append_row(draft: Database) -> None:
            draft.setdefault(command.table, []).append(row)

        await self._store.update(append_row)
        return QueryResult(rows=[dict(row)], row_count=1)

    def _filtered(
        self, database: Database, command: SelectCommand, values: Sequence[Primitive]
    ) -> list[Row] | None:
        """Rows of the command's table after the equality filter; None if absent."""
        rows = database.get(command.table)
        if rows is None:
            return None
        if command.predicate is None:
            return list(rows)
        value = _resolve_param(values, command.predicate.param_index)
        return [row for row in rows if _matches(row, command.predicate, value)]

    def _execute_select(
        self, database: Database, command: SelectCommand, values: Sequence[Primitive]
    ) -> QueryResult:
        rows = self._filtered(database, command, values)

        # MIN/MAX without COUNT(*) do not collapse the result
        if command.is_aggregate:
            return self._aggregate(rows, command)

        if rows is None:
            return QueryResult.empty()

        if command.order_by is not None:
            column = command.order_by.column
            sign = 1 if command.order_by.ascending else -1
            # sorted() is stable, so ties keep insertion order in both directions
            rows = sorted(
                rows,
                key=cmp_to_key(lambda a, b: sign * compare(a.get(column), b.get(column))),
            )

        offset = _resolve_bound(command.offset, values)
        if offset:
            rows = rows[offset:]

        limit = _resolve_bound(command.limit, values)
        if limit is not None:
            rows = rows[:limit]

        return QueryResult(rows=[dict(row) for row in rows], row_count=len(rows))

    def _aggregate(self, rows: list[Row] | None, command: SelectCommand) -> QueryResult:
        result: dict[str, Any] = {"count": str(len(rows) if rows else 0)}
        for request in command.aggregates:
            column_values = (row.get(request.column) for row in rows or [])
            result[request.alias] = reduce_extreme(
                column_values, largest=request.func == AggregateFunc.MAX
            )
        return QueryResult(rows=[result], row_count=1)

    def _execute_update(self, database: Database, command: UpdateCommand) -> QueryResult:
        if self._update_policy == "error":
            raise UnsupportedStatementError("UPDATE", command.table)
        logger.warning(
            "update_ignored",
            table=command.table,
            table_exists=command.table in database,
        )
        return QueryResult.empty()

    async def _execute_delete(
        self, database: Database, command: DeleteCommand, values: Sequence[Primitive]
    ) -> QueryResult:
        if command.table not in database:
            return QueryResult.empty()

        if command.predicate is None and command.has_where:
            logger.warning("delete_predicate_unsupported", table=command.table)

        def remove_rows(draft: Database) -> int:
            rows = draft[command.table]
            if command.predicate is not None:
                value = _resolve_param(values, command.predicate.param_index)
                kept = [row for row in rows if not _matches(row, command.predicate, value)]
            elif command.has_where:
                kept = rows
            else:
                kept = []
            draft[command.table] = kept
            return len(rows) - len(kept)

        deleted = await self._store.update(remove_rows)
        return QueryResult(rows=[], row_count=deleted)
