"""Parsed command variants.

Each statement kind the engine recognizes is a separate frozen dataclass.
The executor dispatches on the concrete type, so a new kind cannot be added
without the executor noticing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class StatementType(Enum):
    """Statement kinds in classification precedence order."""

    CREATE_TABLE = "create_table"
    INSERT = "insert"
    SELECT = "select"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


class AggregateFunc(Enum):
    """Column aggregates computed alongside or instead of COUNT(*)."""

    MIN = "MIN"
    MAX = "MAX"


@dataclass(frozen=True)
class EqualityPredicate:
    """A ``column = $N`` filter. ``param_index`` is 1-based."""

    column: str
    param_index: int

    def __str__(self) -> str:
        return f"{self.column} = ${self.param_index}"


@dataclass(frozen=True)
class OrderBy:
    """Single-column ordering."""

    column: str
    ascending: bool = True

    def __str__(self) -> str:
        return f"{self.column} {'ASC' if self.ascending else 'DESC'}"


@dataclass(frozen=True)
class RowBound:
    """A LIMIT or OFFSET count: either a literal or a 1-based placeholder."""

    literal: int | None = None
    param_index: int | None = None

    def __post_init__(self) -> None:
        if (self.literal is None) == (self.param_index is None):
            raise ValueError("RowBound needs exactly one of literal or param_index")

    def __str__(self) -> str:
        if self.param_index is not None:
            return f"${self.param_index}"
        return str(self.literal)


@dataclass(frozen=True)
class AggregateRequest:
    """``MIN(column) AS alias`` or ``MAX(column) AS alias``."""

    func: AggregateFunc
    column: str
    alias: str

    def __str__(self) -> str:
        return f"{self.func.value}({self.column}) AS {self.alias}"


@dataclass(frozen=True)
class CreateTableCommand:
    """CREATE TABLE name (...)."""

    table: str

    statement_type = StatementType.CREATE_TABLE


@dataclass(frozen=True)
class InsertCommand:
    """INSERT INTO name (columns...) VALUES (...)."""

    table: str
    columns: tuple[str, ...]

    statement_type = StatementType.INSERT


@dataclass(frozen=True)
class SelectCommand:
    """SELECT ... FROM name [WHERE col = $N] [ORDER BY col] [LIMIT n] [OFFSET n]."""

    table: str
    predicate: EqualityPredicate | None = None
    order_by: OrderBy | None = None
    limit: RowBound | None = None
    offset: RowBound | None = None
    count: bool = False
    aggregates: tuple[AggregateRequest, ...] = field(default_factory=tuple)

    statement_type = StatementType.SELECT

    @property
    def is_aggregate(self) -> bool:
        """True when the result is a single synthetic aggregate row.

        Only COUNT(*) collapses the result; MIN/MAX on their own are
        ignored and the matching rows come back unchanged.
        """
        return self.count

    def __str__(self) -> str:
        parts = [f"Select({self.table}"]
        if self.count:
            parts.append(", COUNT(*)")
        for agg in self.aggregates:
            parts.append(f", {agg}")
        if self.predicate:
            parts.append(f", WHERE {self.predicate}")
        if self.order_by:
            parts.append(f", ORDER BY {self.order_by}")
        if self.limit:
            parts.append(f", LIMIT {self.limit}")
        if self.offset:
            parts.append(f", OFFSET {self.offset}")
        parts.append(")")
        return "".join(parts)


@dataclass(frozen=True)
class UpdateCommand:
    """UPDATE name SET ... (table resolution only)."""

    table: str

    statement_type = StatementType.UPDATE


@dataclass(frozen=True)
class DeleteCommand:
    """DELETE FROM name [WHERE col = $N].

    ``has_where`` distinguishes "no WHERE clause" (clear the table) from
    "a WHERE clause without a usable equality" (remove nothing).
    """

    table: str
    predicate: EqualityPredicate | None = None
    has_where: bool = False

    statement_type = StatementType.DELETE


@dataclass(frozen=True)
class NoOpCommand:
    """A command that resolves to nothing to do."""

    reason: str = ""

    statement_type = StatementType.NOOP
    table = None


ParsedCommand = Union[
    CreateTableCommand,
    InsertCommand,
    SelectCommand,
    UpdateCommand,
    DeleteCommand,
    NoOpCommand,
]
