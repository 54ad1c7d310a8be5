"""Row and query result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

Primitive = Union[str, int, float, bool, None]
"""A value a row column may hold."""

Row = dict[str, Primitive]
"""A schema-less row document. Unassigned columns are absent."""

Table = list[Row]
"""Rows in insertion order."""

Database = dict[str, Table]
"""Table name to rows. Names are case-sensitive."""


@dataclass
class QueryResult:
    """Uniform result of every command.

    Attributes:
        rows: Result rows in order. Aggregate queries return one synthetic row.
        row_count: Rows returned (SELECT/INSERT) or removed (DELETE).
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0

    @classmethod
    def empty(cls) -> QueryResult:
        """Result for commands that touched nothing."""
        return cls(rows=[], row_count=0)

    def __len__(self) -> int:
        return len(self.rows)
