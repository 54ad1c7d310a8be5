"""Domain entities for the JSON database engine.

Exports:
    Commands:
        - StatementType: Statement kinds in classification order
        - CreateTableCommand, InsertCommand, SelectCommand,
          UpdateCommand, DeleteCommand, NoOpCommand: Parsed command variants
        - EqualityPredicate, OrderBy, RowBound, AggregateRequest: Clauses
        - ParsedCommand: Union of all variants

    Results:
        - QueryResult: Rows plus row count
        - Row, Table, Database, Primitive: Document shapes
"""

from jsondb.domain.entities.commands import (
    AggregateFunc,
    AggregateRequest,
    CreateTableCommand,
    DeleteCommand,
    EqualityPredicate,
    InsertCommand,
    NoOpCommand,
    OrderBy,
    ParsedCommand,
    RowBound,
    SelectCommand,
    StatementType,
    UpdateCommand,
)
from jsondb.domain.entities.result import Database, Primitive, QueryResult, Row, Table

__all__ = [
    "AggregateFunc",
    "AggregateRequest",
    "CreateTableCommand",
    "DeleteCommand",
    "EqualityPredicate",
    "InsertCommand",
    "NoOpCommand",
    "OrderBy",
    "ParsedCommand",
    "RowBound",
    "SelectCommand",
    "StatementType",
    "UpdateCommand",
    "Database",
    "Primitive",
    "QueryResult",
    "Row",
    "Table",
]
