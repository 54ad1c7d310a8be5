"""Exception hierarchy for the JSON database engine.

Absent tables are not errors: lookups against them degrade to empty or zero
results. Only caller misuse, unsupported statements, and failed writes raise.
"""

from __future__ import annotations


class JsonDBError(Exception):
    """Base class for all engine errors."""

    pass


class InvalidArgumentError(JsonDBError, ValueError):
    """A call or command is malformed (bad template, missing column list)."""

    pass


class UnsupportedStatementError(JsonDBError):
    """The statement kind is recognized but cannot be executed."""

    def __init__(self, statement: str, table: str | None = None) -> None:
        self.statement = statement
        self.table = table
        target = f" on table '{table}'" if table else ""
        super().__init__(f"{statement} is not supported{target}")


class StorageError(JsonDBError):
    """Persisting the database document failed."""

    pass


class ConnectionCheckError(JsonDBError):
    """The backing store could not be opened."""

    pass
