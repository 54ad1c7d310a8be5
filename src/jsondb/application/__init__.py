"""Application layer for the JSON database engine.

Exports:
    DatabaseEngine:
        - DatabaseEngine: Main entry point (query, sql, test_connection)
    Executor:
        - StatementExecutor: Runs parsed commands against a document store
"""

from jsondb.application.database_engine import DatabaseEngine
from jsondb.application.executor import StatementExecutor

__all__ = [
    "DatabaseEngine",
    "StatementExecutor",
]
