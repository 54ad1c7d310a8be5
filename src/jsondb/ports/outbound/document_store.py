"""Document Store port for whole-database persistence.

This outbound port defines the contract for the single document that holds
every table. The store owns the in-process cache; callers receive the
database by reference and treat it as read-only. Mutations go through
``update``, which swaps in a new database once it is written.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Callable, Protocol, TypeVar

from jsondb.domain.entities import Database

T = TypeVar("T")


class DocumentStore(Protocol):
    """Protocol for loading and persisting the database document.

    Concurrency:
        ``persist`` and ``update`` calls are serialized: one write in
        flight at a time, FIFO. A reader never observes a partially
        written document.
    """

    @property
    @abstractmethod
    def default_table(self) -> str:
        """Name of the table every fresh database contains."""
        ...

    @property
    @abstractmethod
    def cached(self) -> Database | None:
        """The in-process database, or None before the first load."""
        ...

    @abstractmethod
    async def load(self) -> Database:
        """Return the database, reading it from storage on first use.

        A missing or unreadable document is replaced by a fresh database
        containing only the empty default table.

        Returns:
            The cached database.
        """
        ...

    @abstractmethod
    async def persist(self, database: Database) -> None:
        """Overwrite the stored document with the full database.

        Args:
            database: The complete database to write.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    async def update(self, change: Callable[[Database], T]) -> T:
        """Atomically apply ``change`` to a copy of the database and persist it.

        The cached database is replaced only after the write succeeds.

        Args:
            change: Function mutating a draft whose table lists are copies.

        Returns:
            The value ``change`` returned.

        Raises:
            StorageError: If the write fails.
        """
        ...

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop the in-process database so the next load rereads storage."""
        ...
