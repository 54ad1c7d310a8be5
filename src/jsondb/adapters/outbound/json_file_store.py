"""JSON file implementation of the DocumentStore port.

The whole database lives in one human-readable JSON document. Every
mutation rewrites the full document; there are no incremental writes.

Write Path:
    1. Acquire the writer lock (asyncio.Lock, FIFO wake-up order).
    2. For update(): copy every table list of the cached database and
       apply the change to that draft.
    3. Serialize on the event-loop thread, so no coroutine can mutate
       the draft mid-encode.
    4. In a worker thread: write a temp file in the same directory,
       optionally fsync, then os.replace() it over the document.
    5. Point the cache at the written database. A failed write skips
       this step, so readers keep seeing the last committed state.

The rename is atomic on POSIX and Windows, so a concurrent reader sees
either the old document or the new one, never a torn file.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, TypeVar

from jsondb.domain.entities import Database
from jsondb.domain.errors import StorageError
from jsondb.infrastructure.logging import get_logger
from jsondb.infrastructure.metrics import MetricsRegistry, get_metrics

logger = get_logger(__name__)

T = TypeVar("T")


class JsonFileStore:
    """File-backed implementation of the DocumentStore protocol.

    Attributes:
        path: Location of the JSON document.
        default_table: Table seeded into a fresh database.
    """

    def __init__(
        self,
        path: str | Path,
        default_table: str = "photos",
        sync_mode: str = "fsync",
        indent: int | None = 2,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the store. No I/O happens until the first load.

        Args:
            path: Path of the JSON document (parent directory is created on load).
            default_table: Table every fresh database contains.
            sync_mode: 'fsync' to flush file data before the rename, 'none' to skip.
            indent: JSON indentation; None writes a compact document.
            metrics: Metrics registry (default: global registry).
        """
        if sync_mode not in ("fsync", "none"):
            raise ValueError(f"Unknown sync mode: {sync_mode}")

        self._path = Path(path)
        self._default_table = default_table
        self._sync_mode = sync_mode
        self._indent = indent
        self._metrics = metrics or get_metrics()

        self._cache: Database | None = None
        self._load_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        """Location of the JSON document."""
        return self._path

    @property
    def default_table(self) -> str:
        return self._default_table

    @property
    def cached(self) -> Database | None:
        return self._cache

    async def load(self) -> Database:
        """Return the cached database, reading the document on first use.

        Returns:
            The in-process database.

        Raises:
            StorageError: If a fresh database had to be created and could not
                be written.
        """
        if self._cache is not None:
            return self._cache

        async with self._load_lock:
            # Another coroutine may have finished loading while we waited
            if self._cache is not None:
                return self._cache

            await asyncio.to_thread(self._path.parent.mkdir, parents=True, exist_ok=True)

            database = await self._read_document()
            if database is None:
                self._metrics.load_fallbacks_total.inc()
                database = {self._default_table: []}
                await self.persist(database)
            else:
                database.setdefault(self._default_table, [])
                self._cache = database
                logger.debug(
                    "database_loaded",
                    path=str(self._path),
                    tables=len(database),
                )

            return database

    async def persist(self, database: Database) -> None:
        """Overwrite the document with ``database`` and cache it.

        Calls are queued behind a single lock so at most one write is in
        flight and writes land in call order.

        Args:
            database: The complete database to write.

        Raises:
            StorageError: If writing or renaming the file fails.
        """
        async with self._write_lock:
            await self._write(database)

    async def update(self, change: Callable[[Database], T]) -> T:
        """Apply ``change`` to a copy of the database and persist the copy.

        ``change`` runs under the writer lock on a draft whose table lists
        are fresh copies, so it may append to or replace them freely. The
        cache moves to the draft only once the write has landed; a failed
        write leaves the cached database exactly as it was.

        Args:
            change: Synchronous function mutating the draft.

        Returns:
            Whatever ``change`` returned.

        Raises:
            StorageError: If writing or renaming the file fails.
        """
        loaded = await self.load()
        async with self._write_lock:
            current = self._cache if self._cache is not None else loaded
            draft: Database = {name: list(rows) for name, rows in current.items()}
            result = change(draft)
            await self._write(draft)
        return result

    async def _write(self, database: Database) -> None:
        """Write ``database`` and point the cache at it. Caller holds the lock."""
        start = time.perf_counter()
        payload = self._encode(database)
        try:
            await asyncio.to_thread(self._write_atomic, payload)
        except OSError as e:
            logger.error("database_persist_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write {self._path}: {e}") from e

        self._cache = database

        self._metrics.persists_total.inc()
        self._metrics.document_size_bytes.set(len(payload))
        self._metrics.persist_latency_seconds.observe(time.perf_counter() - start)
        logger.debug("database_persisted", path=str(self._path), size_bytes=len(payload))

    def clear_cache(self) -> None:
        """Forget the in-process database."""
        self._cache = None

    async def _read_document(self) -> Database | None:
        """Read and validate the document; None means start fresh."""
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.info("database_file_missing", path=str(self._path))
            return None
        except OSError as e:
            logger.warning("database_file_unreadable", path=str(self._path), error=str(e))
            return None

        try:
            document: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("database_file_corrupt", path=str(self._path), error=str(e))
            return None

        if not self._is_database(document):
            logger.warning("database_file_invalid_shape", path=str(self._path))
            return None

        return document

    @staticmethod
    def _is_database(document: Any) -> bool:
        if not isinstance(document, dict):
            return False
        for rows in document.values():
            if not isinstance(rows, list):
                return False
            if not all(isinstance(row, dict) for row in rows):
                return False
        return True

    def _encode(self, database: Database) -> bytes:
        return json.dumps(database, indent=self._indent, ensure_ascii=False).encode("utf-8")

    def _write_atomic(self, payload: bytes) -> None:
        """Write ``payload`` to a sibling temp file and rename it into place."""
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                if self._sync_mode == "fsync":
                    os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
