"""Quote ledger: SQLite implementation and factory."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiosqlite

from cotation.core.config import StorageConfig
from cotation.core.exceptions import StorageError
from cotation.core.models import Quote, StoredQuoteRecord

logger = logging.getLogger(__name__)

_TABLE = "cotation"

_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS cotation ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "bid TEXT, "
    "timestamp DATETIME DEFAULT CURRENT_TIMESTAMP)"
)
_INSERT_QUOTE = "INSERT INTO cotation (bid) VALUES (?)"


@runtime_checkable
class LedgerProtocol(Protocol):
    """Append-only quote ledger."""

    async def initialize(self) -> None: ...
    async def append(self, quote: Quote, timeout: float | None = None) -> int | None: ...


class SqliteStore:
    """SQLite ledger with one connection per operation.

    No connection is held between calls, so concurrent requests never share
    a handle; SQLite serializes the writes itself.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._path = config.sqlite_path
        self._timeout = config.timeout

    @property
    def path(self) -> str:
        return self._path

    async def initialize(self) -> None:
        """Create the ledger table if it does not exist. Safe to call repeatedly."""
        try:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(self._path) as db:
                await db.execute(_CREATE_TABLE)
                await db.commit()
        except Exception as e:
            raise StorageError(
                f"Failed to initialize SQLite ledger: {e}",
                context={"operation": "initialize", "table": _TABLE, "path": self._path},
            ) from e
        logger.info("Ledger ready at %s", self._path)

    async def append(self, quote: Quote, timeout: float | None = None) -> int | None:
        """Insert one quote row under a deadline.

        The deadline covers the INSERT only; the commit runs outside it. An
        INSERT cut off by the deadline is never committed and is discarded
        when the connection closes, so a raised error means no row was added.

        Args:
            quote: The quote to record.
            timeout: Deadline in seconds. Defaults to the configured storage
                timeout.

        Returns:
            The new row id.

        Raises:
            StorageError: Connection, execution, or deadline failure.
        """
        deadline = self._timeout if timeout is None else timeout
        try:
            async with aiosqlite.connect(self._path) as db:
                async with asyncio.timeout(deadline):
                    cursor = await db.execute(_INSERT_QUOTE, (quote.bid,))
                await db.commit()
                return cursor.lastrowid
        except TimeoutError as e:
            raise StorageError(
                f"Ledger insert exceeded deadline of {deadline * 1000:.0f}ms",
                context={"operation": "insert", "table": _TABLE, "path": self._path},
            ) from e
        except Exception as e:
            raise StorageError(
                f"Failed to insert quote: {e}",
                context={"operation": "insert", "table": _TABLE, "path": self._path},
            ) from e

    async def count_records(self) -> int:
        try:
            async with aiosqlite.connect(self._path) as db:
                async with db.execute(f"SELECT COUNT(*) FROM {_TABLE}") as cursor:
                    row = await cursor.fetchone()
            return row[0]
        except Exception as e:
            raise StorageError(
                f"Failed to count ledger rows: {e}",
                context={"operation": "query", "table": _TABLE, "path": self._path},
            ) from e

    async def list_records(self) -> list[StoredQuoteRecord]:
        """Return every ledger row in insertion order."""
        try:
            async with aiosqlite.connect(self._path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    f"SELECT id, bid, timestamp FROM {_TABLE} ORDER BY id"
                ) as cursor:
                    rows = await cursor.fetchall()
            return [self._row_to_record(row) for row in rows]
        except Exception as e:
            raise StorageError(
                f"Failed to list ledger rows: {e}",
                context={"operation": "query", "table": _TABLE, "path": self._path},
            ) from e

    @staticmethod
    def _row_to_record(row: aiosqlite.Row) -> StoredQuoteRecord:
        return StoredQuoteRecord(
            id=row["id"],
            bid=row["bid"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )


async def create_store(config: StorageConfig) -> SqliteStore:
    """Create a ledger and make sure its schema exists."""
    store = SqliteStore(config)
    await store.initialize()
    return store
