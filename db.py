import sqlite3
import aiosqlite
import logging
from contextlib import contextmanager, asynccontextmanager
from typing import List, Optional, Protocol, Tuple

from log_schema import LogStore, default_store, parse_store

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "kv_store": (
            """CREATE TABLE kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)
        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            conn.execute(
                f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
            )
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous variant of BaseRepository using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return rows


class KeyValueRepository(BaseRepository):
    """String slots keyed by name, backing device-local persistence."""

    def get_text(self, key: str, default: Optional[str] = None) -> Optional[str]:
        rows = self.fetch_all("SELECT value FROM kv_store WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def set_text(self, key: str, value: str) -> None:
        self.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
            (key, value),
        )


class AsyncKeyValueRepository(AsyncBaseRepository):
    """Async repository for the remote snapshot slot."""

    async def get_text(
        self, key: str, default: Optional[str] = None
    ) -> Optional[str]:
        rows = await self.fetch_all(
            "SELECT value FROM kv_store WHERE key = ?;", (key,)
        )
        return rows[0][0] if rows else default

    async def set_text(self, key: str, value: str) -> None:
        await self.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value;",
            (key, value),
        )


class TextStorage(Protocol):
    def get_text(self, key: str, default: Optional[str] = None) -> Optional[str]:
        ...

    def set_text(self, key: str, value: str) -> None:
        ...


class LocalLogRepository:
    """Reads and writes the whole log store to one local storage slot."""

    def __init__(
        self, storage: TextStorage, key: str = "workout_tracker_v1"
    ) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> LogStore:
        """Return the stored log, or an empty one if absent or unreadable."""
        try:
            raw = self.storage.get_text(self.key)
        except (sqlite3.Error, OSError) as e:
            logger.warning("Reading local slot %r failed: %s", self.key, e)
            return default_store()
        if raw is None:
            return default_store()
        try:
            return parse_store(raw)
        except ValueError as e:
            logger.warning("Discarding unreadable local slot %r: %s", self.key, e)
            return default_store()

    def save(self, snapshot: LogStore) -> None:
        try:
            self.storage.set_text(self.key, snapshot.to_json())
        except (sqlite3.Error, OSError) as e:
            logger.warning("Writing local slot %r failed: %s", self.key, e)
