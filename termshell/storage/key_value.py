"""
Key-value storage for termshell state buckets.
Provides an in-memory store and a SQLite-backed store with JSON values.
"""
import json
import logging
import sqlite3
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

from ..constants import STATE_DB


logger = logging.getLogger(__name__)


SCHEMA_VERSION = 1

SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_info (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Persisted values, JSON encoded
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL
);
"""


class KeyValueStore(ABC):
    """Async key-value collaborator used to persist state buckets."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    @abstractmethod
    async def keys(self) -> List[str]:
        """All stored keys, sorted."""


class InMemoryKeyValueStore(KeyValueStore):
    """Store that lives for the lifetime of the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        # Round-trip through JSON so callers never share mutable state with the store
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self) -> List[str]:
        return sorted(self._data)


class SqliteKeyValueStore(KeyValueStore):
    """
    SQLite-backed key-value store.

    Values are serialized as JSON; a single connection is shared by the
    event loop thread.
    """

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self._db_path = Path(db_path) if db_path else STATE_DB
        self._connection: Optional[sqlite3.Connection] = None
        self._ensure_directory()
        self._initialize_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = sqlite3.connect(self._db_path)
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode = WAL")
        return self._connection

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database transaction."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def _initialize_schema(self) -> None:
        with self.transaction() as conn:
            conn.executescript(SCHEMA)

            row = conn.execute(
                "SELECT value FROM schema_info WHERE key = 'version'"
            ).fetchone()

            if row is None:
                conn.execute(
                    "INSERT INTO schema_info (key, value) VALUES (?, ?)",
                    ("version", str(SCHEMA_VERSION))
                )

    async def get(self, key: str) -> Optional[Any]:
        row = self._get_connection().execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["value"])

    async def set(self, key: str, value: Any) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, json.dumps(value), time.time())
            )
        logger.debug(f"Stored key: {key}")

    async def delete(self, key: str) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    async def keys(self) -> List[str]:
        rows = self._get_connection().execute(
            "SELECT key FROM kv_store ORDER BY key"
        ).fetchall()
        return [row["key"] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
