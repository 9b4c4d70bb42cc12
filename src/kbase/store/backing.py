"""Key-value backing stores holding JSON-serialized values."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class BackingStore(Protocol):
    """Durable string-keyed storage of JSON-serializable values.

    Reads never raise: an absent key or a value that cannot be decoded
    yields the supplied default. Writes are immediate and synchronous.
    """

    def read(self, key: str, default: Any = None) -> Any: ...

    def write(self, key: str, value: Any) -> None: ...

    def contains(self, key: str) -> bool: ...


def _decode(key: str, raw: str | None, default: Any) -> Any:
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Error reading %s from storage: %s", key, e)
        return default


class SQLiteStore:
    """Persistent key-value storage using SQLite.

    Each key maps to a single row holding the JSON text of its value, so a
    write replaces the whole value at once.
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def init_db(self) -> None:
        """Create the storage table if it doesn't exist."""
        conn = self._get_connection()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS storage (
                key         TEXT PRIMARY KEY,
                value       TEXT NOT NULL,
                updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        conn.commit()

    def read(self, key: str, default: Any = None) -> Any:
        """Read and decode the value stored under key.

        Args:
            key: Storage key.
            default: Returned when the key is absent or unreadable.

        Returns:
            The decoded value, or default.
        """
        try:
            row = self._get_connection().execute(
                "SELECT value FROM storage WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Error reading %s from storage: %s", key, e)
            return default
        return _decode(key, row["value"] if row else None, default)

    def write(self, key: str, value: Any) -> None:
        """Serialize value and store it under key, replacing any previous value."""
        raw = json.dumps(value)
        conn = self._get_connection()
        conn.execute(
            """
            INSERT INTO storage (key, value)
            VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = datetime('now')
            """,
            (key, raw),
        )
        conn.commit()

    def contains(self, key: str) -> bool:
        """Check whether a value has ever been written under key."""
        row = self._get_connection().execute(
            "SELECT 1 FROM storage WHERE key = ?", (key,)
        ).fetchone()
        return row is not None

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


class InMemoryStore:
    """Process-local store with the same serialization behaviour as SQLiteStore."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str, default: Any = None) -> Any:
        return _decode(key, self._data.get(key), default)

    def write(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def contains(self, key: str) -> bool:
        return key in self._data

    def close(self) -> None:
        pass
