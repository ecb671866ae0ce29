"""
Key-value store using SQLite.

Plays the part of the browser's localStorage: string keys, string values,
every write committed before the call returns.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

STORAGE_FILENAME = "stacks.db"


@runtime_checkable
class StorageProtocol(Protocol):
    """
    The persistence interface the Shelf depends on.

    Implemented by:
    - LocalStorage (SQLite file)
    - in-memory fakes in tests
    """

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> bool: ...

    def close(self) -> None: ...


class LocalStorage:
    """
    SQLite-backed string key-value store.

    One table, one row per key. Writes are synchronous: set_item()
    commits before returning.
    """

    def __init__(self, db_path: Path):
        """
        Args:
            db_path: Path to SQLite database file
        """
        self._db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the SQLite database."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS storage (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()

    @property
    def path(self) -> Path:
        return self._db_path

    def get_item(self, key: str) -> Optional[str]:
        """Stored value for key, or None if the key was never set."""
        row = self._conn.execute(
            "SELECT value FROM storage WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)",
            (key, value),
        )
        self._conn.commit()
        logger.debug("Wrote %d chars to %s", len(value), key)

    def remove_item(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        cursor = self._conn.execute("DELETE FROM storage WHERE key = ?", (key,))
        self._conn.commit()
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        rows = self._conn.execute("SELECT key FROM storage ORDER BY key").fetchall()
        return [r[0] for r in rows]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "LocalStorage":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
