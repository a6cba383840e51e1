"""
Key/Blob State Store for SuperMorse.

Provides portable persistence for the serialized progression snapshot,
settings and confusion counts. The scheduler treats the store as an opaque
blob store with atomic put/get/delete.

Database location: ~/.supermorse/state.db
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Protocol

from loguru import logger


class BlobStore(Protocol):
    """Atomic key/blob persistence."""

    def put(self, key: str, blob: str) -> bool: ...

    def get(self, key: str) -> str | None: ...

    def delete(self, key: str) -> bool: ...


# =============================================================================
# Memory Store
# =============================================================================


class MemoryBlobStore:
    """Dict-backed store for tests and throwaway runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.blobs: dict[str, str] = dict(initial or {})

    def put(self, key: str, blob: str) -> bool:
        self.blobs[key] = blob
        return True

    def get(self, key: str) -> str | None:
        return self.blobs.get(key)

    def delete(self, key: str) -> bool:
        return self.blobs.pop(key, None) is not None


# =============================================================================
# SQLite Store
# =============================================================================


class SQLiteBlobStore:
    """
    SQLite-backed blob persistence.

    Every operation is a single statement in its own transaction, so a crash
    never leaves a half-written blob. sqlite errors are logged and reported
    through the return value instead of raised.
    """

    DEFAULT_DB_PATH = Path.home() / ".supermorse" / "state.db"

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize the blob store.

        Args:
            db_path: Custom database path (defaults to ~/.supermorse/state.db);
                ``":memory:"`` keeps everything in memory
        """
        if db_path is None:
            db_path = self.DEFAULT_DB_PATH
        if str(db_path) != ":memory:":
            db_path = Path(db_path)
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug(f"SQLiteBlobStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            # The session timer thread may save progress.
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self.conn:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS blobs (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)

    def put(self, key: str, blob: str) -> bool:
        """
        Insert or replace a blob.

        Args:
            key: Storage key
            blob: Serialized value

        Returns:
            True if the write was committed
        """
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                """,
                    (key, blob, datetime.now().isoformat()),
                )
        except sqlite3.Error:
            logger.exception(f"Failed to write {key!r} to {self.db_path}")
            return False
        return True

    def get(self, key: str) -> str | None:
        """Get a blob, or None when absent or unreadable."""
        try:
            row = self.conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error:
            logger.exception(f"Failed to read {key!r} from {self.db_path}")
            return None
        if row is None:
            return None
        return row["value"]

    def delete(self, key: str) -> bool:
        """Delete a blob. Returns whether a row was removed."""
        try:
            with self.conn:
                cursor = self.conn.execute("DELETE FROM blobs WHERE key = ?", (key,))
        except sqlite3.Error:
            logger.exception(f"Failed to delete {key!r} from {self.db_path}")
            return False
        return cursor.rowcount > 0

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
