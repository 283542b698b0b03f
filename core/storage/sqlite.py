"""SQLite key-value backend for the prompt library.

Updates:
  v0.2.0 - 2026-10-11 - Run blocking SQLite calls in worker threads.
  v0.1.0 - 2026-10-04 - Create key-value table with WAL journaling.
"""

from __future__ import annotations

import asyncio
import sqlite3
from contextlib import closing
from pathlib import Path

from .base import LibraryStorage, StorageError, logger

_SCHEMA = """
CREATE TABLE IF NOT EXISTS library_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


def ensure_directory(path: Path) -> None:
    """Ensure the directory for the SQLite database exists."""
    path.parent.mkdir(parents=True, exist_ok=True)


def connect(db_path: Path) -> sqlite3.Connection:
    """Return a configured SQLite connection."""
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL;")
    conn.execute("PRAGMA synchronous = NORMAL;")
    return conn


class SQLiteStorage(LibraryStorage):
    """Store each collection as a JSON document row in a single SQLite table."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialise storage and ensure the schema exists."""
        self._db_path = Path(db_path).expanduser()
        try:
            ensure_directory(self._db_path)
            with closing(connect(self._db_path)) as conn, conn:
                conn.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Failed to initialise SQLite store at {self._db_path}") from exc
        logger.debug("SQLite store ready", extra={"db_path": str(self._db_path)})

    @property
    def db_path(self) -> Path:
        """Return the database location."""
        return self._db_path

    async def _read_text(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read_sync, key)

    async def _write_text(self, key: str, payload: str) -> None:
        await asyncio.to_thread(self._write_sync, key, payload)

    async def _remove(self, key: str) -> None:
        await asyncio.to_thread(self._remove_sync, key)

    def _read_sync(self, key: str) -> str | None:
        try:
            with closing(connect(self._db_path)) as conn:
                row = conn.execute(
                    "SELECT value FROM library_store WHERE key = ?;", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key}") from exc
        if row is None:
            return None
        return str(row["value"])

    def _write_sync(self, key: str, payload: str) -> None:
        try:
            with closing(connect(self._db_path)) as conn, conn:
                conn.execute(
                    """
                    INSERT INTO library_store (key, value)
                    VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
                    """,
                    (key, payload),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key}") from exc

    def _remove_sync(self, key: str) -> None:
        try:
            with closing(connect(self._db_path)) as conn, conn:
                conn.execute("DELETE FROM library_store WHERE key = ?;", (key,))
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to remove {key}") from exc


__all__ = ["SQLiteStorage", "connect", "ensure_directory"]
