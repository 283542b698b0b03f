"""In-process storage backend for tests and throwaway sessions.

Updates:
  v0.1.0 - 2026-10-04 - Add dictionary-backed LibraryStorage implementation.
"""

from __future__ import annotations

from collections.abc import Mapping

from .base import LibraryStorage, StorageError


class InMemoryStorage(LibraryStorage):
    """Keep serialised payloads in a dictionary.

    Values are stored as JSON text, so callers never share object references
    with the store.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self._closed = False

    @property
    def raw_values(self) -> dict[str, str]:
        """Return a copy of the stored payloads keyed by storage key."""
        return dict(self._values)

    async def _read_text(self, key: str) -> str | None:
        self._ensure_open()
        return self._values.get(key)

    async def _write_text(self, key: str, payload: str) -> None:
        self._ensure_open()
        self._values[key] = payload

    async def _remove(self, key: str) -> None:
        self._ensure_open()
        self._values.pop(key, None)

    async def close(self) -> None:
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise StorageError("storage has been closed")


__all__ = ["InMemoryStorage"]
