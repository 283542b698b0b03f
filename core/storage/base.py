"""Persistent store contract shared by storage backends.

A backend only has to provide three async text primitives (read, write,
remove). :class:`LibraryStorage` layers the load/save contract on top of
them: JSON decoding, shape checks that clear corrupt values, theme
validation, and failure reporting through booleans and defaults.

Updates:
  v0.3.0 - 2026-10-19 - Let strict loads report unreadable stores instead of yielding [].
  v0.2.0 - 2026-10-11 - Clear corrupt collections on load and report save failures as booleans.
  v0.1.0 - 2026-10-04 - Extract logger, key names, and error type for storage backends.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, cast

from models.category_model import is_valid_category_record

logger = logging.getLogger("prompt_library.storage")

PROMPTS_KEY = "promptLibraryPrompts"
CATEGORIES_KEY = "promptLibraryCategories"
THEME_KEY = "promptLibraryTheme"

THEME_CHOICES: tuple[str, ...] = ("light", "dark", "auto")
DEFAULT_THEME = "light"


class StorageError(Exception):
    """Raised by backend primitives when the durable store cannot be reached."""


def _is_record_list(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


class LibraryStorage(ABC):
    """Async key-value store holding the prompt and category collections."""

    # Backend primitives ------------------------------------------------ #

    @abstractmethod
    async def _read_text(self, key: str) -> str | None:
        """Return the raw payload stored under *key*, or ``None``."""

    @abstractmethod
    async def _write_text(self, key: str, payload: str) -> None:
        """Durably store *payload* under *key*."""

    @abstractmethod
    async def _remove(self, key: str) -> None:
        """Delete *key* if present."""

    async def close(self) -> None:
        """Release backend resources."""
        return None

    # Collection contract ------------------------------------------------ #

    async def load_prompts(self, *, strict: bool = False) -> list[dict[str, Any]]:
        """Return stored prompt records; corrupt payloads are cleared and yield ``[]``.

        With *strict*, an unreadable store raises :class:`StorageError` instead of
        looking empty.
        """
        value = await self._load_json(PROMPTS_KEY, label="prompts", strict=strict)
        if value is None:
            return []
        if not _is_record_list(value):
            logger.warning("Stored prompt data is not a list; resetting")
            await self._clear(PROMPTS_KEY)
            return []
        records: list[dict[str, Any]] = []
        for entry in cast("Sequence[object]", value):
            if isinstance(entry, Mapping):
                entry_map = cast("Mapping[object, Any]", entry)
                records.append({str(key): item for key, item in entry_map.items()})
            else:
                logger.warning("Skipping stored prompt entry that is not an object")
        logger.debug("Loaded stored prompts", extra={"count": len(records)})
        return records

    async def save_prompts(self, records: Sequence[Mapping[str, Any]]) -> bool:
        """Persist *records* as the prompt collection; return False on failure."""
        return await self._save_json(PROMPTS_KEY, [dict(record) for record in records], "prompts")

    async def load_categories(self, *, strict: bool = False) -> list[dict[str, Any]]:
        """Return stored category records; any invalid entry clears the whole value."""
        value = await self._load_json(CATEGORIES_KEY, label="categories", strict=strict)
        if value is None:
            return []
        if not _is_record_list(value) or not all(
            is_valid_category_record(entry) for entry in cast("Sequence[object]", value)
        ):
            logger.warning("Stored category data is invalid; resetting")
            await self._clear(CATEGORIES_KEY)
            return []
        entries = cast("Sequence[Mapping[str, Any]]", value)
        logger.debug("Loaded stored categories", extra={"count": len(entries)})
        return [dict(entry) for entry in entries]

    async def save_categories(self, records: Sequence[Mapping[str, Any]]) -> bool:
        """Persist *records* as the category collection; return False on failure."""
        return await self._save_json(
            CATEGORIES_KEY, [dict(record) for record in records], "categories"
        )

    async def load_theme_preference(self, default: str = DEFAULT_THEME) -> str:
        """Return the stored theme, or *default* when missing or invalid."""
        try:
            payload = await self._read_text(THEME_KEY)
        except StorageError as exc:
            logger.error("Unable to load theme preference: %s", exc)
            return default
        if payload is None:
            return default
        try:
            value = json.loads(payload)
        except json.JSONDecodeError:
            value = payload
        if isinstance(value, str) and value in THEME_CHOICES:
            return value
        logger.warning("Ignoring invalid stored theme preference %r", value)
        return default

    async def save_theme_preference(self, value: str) -> bool:
        """Persist the theme preference; invalid values are rejected without writing."""
        if value not in THEME_CHOICES:
            logger.warning("Refusing to save invalid theme preference %r", value)
            return False
        return await self._save_json(THEME_KEY, value, "theme preference")

    # Internal helpers -------------------------------------------------- #

    async def _load_json(self, key: str, *, label: str, strict: bool = False) -> Any | None:
        try:
            payload = await self._read_text(key)
        except StorageError as exc:
            logger.error("Unable to load %s: %s", label, exc)
            if strict:
                raise
            return None
        if payload is None:
            logger.debug("No stored %s found", label)
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Stored %s payload is not valid JSON; resetting", label)
            await self._clear(key)
            return None

    async def _save_json(self, key: str, value: Any, label: str) -> bool:
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            logger.error("Unable to serialise %s: %s", label, exc)
            return False
        try:
            await self._write_text(key, payload)
        except StorageError as exc:
            logger.error("Unable to save %s: %s", label, exc)
            return False
        logger.debug("Saved %s", label)
        return True

    async def _clear(self, key: str) -> None:
        try:
            await self._remove(key)
        except StorageError as exc:
            logger.error("Unable to clear corrupt value %s: %s", key, exc)


__all__ = [
    "CATEGORIES_KEY",
    "DEFAULT_THEME",
    "LibraryStorage",
    "PROMPTS_KEY",
    "StorageError",
    "THEME_CHOICES",
    "THEME_KEY",
    "logger",
]
