"""Tests for the storage contract and its in-memory and SQLite backends.

Updates: v0.2.0 - 2026-10-11 - Cover corrupt value clearing and failure reporting.
Updates: v0.1.0 - 2026-10-04 - Cover SQLite persistence across instances.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.storage import (
    CATEGORIES_KEY,
    PROMPTS_KEY,
    THEME_KEY,
    InMemoryStorage,
    LibraryStorage,
    SQLiteStorage,
    StorageError,
)


def _prompt_record(prompt_id: str = "p1") -> dict[str, object]:
    return {
        "id": prompt_id,
        "title": "Title",
        "versions": [{"text": "Body", "timestamp": 1}],
        "categoryId": "all",
        "isFavorite": False,
        "copyCount": 0,
        "tags": [],
        "createdAt": 1,
        "updatedAt": 1,
    }


@pytest.mark.asyncio()
async def test_missing_values_load_as_defaults() -> None:
    """An empty store yields empty collections and the default theme."""
    storage = InMemoryStorage()
    assert await storage.load_prompts() == []
    assert await storage.load_categories() == []
    assert await storage.load_theme_preference() == "light"
    assert await storage.load_theme_preference(default="dark") == "dark"


@pytest.mark.asyncio()
async def test_prompts_round_trip_through_json_text() -> None:
    """Saved records are stored as JSON text and loaded back as fresh dicts."""
    storage = InMemoryStorage()
    record = _prompt_record()
    assert await storage.save_prompts([record]) is True
    assert json.loads(storage.raw_values[PROMPTS_KEY]) == [record]
    loaded = await storage.load_prompts()
    assert loaded == [record]
    assert loaded[0] is not record


@pytest.mark.asyncio()
async def test_invalid_json_is_cleared() -> None:
    """Unparseable payloads load as empty and are removed from the store."""
    storage = InMemoryStorage({PROMPTS_KEY: "{not json", CATEGORIES_KEY: "["})
    assert await storage.load_prompts() == []
    assert await storage.load_categories() == []
    assert PROMPTS_KEY not in storage.raw_values
    assert CATEGORIES_KEY not in storage.raw_values


@pytest.mark.asyncio()
async def test_non_list_prompts_are_cleared_and_bad_entries_skipped() -> None:
    """A non-list prompt value is reset; non-object entries inside a list are skipped."""
    storage = InMemoryStorage({PROMPTS_KEY: json.dumps({"id": "p1"})})
    assert await storage.load_prompts() == []
    assert PROMPTS_KEY not in storage.raw_values

    storage = InMemoryStorage({PROMPTS_KEY: json.dumps([_prompt_record(), "junk", 3])})
    loaded = await storage.load_prompts()
    assert [record["id"] for record in loaded] == ["p1"]


@pytest.mark.asyncio()
async def test_single_invalid_category_clears_collection() -> None:
    """Any invalid category entry resets the whole stored category list."""
    payload = json.dumps([{"id": "c1", "name": "Work"}, {"id": "c2", "name": ""}])
    storage = InMemoryStorage({CATEGORIES_KEY: payload})
    assert await storage.load_categories() == []
    assert CATEGORIES_KEY not in storage.raw_values


@pytest.mark.asyncio()
async def test_theme_preference_validation() -> None:
    """Only known theme values are written; raw legacy strings are still readable."""
    storage = InMemoryStorage({THEME_KEY: "dark"})
    assert await storage.load_theme_preference() == "dark"
    assert await storage.save_theme_preference("neon") is False
    assert storage.raw_values[THEME_KEY] == "dark"
    assert await storage.save_theme_preference("auto") is True
    assert await storage.load_theme_preference() == "auto"

    storage = InMemoryStorage({THEME_KEY: json.dumps("sepia")})
    assert await storage.load_theme_preference() == "light"


@pytest.mark.asyncio()
async def test_closed_storage_reports_failures() -> None:
    """After close, saves return False and loads fall back to defaults."""
    storage = InMemoryStorage()
    await storage.close()
    assert await storage.save_prompts([_prompt_record()]) is False
    assert await storage.load_prompts() == []
    assert await storage.load_theme_preference() == "light"


@pytest.mark.asyncio()
async def test_unserialisable_records_report_failure() -> None:
    """Values that cannot be encoded as JSON are not written."""
    storage = InMemoryStorage()
    assert await storage.save_categories([{"id": "c1", "name": object()}]) is False
    assert CATEGORIES_KEY not in storage.raw_values


class _BrokenStorage(LibraryStorage):
    async def _read_text(self, key: str) -> str | None:
        raise StorageError("unreachable")

    async def _write_text(self, key: str, payload: str) -> None:
        raise StorageError("unreachable")

    async def _remove(self, key: str) -> None:
        raise StorageError("unreachable")


@pytest.mark.asyncio()
async def test_backend_errors_never_escape_contract() -> None:
    """Primitive failures become empty loads and False saves."""
    storage = _BrokenStorage()
    assert await storage.load_prompts() == []
    assert await storage.load_categories() == []
    assert await storage.save_prompts([]) is False
    assert await storage.save_theme_preference("dark") is False


@pytest.mark.asyncio()
async def test_sqlite_persists_across_instances(tmp_path: Path) -> None:
    """Data written by one SQLite store is visible to a new one on the same file."""
    db_path = tmp_path / "nested" / "library.db"
    storage = SQLiteStorage(db_path)
    assert db_path.exists()
    assert await storage.save_prompts([_prompt_record("p1")]) is True
    assert await storage.save_prompts([_prompt_record("p2")]) is True
    assert await storage.save_categories([{"id": "c1", "name": "Work"}]) is True
    assert await storage.save_theme_preference("dark") is True

    reopened = SQLiteStorage(db_path)
    assert [record["id"] for record in await reopened.load_prompts()] == ["p2"]
    assert await reopened.load_categories() == [{"id": "c1", "name": "Work"}]
    assert await reopened.load_theme_preference() == "dark"
    assert reopened.db_path == db_path


@pytest.mark.asyncio()
async def test_sqlite_clears_corrupt_rows(tmp_path: Path) -> None:
    """Corrupt rows are deleted from the SQLite table on load."""
    storage = SQLiteStorage(tmp_path / "library.db")
    await storage._write_text(PROMPTS_KEY, "oops")
    assert await storage.load_prompts() == []
    assert await storage._read_text(PROMPTS_KEY) is None


def test_sqlite_initialisation_failure_raises(tmp_path: Path) -> None:
    """A database path that cannot be created raises StorageError."""
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(StorageError):
        SQLiteStorage(blocker / "library.db")
