"""Tests for core.factory helpers.

Updates: v0.1.0 - 2026-10-16 - Cover backend selection and settings forwarding.
"""

from __future__ import annotations

from pathlib import Path

from config import PromptLibrarySettings
from core.factory import build_prompt_library, build_storage
from core.storage import InMemoryStorage, SQLiteStorage


def _make_settings(tmp_path: Path, **overrides: object) -> PromptLibrarySettings:
    defaults: dict[str, object] = {"db_path": str(tmp_path / "library.db")}
    defaults.update(overrides)
    return PromptLibrarySettings(**defaults)  # type: ignore[arg-type]


def test_build_storage_selects_backend(tmp_path: Path) -> None:
    """The configured backend decides which adapter is created."""
    sqlite_storage = build_storage(_make_settings(tmp_path))
    assert isinstance(sqlite_storage, SQLiteStorage)
    assert sqlite_storage.db_path == (tmp_path / "library.db").resolve()

    memory_storage = build_storage(_make_settings(tmp_path, storage_backend="memory"))
    assert isinstance(memory_storage, InMemoryStorage)


def test_build_prompt_library_forwards_settings(tmp_path: Path) -> None:
    """Version cap and injected storage are passed through unchanged."""
    storage = InMemoryStorage()
    settings = _make_settings(tmp_path, max_versions=4, storage_timeout_seconds=1.5)
    library = build_prompt_library(settings, storage=storage)
    assert library.storage is storage
    assert library.max_versions == 4
    assert not library.is_loaded
    assert not (tmp_path / "library.db").exists()
