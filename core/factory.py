"""Factories for constructing PromptLibrary instances from validated settings.

Updates:
  v0.2.0 - 2026-10-16 - Select the storage backend from settings.
  v0.1.0 - 2026-10-05 - Introduce build_prompt_library for shared bootstrap.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .prompt_library import PromptLibrary
from .storage import InMemoryStorage, LibraryStorage, SQLiteStorage

if TYPE_CHECKING:  # pragma: no cover - typing only
    from config import PromptLibrarySettings

factory_logger = logging.getLogger("prompt_library.factory")


def build_storage(settings: PromptLibrarySettings) -> LibraryStorage:
    """Return the storage adapter selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        factory_logger.info("Using in-memory storage; changes are not kept after exit")
        return InMemoryStorage()
    return SQLiteStorage(settings.db_path)


def build_prompt_library(
    settings: PromptLibrarySettings,
    *,
    storage: LibraryStorage | None = None,
) -> PromptLibrary:
    """Return an unloaded PromptLibrary configured from validated settings.

    Callers must ``await library.load()`` before mutating it.
    """
    resolved_storage = storage if storage is not None else build_storage(settings)
    factory_logger.debug(
        "Building prompt library",
        extra={
            "storage": type(resolved_storage).__name__,
            "max_versions": settings.max_versions,
            "storage_timeout_seconds": settings.storage_timeout_seconds,
        },
    )
    return PromptLibrary(
        resolved_storage,
        max_versions=settings.max_versions,
        storage_timeout=settings.storage_timeout_seconds,
        default_theme=settings.theme_mode,
    )


__all__ = ["build_prompt_library", "build_storage"]
