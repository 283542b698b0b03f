"""Storage backends for the prompt library.

Updates:
  v0.1.0 - 2026-10-04 - Expose the storage contract plus SQLite and in-memory backends.
"""

from __future__ import annotations

from .base import (
    CATEGORIES_KEY,
    DEFAULT_THEME,
    PROMPTS_KEY,
    THEME_CHOICES,
    THEME_KEY,
    LibraryStorage,
    StorageError,
)
from .memory import InMemoryStorage
from .sqlite import SQLiteStorage

__all__ = [
    "CATEGORIES_KEY",
    "DEFAULT_THEME",
    "InMemoryStorage",
    "LibraryStorage",
    "PROMPTS_KEY",
    "SQLiteStorage",
    "StorageError",
    "THEME_CHOICES",
    "THEME_KEY",
]
