"""Configuration helpers for the prompt library.

Updates: v0.2.0 - 2026-10-16 - Expose storage backend and theme types.
Updates: v0.1.0 - 2026-10-03 - Expose settings loader and configuration error types.
"""

from .settings import (
    DEFAULT_THEME_MODE,
    PromptLibrarySettings,
    SettingsError,
    StorageBackend,
    ThemeMode,
    load_settings,
)

__all__ = [
    "DEFAULT_THEME_MODE",
    "PromptLibrarySettings",
    "SettingsError",
    "StorageBackend",
    "ThemeMode",
    "load_settings",
]
