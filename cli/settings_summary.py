"""Printable summaries for prompt library configuration.

Updates:
  v0.1.0 - 2026-10-16 - Extract CLI settings summary rendering.
"""

from __future__ import annotations

from config import PromptLibrarySettings

from .utils import describe_database


def print_settings_summary(settings: PromptLibrarySettings) -> None:
    """Emit a readable summary of the resolved configuration."""
    if settings.storage_backend == "memory":
        storage_desc = "in-memory (not persisted)"
    else:
        storage_desc = "sqlite " + describe_database(settings.db_path)
    timeout = settings.storage_timeout_seconds
    lines = [
        "Prompt library configuration",
        "============================",
        f"Storage:             {storage_desc}",
        f"Max versions:        {settings.max_versions}",
        f"Undo window:         {settings.undo_window_seconds:g}s",
        f"Storage timeout:     {'none' if timeout is None else f'{timeout:g}s'}",
        f"Theme (default):     {settings.theme_mode}",
    ]
    print("\n".join(lines))


__all__ = ["print_settings_summary"]
