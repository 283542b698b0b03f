"""Shared CLI utility functions for prompt library commands.

Updates:
  v0.1.0 - 2026-10-16 - Extract stdout logging, database description, and export format helpers.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from logging import Logger

_YAML_SUFFIXES = {".yaml", ".yml"}


def print_and_log(logger: Logger, level: int, message: str) -> None:
    """Log *message* at *level* and mirror it to stdout."""
    logger.log(level, message)
    print(message)


def describe_database(db_path: Path) -> str:
    """Return where the SQLite store lives and whether it can be created there."""
    location = db_path.expanduser()
    if location.is_dir():
        return f"{location} (unusable: is a directory)"
    if location.exists():
        return f"{location} ({location.stat().st_size / 1024:.1f} KiB)"
    ancestor = location.parent
    while not ancestor.exists() and ancestor != ancestor.parent:
        ancestor = ancestor.parent
    if not ancestor.is_dir():
        return f"{location} (unusable: {ancestor} is not a directory)"
    if not os.access(ancestor, os.W_OK):
        return f"{location} (unusable: {ancestor} is read-only)"
    return f"{location} (missing - created on demand)"


def resolve_export_format(path: Path, explicit_format: str | None) -> str:
    """Return an export format slug based on *path* or *explicit_format*."""
    if explicit_format:
        return explicit_format.lower()
    return "yaml" if path.suffix.lower() in _YAML_SUFFIXES else "json"


def shorten(text: str, width: int = 60) -> str:
    """Return *text* on one line, truncated to *width* characters."""
    single_line = " ".join(text.split())
    if len(single_line) <= width:
        return single_line
    return single_line[: max(0, width - 3)] + "..."


__all__ = ["describe_database", "print_and_log", "resolve_export_format", "shorten"]
