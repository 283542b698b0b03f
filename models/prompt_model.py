"""Prompt data model definitions.

Updates: v0.3.0 - 2026-10-09 - Add normalised tags to prompt records.
Updates: v0.2.0 - 2026-10-06 - Store edit history as ordered PromptVersion snapshots.
Updates: v0.1.0 - 2026-10-02 - Initial Prompt schema with camelCase record helpers.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .category_model import UNCATEGORIZED
from .identifiers import generate_id, now_ms

MAX_TAG_LENGTH = 30


def normalise_tags(value: str | Iterable[Any] | None) -> list[str]:
    """Return lower-cased, de-duplicated tags from a comma string or iterable."""
    if value is None:
        return []
    if isinstance(value, str):
        raw_items: Iterable[Any] = value.split(",")
    else:
        raw_items = value
    tags: list[str] = []
    for raw in raw_items:
        tag = str(raw).strip().lower()
        if not tag or len(tag) >= MAX_TAG_LENGTH:
            continue
        if tag in tags:
            continue
        tags.append(tag)
    return tags


def _coerce_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(slots=True)
class PromptVersion:
    """Single text snapshot in a prompt's edit history."""

    text: str
    timestamp: int

    def to_record(self) -> dict[str, Any]:
        """Return the wire representation of the snapshot."""
        return {"text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> PromptVersion:
        """Hydrate a version from a mapping."""
        return cls(text=str(data.get("text") or ""), timestamp=_coerce_int(data.get("timestamp")))


@dataclass(slots=True)
class Prompt:
    """Dataclass representation of a prompt entry.

    ``versions`` is chronological; the last entry holds the current text and the
    list is never empty.
    """

    id: str
    title: str
    versions: list[PromptVersion]
    category_id: str = UNCATEGORIZED
    is_favorite: bool = False
    copy_count: int = 0
    tags: list[str] = field(default_factory=list)
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def __post_init__(self) -> None:
        """Enforce the non-empty ledger and normalise counters and tags."""
        if not self.id:
            raise ValueError("prompt id cannot be empty")
        if not self.versions:
            raise ValueError(f"prompt {self.id} must have at least one version")
        self.title = self.title or ""
        self.category_id = self.category_id or UNCATEGORIZED
        self.copy_count = max(0, _coerce_int(self.copy_count))
        self.tags = normalise_tags(self.tags)

    @property
    def text(self) -> str:
        """Return the current (latest) text."""
        return self.versions[-1].text

    @classmethod
    def create(
        cls,
        *,
        title: str,
        text: str,
        tags: Iterable[str] | str | None = None,
        timestamp: int | None = None,
    ) -> Prompt:
        """Return a brand new prompt holding exactly one version."""
        stamp = timestamp if timestamp is not None else now_ms()
        return cls(
            id=generate_id("prompt"),
            title=title.strip(),
            versions=[PromptVersion(text=text, timestamp=stamp)],
            tags=normalise_tags(tags),
            created_at=stamp,
            updated_at=stamp,
        )

    def clone(self) -> Prompt:
        """Return a deep copy that shares no mutable state with this prompt."""
        return Prompt.from_record(self.to_record())

    def to_record(self) -> dict[str, Any]:
        """Return the camelCase record persisted by storage adapters and exports."""
        return {
            "id": self.id,
            "title": self.title,
            "versions": [version.to_record() for version in self.versions],
            "categoryId": self.category_id,
            "isFavorite": self.is_favorite,
            "copyCount": self.copy_count,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> Prompt:
        """Create a Prompt from a current-schema record.

        Legacy records must go through :mod:`core.migrations` first.
        """
        raw_versions = data.get("versions") or []
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            versions=[PromptVersion.from_record(entry) for entry in raw_versions],
            category_id=str(data.get("categoryId") or UNCATEGORIZED),
            is_favorite=bool(data.get("isFavorite", False)),
            copy_count=_coerce_int(data.get("copyCount")),
            tags=normalise_tags(data.get("tags")),
            created_at=_coerce_int(data.get("createdAt")),
            updated_at=_coerce_int(data.get("updatedAt")),
        )


__all__ = ["MAX_TAG_LENGTH", "Prompt", "PromptVersion", "normalise_tags"]
