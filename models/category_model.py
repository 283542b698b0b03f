"""Category records and helpers.

Updates: v0.2.0 - 2026-10-08 - Drop slug taxonomy in favour of opaque ids with display names.
Updates: v0.1.0 - 2026-10-02 - Introduce Category dataclass and helpers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .identifiers import generate_id

UNCATEGORIZED = "all"


def is_valid_category_record(data: Any) -> bool:
    """Return True when *data* is a mapping with non-empty ``id`` and ``name``."""
    if not isinstance(data, Mapping):
        return False
    category_id = data.get("id")
    name = data.get("name")
    if not isinstance(category_id, str) or not category_id.strip():
        return False
    return isinstance(name, str) and bool(name.strip())


def normalise_category_name(value: Any) -> str:
    """Return a trimmed category name (empty string when unusable)."""
    if value is None:
        return ""
    return str(value).strip()


@dataclass(slots=True)
class Category:
    """Mutually exclusive grouping for prompts."""

    id: str
    name: str

    def __post_init__(self) -> None:
        """Normalise the display name and reject empty identifiers."""
        self.id = str(self.id).strip()
        if not self.id:
            raise ValueError("category id cannot be empty")
        if self.id == UNCATEGORIZED:
            raise ValueError(f"'{UNCATEGORIZED}' is reserved for uncategorised prompts")
        self.name = normalise_category_name(self.name)
        if not self.name:
            raise ValueError("category name cannot be empty")

    @classmethod
    def create(cls, name: str) -> Category:
        """Return a new category with a freshly generated id."""
        return cls(id=generate_id("cat"), name=name)

    def to_record(self) -> dict[str, Any]:
        """Serialize the category into a plain dictionary."""
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> Category:
        """Hydrate a Category from a mapping."""
        return cls(id=str(data["id"]), name=str(data["name"]))


__all__ = [
    "Category",
    "UNCATEGORIZED",
    "is_valid_category_record",
    "normalise_category_name",
]
