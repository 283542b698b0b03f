"""Undo buffer entries and mutation results for the prompt library.

Updates:
  v0.2.0 - 2026-10-10 - Add UndoEntry expiry helper for consuming interfaces.
  v0.1.0 - 2026-10-05 - Introduce MutationResult returned by every mutator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:  # pragma: no cover - typing only
    from models.prompt_model import Prompt

    from ..exceptions import PromptLibraryError

T = TypeVar("T")

UNDO_TIMEOUT_MS = 5000

__all__ = ["MutationResult", "UNDO_TIMEOUT_MS", "UndoEntry"]


@dataclass(slots=True)
class UndoEntry:
    """Snapshot of the most recently deleted prompt and where it lived."""

    prompt: Prompt
    original_index: int
    deleted_at: int

    def is_expired(self, window_ms: int, now_ms: int) -> bool:
        """Return True once *window_ms* milliseconds have passed since deletion."""
        return now_ms - self.deleted_at >= window_ms

    def copy(self) -> UndoEntry:
        """Return an entry whose prompt snapshot is detached from this one."""
        return UndoEntry(
            prompt=self.prompt.clone(),
            original_index=self.original_index,
            deleted_at=self.deleted_at,
        )


@dataclass(slots=True, frozen=True)
class MutationResult(Generic[T]):
    """Outcome of a library mutation; truthy when the change was committed."""

    ok: bool
    value: T | None = None
    error: PromptLibraryError | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: T | None = None) -> MutationResult[T]:
        """Return a committed result carrying *value*."""
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: PromptLibraryError) -> MutationResult[T]:
        """Return a failed result carrying *error*."""
        return cls(ok=False, error=error)
