"""Prompt lifecycle operations: create, edit, delete, undo, reorder, copy.

Updates:
  v0.4.0 - 2026-10-19 - Move restored prompts whose category was deleted meanwhile to uncategorised.
  v0.3.0 - 2026-10-13 - Re-identify restored prompts whose id became live again.
  v0.2.0 - 2026-10-10 - Keep the previous undo entry when a delete fails to persist.
  v0.1.0 - 2026-10-05 - Extract prompt CRUD into mixin module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from models.category_model import UNCATEGORIZED
from models.identifiers import generate_id
from models.prompt_model import Prompt, normalise_tags

from ..exceptions import (
    CategoryNotFoundError,
    PromptNotFoundError,
    PromptStorageError,
    PromptValidationError,
    UndoBufferEmptyError,
)
from ..versioning import append_version
from .state import MutationResult, UndoEntry

if TYPE_CHECKING:  # pragma: no cover - typing only
    from models.category_model import Category

logger = logging.getLogger("prompt_library.library")

__all__ = ["PromptLifecycleMixin"]


class PromptLifecycleMixin:
    """Mixin implementing prompt mutations and prompt read accessors."""

    _prompts: list[Prompt]
    _categories: list[Category]
    _undo: UndoEntry | None
    _max_versions: int
    _clock: Callable[[], int]

    # Read accessors ----------------------------------------------------- #

    def get_prompts(self) -> list[Prompt]:
        """Return copies of all live prompts in manual order."""
        return [prompt.clone() for prompt in self._prompts]

    def get_prompt(self, prompt_id: str) -> Prompt | None:
        """Return a copy of the prompt with *prompt_id*, if live."""
        index = self._prompt_index(prompt_id)
        return None if index is None else self._prompts[index].clone()

    def get_recently_deleted(self) -> UndoEntry | None:
        """Return a copy of the pending undo entry."""
        return None if self._undo is None else self._undo.copy()

    def get_all_unique_tags(self) -> list[str]:
        """Return every tag used by a live prompt, sorted alphabetically."""
        return sorted({tag for prompt in self._prompts for tag in prompt.tags})

    def _prompt_index(self, prompt_id: str) -> int | None:
        for index, prompt in enumerate(self._prompts):
            if prompt.id == prompt_id:
                return index
        return None

    # Mutators ----------------------------------------------------------- #

    async def add_prompt(
        self,
        title: str,
        text: str,
        *,
        tags: Iterable[str] | str | None = None,
    ) -> MutationResult[Prompt]:
        """Create a prompt at the top of the library."""
        not_ready = self._ensure_loaded("add_prompt")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True):
            previous = self._snapshot_prompts()
            prompt = Prompt.create(title=title, text=text, tags=tags, timestamp=self._clock())
            self._prompts.insert(0, prompt)
            if not await self._commit_prompts(previous):
                return self._storage_failed(
                    PromptStorageError("Unable to persist new prompt"), operation="add_prompt"
                )
        logger.info("Prompt added", extra={"prompt_id": prompt.id})
        return MutationResult.success(prompt.clone())

    async def update_prompt(
        self,
        prompt_id: str,
        *,
        title: str | None = None,
        text: str | None = None,
        category_id: str | None = None,
        is_favorite: bool | None = None,
        tags: Iterable[str] | str | None = None,
    ) -> MutationResult[Prompt]:
        """Apply any subset of field changes to a prompt.

        A changed text becomes a new version. Updates that change nothing
        succeed without touching storage.
        """
        not_ready = self._ensure_loaded("update_prompt")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True, categories=category_id is not None):
            index = self._prompt_index(prompt_id)
            if index is None:
                return self._reject(
                    PromptNotFoundError(f"Prompt {prompt_id} not found"), operation="update_prompt"
                )
            if (
                category_id is not None
                and category_id != UNCATEGORIZED
                and all(category.id != category_id for category in self._categories)
            ):
                return self._reject(
                    CategoryNotFoundError(f"Category {category_id} not found"),
                    operation="update_prompt",
                )
            previous = self._snapshot_prompts()
            prompt = self._prompts[index]
            now = self._clock()
            changed = False
            if title is not None and title.strip() != prompt.title:
                prompt.title = title.strip()
                changed = True
            if text is not None and text != prompt.text:
                append_version(prompt, text, max_versions=self._max_versions, timestamp=now)
                changed = True
            if category_id is not None and category_id != prompt.category_id:
                prompt.category_id = category_id
                changed = True
            if is_favorite is not None and bool(is_favorite) != prompt.is_favorite:
                prompt.is_favorite = bool(is_favorite)
                changed = True
            if tags is not None:
                new_tags = normalise_tags(tags)
                if new_tags != prompt.tags:
                    prompt.tags = new_tags
                    changed = True
            if not changed:
                return MutationResult.success(prompt.clone())
            prompt.updated_at = now
            if not await self._commit_prompts(previous):
                return self._storage_failed(
                    PromptStorageError(f"Unable to persist prompt {prompt_id}"),
                    operation="update_prompt",
                )
            result = prompt.clone()
        logger.debug("Prompt updated", extra={"prompt_id": prompt_id})
        return MutationResult.success(result)

    async def delete_prompt(self, prompt_id: str) -> MutationResult[Prompt]:
        """Remove a prompt and keep it in the undo buffer."""
        not_ready = self._ensure_loaded("delete_prompt")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True):
            index = self._prompt_index(prompt_id)
            if index is None:
                return self._reject(
                    PromptNotFoundError(f"Prompt {prompt_id} not found"), operation="delete_prompt"
                )
            previous = self._snapshot_prompts()
            previous_undo = self._undo
            removed = self._prompts.pop(index)
            self._undo = UndoEntry(prompt=removed, original_index=index, deleted_at=self._clock())
            if not await self._commit_prompts(previous):
                self._undo = previous_undo
                return self._storage_failed(
                    PromptStorageError(f"Unable to persist deletion of {prompt_id}"),
                    operation="delete_prompt",
                )
        logger.info("Prompt deleted", extra={"prompt_id": prompt_id, "index": index})
        return MutationResult.success(removed.clone())

    async def revert_deleted_prompt(self) -> MutationResult[Prompt]:
        """Reinsert the most recently deleted prompt near its original position."""
        not_ready = self._ensure_loaded("revert_deleted_prompt")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True, categories=True):
            entry = self._undo
            if entry is None:
                return self._reject(
                    UndoBufferEmptyError("No recently deleted prompt to restore"),
                    operation="revert_deleted_prompt",
                )
            previous = self._snapshot_prompts()
            prompt = entry.prompt.clone()
            if self._prompt_index(prompt.id) is not None:
                original_id = prompt.id
                prompt.id = generate_id("prompt")
                logger.info(
                    "Restored prompt id is live again; assigning a new id",
                    extra={"prompt_id": original_id, "new_prompt_id": prompt.id},
                )
            if prompt.category_id != UNCATEGORIZED and not any(
                category.id == prompt.category_id for category in self._categories
            ):
                logger.info(
                    "Restored prompt's category no longer exists; moving it to uncategorised",
                    extra={"prompt_id": prompt.id, "category_id": prompt.category_id},
                )
                prompt.category_id = UNCATEGORIZED
            index = min(entry.original_index, len(self._prompts))
            self._prompts.insert(index, prompt)
            self._undo = None
            if not await self._commit_prompts(previous):
                self._undo = entry
                return self._storage_failed(
                    PromptStorageError("Unable to persist restored prompt"),
                    operation="revert_deleted_prompt",
                )
        logger.info("Prompt restored", extra={"prompt_id": prompt.id, "index": index})
        return MutationResult.success(prompt.clone())

    async def reorder_prompts(self, old_index: int, new_index: int) -> MutationResult[None]:
        """Move the prompt at *old_index* so it ends up at *new_index*."""
        not_ready = self._ensure_loaded("reorder_prompts")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True):
            size = len(self._prompts)
            if not (0 <= old_index < size and 0 <= new_index < size):
                return self._reject(
                    PromptValidationError(
                        f"Cannot move prompt from {old_index} to {new_index} in a list of {size}"
                    ),
                    operation="reorder_prompts",
                )
            if old_index == new_index:
                return MutationResult.success()
            previous = self._snapshot_prompts()
            moved = self._prompts.pop(old_index)
            self._prompts.insert(new_index, moved)
            if not await self._commit_prompts(previous):
                return self._storage_failed(
                    PromptStorageError("Unable to persist prompt order"),
                    operation="reorder_prompts",
                )
        logger.debug("Prompt reordered", extra={"from": old_index, "to": new_index})
        return MutationResult.success()

    async def increment_copy_count(self, prompt_id: str) -> MutationResult[int]:
        """Record that a prompt was copied; ``updated_at`` is left unchanged."""
        not_ready = self._ensure_loaded("increment_copy_count")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True):
            index = self._prompt_index(prompt_id)
            if index is None:
                return self._reject(
                    PromptNotFoundError(f"Prompt {prompt_id} not found"),
                    operation="increment_copy_count",
                )
            previous = self._snapshot_prompts()
            prompt = self._prompts[index]
            prompt.copy_count += 1
            count = prompt.copy_count
            if not await self._commit_prompts(previous):
                return self._storage_failed(
                    PromptStorageError(f"Unable to persist copy count for {prompt_id}"),
                    operation="increment_copy_count",
                )
        return MutationResult.success(count)
