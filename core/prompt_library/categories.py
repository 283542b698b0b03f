"""Category management helpers for the prompt library.

Updates:
  v0.2.0 - 2026-10-12 - Delete categories and reassign prompts in one two-collection commit.
  v0.1.0 - 2026-10-08 - Extract category APIs into mixin module.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from models.category_model import UNCATEGORIZED, Category, normalise_category_name

from ..exceptions import CategoryNotFoundError, CategoryStorageError, CategoryValidationError
from .state import MutationResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from models.prompt_model import Prompt

logger = logging.getLogger("prompt_library.library")

UNCATEGORIZED_LABEL = "Uncategorized"

__all__ = ["CategorySupport", "UNCATEGORIZED_LABEL"]


class CategorySupport:
    """Mixin exposing category CRUD backed by the library's commit helpers."""

    _prompts: list[Prompt]
    _categories: list[Category]

    def get_categories(self) -> list[Category]:
        """Return copies of all categories in creation order."""
        return [Category(id=category.id, name=category.name) for category in self._categories]

    def get_category(self, category_id: str) -> Category | None:
        """Return a copy of the category with *category_id*, if any."""
        index = self._category_index(category_id)
        if index is None:
            return None
        category = self._categories[index]
        return Category(id=category.id, name=category.name)

    def find_category_by_name(self, name: str) -> Category | None:
        """Return the first category whose name matches *name* case-insensitively."""
        needle = normalise_category_name(name).casefold()
        if not needle:
            return None
        for category in self._categories:
            if category.name.casefold() == needle:
                return Category(id=category.id, name=category.name)
        return None

    def category_label(self, category_id: str) -> str:
        """Return the display name for *category_id*."""
        if category_id != UNCATEGORIZED:
            category = self.get_category(category_id)
            if category is not None:
                return category.name
        return UNCATEGORIZED_LABEL

    def _category_index(self, category_id: str) -> int | None:
        for index, category in enumerate(self._categories):
            if category.id == category_id:
                return index
        return None

    async def add_category(self, name: str) -> MutationResult[Category]:
        """Create a category; duplicate names are allowed."""
        not_ready = self._ensure_loaded("add_category")
        if not_ready is not None:
            return not_ready
        label = normalise_category_name(name)
        if not label:
            return self._reject(
                CategoryValidationError("Category name cannot be empty"), operation="add_category"
            )
        async with self._write_gates(categories=True):
            previous = self._snapshot_categories()
            category = Category.create(label)
            self._categories.append(category)
            if not await self._commit_categories(previous):
                return self._storage_failed(
                    CategoryStorageError(f"Unable to persist category {label!r}"),
                    operation="add_category",
                )
        logger.info("Category added", extra={"category_id": category.id})
        return MutationResult.success(Category(id=category.id, name=category.name))

    async def update_category(self, category_id: str, name: str) -> MutationResult[Category]:
        """Rename a category."""
        not_ready = self._ensure_loaded("update_category")
        if not_ready is not None:
            return not_ready
        label = normalise_category_name(name)
        if not label:
            return self._reject(
                CategoryValidationError("Category name cannot be empty"),
                operation="update_category",
            )
        async with self._write_gates(categories=True):
            index = self._category_index(category_id)
            if index is None:
                return self._reject(
                    CategoryNotFoundError(f"Category {category_id} not found"),
                    operation="update_category",
                )
            category = self._categories[index]
            if category.name == label:
                return MutationResult.success(Category(id=category.id, name=category.name))
            previous = self._snapshot_categories()
            category.name = label
            if not await self._commit_categories(previous):
                return self._storage_failed(
                    CategoryStorageError(f"Unable to persist category {category_id}"),
                    operation="update_category",
                )
        logger.info("Category renamed", extra={"category_id": category_id})
        return MutationResult.success(Category(id=category_id, name=label))

    async def delete_category_and_reassign_prompts(self, category_id: str) -> MutationResult[int]:
        """Remove a category and move its prompts to the uncategorised sentinel.

        The result value is the number of prompts reassigned.
        """
        not_ready = self._ensure_loaded("delete_category_and_reassign_prompts")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True, categories=True):
            index = self._category_index(category_id)
            if index is None:
                return self._reject(
                    CategoryNotFoundError(f"Category {category_id} not found"),
                    operation="delete_category_and_reassign_prompts",
                )
            previous_prompts = self._snapshot_prompts()
            previous_categories = self._snapshot_categories()
            reassigned = 0
            for prompt in self._prompts:
                if prompt.category_id == category_id:
                    prompt.category_id = UNCATEGORIZED
                    reassigned += 1
            del self._categories[index]
            if not await self._commit_both(previous_prompts, previous_categories):
                return self._storage_failed(
                    CategoryStorageError(f"Unable to persist deletion of category {category_id}"),
                    operation="delete_category_and_reassign_prompts",
                )
        logger.info(
            "Category deleted",
            extra={"category_id": category_id, "reassigned_prompts": reassigned},
        )
        return MutationResult.success(reassigned)
