"""Tests for category management and two-collection commits.

Updates: v0.3.0 - 2026-10-19 - Cover a resync that cannot read storage.
Updates: v0.2.0 - 2026-10-12 - Cover compensation and resync when category writes fail.
Updates: v0.1.0 - 2026-10-08 - Cover category CRUD and label lookups.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from core.exceptions import (
    CategoryNotFoundError,
    CategoryStorageError,
    CategoryValidationError,
    PromptLibraryError,
)
from core.prompt_library import UNCATEGORIZED_LABEL, PromptLibrary
from core.storage import CATEGORIES_KEY, PROMPTS_KEY
from models.category_model import UNCATEGORIZED

if TYPE_CHECKING:
    from conftest import FakeClock, ScriptedStorage


async def _library_with_category(
    storage: ScriptedStorage, clock: FakeClock
) -> tuple[PromptLibrary, str, list[str]]:
    """Return a loaded library with one category holding two of three prompts."""
    library = PromptLibrary(storage, clock=clock)
    await library.load()
    category = await library.add_category("Work")
    assert category.value is not None
    ids: list[str] = []
    for title in ("A", "B", "C"):
        added = await library.add_prompt(title, "x")
        assert added.value is not None
        ids.append(added.value.id)
    await library.update_prompt(ids[0], category_id=category.value.id)
    await library.update_prompt(ids[2], category_id=category.value.id)
    return library, category.value.id, ids


@pytest.mark.asyncio()
async def test_add_and_rename_category(scripted_storage: ScriptedStorage, clock: FakeClock) -> None:
    """Names are trimmed, duplicates allowed, and renames persist."""
    library = PromptLibrary(scripted_storage, clock=clock)
    await library.load()
    first = await library.add_category("  Work ")
    second = await library.add_category("work")
    assert first.value is not None and second.value is not None
    assert first.value.name == "Work"
    assert first.value.id != second.value.id
    assert [category.name for category in library.get_categories()] == ["Work", "work"]

    renamed = await library.update_category(first.value.id, "Office")
    assert renamed and renamed.value is not None
    stored = json.loads(scripted_storage.raw_values[CATEGORIES_KEY])
    assert stored[0] == {"id": first.value.id, "name": "Office"}


@pytest.mark.asyncio()
async def test_category_validation_errors(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """Blank names and unknown ids are rejected."""
    library = PromptLibrary(scripted_storage, clock=clock)
    await library.load()
    blank = await library.add_category("   ")
    assert isinstance(blank.error, CategoryValidationError)
    missing = await library.update_category("cat_missing", "Name")
    assert isinstance(missing.error, CategoryNotFoundError)
    delete_missing = await library.delete_category_and_reassign_prompts("cat_missing")
    assert isinstance(delete_missing.error, CategoryNotFoundError)


@pytest.mark.asyncio()
async def test_add_category_failure_rolls_back(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """A failed category write leaves the category list unchanged."""
    library = PromptLibrary(scripted_storage, clock=clock)
    await library.load()
    scripted_storage.script(CATEGORIES_KEY, False)
    result = await library.add_category("Work")
    assert isinstance(result.error, CategoryStorageError)
    assert library.get_categories() == []


@pytest.mark.asyncio()
async def test_lookup_helpers(scripted_storage: ScriptedStorage, clock: FakeClock) -> None:
    """Name lookup is case-insensitive and labels fall back for the sentinel."""
    library, category_id, _ = await _library_with_category(scripted_storage, clock)
    found = library.find_category_by_name("  WORK")
    assert found is not None and found.id == category_id
    assert library.find_category_by_name("Other") is None
    assert library.category_label(category_id) == "Work"
    assert library.category_label(UNCATEGORIZED) == UNCATEGORIZED_LABEL
    assert library.category_label("cat_gone") == UNCATEGORIZED_LABEL


@pytest.mark.asyncio()
async def test_delete_category_reassigns_prompts(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """Deleting a category moves its prompts to the sentinel in both collections."""
    library, category_id, ids = await _library_with_category(scripted_storage, clock)
    result = await library.delete_category_and_reassign_prompts(category_id)
    assert result.value == 2
    assert library.get_categories() == []
    assert all(prompt.category_id == UNCATEGORIZED for prompt in library.get_prompts())
    stored_prompts = json.loads(scripted_storage.raw_values[PROMPTS_KEY])
    assert {record["categoryId"] for record in stored_prompts} == {UNCATEGORIZED}
    assert json.loads(scripted_storage.raw_values[CATEGORIES_KEY]) == []
    assert [prompt.id for prompt in library.get_prompts()] == ids[::-1]


@pytest.mark.asyncio()
async def test_delete_category_compensates_prompt_write(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """When the category write fails, the already written prompts are restored."""
    library, category_id, _ = await _library_with_category(scripted_storage, clock)
    scripted_storage.script(CATEGORIES_KEY, False)
    result = await library.delete_category_and_reassign_prompts(category_id)
    assert isinstance(result.error, CategoryStorageError)
    assert [category.id for category in library.get_categories()] == [category_id]
    assigned = [prompt for prompt in library.get_prompts() if prompt.category_id == category_id]
    assert len(assigned) == 2
    stored_prompts = json.loads(scripted_storage.raw_values[PROMPTS_KEY])
    assert sum(record["categoryId"] == category_id for record in stored_prompts) == 2
    assert scripted_storage.writes[-3:] == [PROMPTS_KEY, CATEGORIES_KEY, PROMPTS_KEY]


@pytest.mark.asyncio()
async def test_delete_category_resyncs_after_double_failure(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """If compensation fails too, memory is reloaded to match what storage holds."""
    library, category_id, _ = await _library_with_category(scripted_storage, clock)
    scripted_storage.script(PROMPTS_KEY, True, False)
    scripted_storage.fail_always(CATEGORIES_KEY)
    result = await library.delete_category_and_reassign_prompts(category_id)
    assert not result
    # Storage holds reassigned prompts but the old category list.
    assert [category.id for category in library.get_categories()] == [category_id]
    assert all(prompt.category_id == UNCATEGORIZED for prompt in library.get_prompts())
    stored_prompts = json.loads(scripted_storage.raw_values[PROMPTS_KEY])
    assert [record["id"] for record in stored_prompts] == [
        prompt.id for prompt in library.get_prompts()
    ]


@pytest.mark.asyncio()
async def test_failed_resync_unloads_library(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """When storage cannot be re-read, mutators refuse instead of overwriting it."""
    library, category_id, ids = await _library_with_category(scripted_storage, clock)
    scripted_storage.script(PROMPTS_KEY, True, False)
    scripted_storage.fail_always(CATEGORIES_KEY)
    scripted_storage.fail_reads = True
    result = await library.delete_category_and_reassign_prompts(category_id)
    assert not result
    assert not library.is_loaded

    blocked = await library.add_prompt("Late", "x")
    assert isinstance(blocked.error, PromptLibraryError)
    stored_prompts = json.loads(scripted_storage.raw_values[PROMPTS_KEY])
    assert len(stored_prompts) == len(ids)

    scripted_storage.fail_reads = False
    await library.load()
    assert sorted(prompt.id for prompt in library.get_prompts()) == sorted(ids)


@pytest.mark.asyncio()
async def test_delete_category_first_write_failure(
    scripted_storage: ScriptedStorage, clock: FakeClock
) -> None:
    """A failed prompt write aborts before categories are touched."""
    library, category_id, _ = await _library_with_category(scripted_storage, clock)
    scripted_storage.script(PROMPTS_KEY, False)
    writes = len(scripted_storage.writes)
    result = await library.delete_category_and_reassign_prompts(category_id)
    assert not result
    assert scripted_storage.writes[writes:] == [PROMPTS_KEY]
    assert library.get_category(category_id) is not None
