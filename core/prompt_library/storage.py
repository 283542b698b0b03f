"""Persistence, write gates, and rollback helpers for the prompt library.

Every mutator applies its change to the in-memory collections first, then asks
this mixin to commit. A failed commit restores the snapshot taken before the
change. Writes touching both collections compensate the first write when the
second fails, and fall back to re-reading the adapter when compensation fails
as well. A write that outlives the storage timeout is still awaited while the
gates are held; if it lands anyway, the rolled-back collection is written back
over it.

Updates:
  v0.4.0 - 2026-10-19 - Settle timed-out writes and unload the library when resync fails.
  v0.3.0 - 2026-10-14 - Bound adapter calls with an optional timeout.
  v0.2.0 - 2026-10-12 - Compensate two-collection writes and resync on double failure.
  v0.1.0 - 2026-10-05 - Extract load/commit helpers from the library façade.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from models.category_model import UNCATEGORIZED, Category

from ..exceptions import (
    PromptLibraryError,
    PromptStorageError,
    PromptValidationError,
    RecordSchemaError,
)
from ..migrations import prompt_from_raw, prompt_to_stored_record
from ..storage import DEFAULT_THEME, THEME_CHOICES, StorageError
from ..versioning import trim_versions
from .state import MutationResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from models.prompt_model import Prompt

    from ..storage import LibraryStorage
    from .state import UndoEntry

logger = logging.getLogger("prompt_library.library")

R = TypeVar("R")

CollectionBuilder = Callable[
    [list["Prompt"], list[Category]],
    tuple[Sequence["Prompt"], Sequence[Category]],
]

__all__ = ["CollectionBuilder", "LibraryPersistenceMixin", "WriteOutcome"]


class WriteOutcome(Enum):
    """How an adapter write ended."""

    SAVED = "saved"
    FAILED = "failed"
    # Timed out, but the adapter finished the write afterwards.
    LATE = "late"


class LibraryPersistenceMixin:
    """Mixin owning the adapter, the live collections, and commit semantics."""

    _storage: LibraryStorage
    _prompts: list[Prompt]
    _categories: list[Category]
    _undo: UndoEntry | None
    _loaded: bool
    _max_versions: int
    _storage_timeout: float | None
    _clock: Callable[[], int]
    _default_theme: str
    _prompts_gate: asyncio.Lock
    _categories_gate: asyncio.Lock

    def _initialise_persistence(
        self,
        storage: LibraryStorage,
        *,
        max_versions: int,
        storage_timeout: float | None,
        clock: Callable[[], int],
        default_theme: str = DEFAULT_THEME,
    ) -> None:
        self._storage = storage
        self._prompts = []
        self._categories = []
        self._undo = None
        self._loaded = False
        self._max_versions = max(1, max_versions)
        self._storage_timeout = storage_timeout
        self._clock = clock
        self._default_theme = default_theme if default_theme in THEME_CHOICES else DEFAULT_THEME
        self._prompts_gate = asyncio.Lock()
        self._categories_gate = asyncio.Lock()

    # Lifecycle ---------------------------------------------------------- #

    @property
    def is_loaded(self) -> bool:
        """Return True once :meth:`load` has populated the collections."""
        return self._loaded

    @property
    def max_versions(self) -> int:
        """Return the per-prompt version cap."""
        return self._max_versions

    @property
    def storage(self) -> LibraryStorage:
        """Return the persistence adapter backing this library."""
        return self._storage

    async def load(self) -> None:
        """Populate the live collections from the adapter.

        Raises:
            PromptStorageError: when the adapter cannot be read; the library
                stays unloaded.
        """
        async with self._write_gates(prompts=True, categories=True):
            await self._hydrate()
            self._loaded = True

    async def close(self) -> None:
        """Release the adapter; mutators fail until the library is loaded again."""
        async with self._write_gates(prompts=True, categories=True):
            self._loaded = False
            await self._storage.close()
        logger.debug("Prompt library closed")

    async def _hydrate(self) -> None:
        raw_categories = await self._read_storage(
            self._storage.load_categories(strict=True), operation="load_categories"
        )
        categories: list[Category] = []
        category_ids: set[str] = set()
        for raw in raw_categories:
            try:
                category = Category.from_record(raw)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unusable stored category: %s", exc)
                continue
            if category.id in category_ids:
                logger.warning("Skipping duplicate stored category %s", category.id)
                continue
            category_ids.add(category.id)
            categories.append(category)

        raw_prompts = await self._read_storage(
            self._storage.load_prompts(strict=True), operation="load_prompts"
        )
        prompts: list[Prompt] = []
        prompt_ids: set[str] = set()
        reassigned = 0
        for raw in raw_prompts:
            try:
                prompt = prompt_from_raw(raw, now=self._clock())
            except RecordSchemaError as exc:
                logger.warning("Skipping unusable stored prompt: %s", exc)
                continue
            if prompt.id in prompt_ids:
                logger.warning("Skipping duplicate stored prompt %s", prompt.id)
                continue
            trim_versions(prompt.versions, self._max_versions)
            if prompt.category_id != UNCATEGORIZED and prompt.category_id not in category_ids:
                prompt.category_id = UNCATEGORIZED
                reassigned += 1
            prompt_ids.add(prompt.id)
            prompts.append(prompt)

        self._prompts = prompts
        self._categories = categories
        logger.info(
            "Prompt library loaded",
            extra={
                "prompts": len(prompts),
                "categories": len(categories),
                "reassigned": reassigned,
            },
        )

    # Theme -------------------------------------------------------------- #

    async def load_theme(self) -> str:
        """Return the stored theme preference, or the configured default when unset."""
        try:
            return await self._read_storage(
                self._storage.load_theme_preference(self._default_theme),
                operation="load_theme_preference",
            )
        except PromptStorageError:
            return self._default_theme

    async def save_theme(self, value: str) -> MutationResult[str]:
        """Persist *value* as the theme preference."""
        if value not in THEME_CHOICES:
            return self._reject(
                PromptValidationError(
                    f"Unsupported theme {value!r}; expected one of {', '.join(THEME_CHOICES)}"
                ),
                operation="save_theme",
            )
        outcome = await self._write_storage(
            self._storage.save_theme_preference(value), operation="save_theme_preference"
        )
        # The adapter holds the only copy of the theme, so a late write still counts.
        if outcome is WriteOutcome.FAILED:
            return self._storage_failed(
                PromptLibraryError("Unable to persist theme preference"), operation="save_theme"
            )
        return MutationResult.success(value)

    # Bulk replacement --------------------------------------------------- #

    async def replace_collections(
        self,
        prompts: Sequence[Prompt],
        categories: Sequence[Category],
    ) -> MutationResult[None]:
        """Atomically swap both collections and persist them.

        Callers are responsible for referential integrity of ``category_id``.
        """
        return await self.rebuild_collections(lambda _prompts, _categories: (prompts, categories))

    async def rebuild_collections(self, build: CollectionBuilder) -> MutationResult[None]:
        """Replace both collections with ``build(current_prompts, current_categories)``.

        *build* runs while both write gates are held and receives copies of the
        live collections, so no concurrent mutation can slip in between reading
        and replacing. Exceptions raised by *build* propagate unchanged.
        """
        not_ready = self._ensure_loaded("replace_collections")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True, categories=True):
            previous_prompts = self._snapshot_prompts()
            previous_categories = self._snapshot_categories()
            prompts, categories = build(self._snapshot_prompts(), self._snapshot_categories())
            self._prompts = [prompt.clone() for prompt in prompts]
            for prompt in self._prompts:
                trim_versions(prompt.versions, self._max_versions)
            self._categories = [replace(category) for category in categories]
            if not await self._commit_both(previous_prompts, previous_categories):
                return self._storage_failed(
                    PromptLibraryError("Unable to persist replaced collections"),
                    operation="replace_collections",
                )
            counts = {"prompts": len(self._prompts), "categories": len(self._categories)}
        logger.info("Collections replaced", extra=counts)
        return MutationResult.success()

    # Gates and commit helpers ------------------------------------------- #

    @asynccontextmanager
    async def _write_gates(
        self, *, prompts: bool = False, categories: bool = False
    ) -> AsyncIterator[None]:
        """Hold the requested collection gates, always prompts before categories."""
        async with AsyncExitStack() as stack:
            if prompts:
                await stack.enter_async_context(self._prompts_gate)
            if categories:
                await stack.enter_async_context(self._categories_gate)
            yield

    async def _read_storage(self, call: Awaitable[R], *, operation: str) -> R:
        """Await an adapter read; timeouts and unreadable stores raise PromptStorageError."""
        try:
            if self._storage_timeout is None:
                return await call
            return await asyncio.wait_for(call, timeout=self._storage_timeout)
        except TimeoutError as exc:
            logger.error(
                "Storage read timed out",
                extra={"operation": operation, "timeout_seconds": self._storage_timeout},
            )
            raise PromptStorageError(f"{operation} timed out") from exc
        except StorageError as exc:
            raise PromptStorageError(f"{operation} failed: {exc}") from exc

    async def _write_storage(self, call: Awaitable[bool], *, operation: str) -> WriteOutcome:
        """Await an adapter write, settling it even when it outlives the timeout.

        Backends may run writes in worker threads that cannot be cancelled, so a
        timed-out write is shielded and awaited to completion. Callers hold the
        write gates throughout, which keeps later writes ordered after it.
        """
        if self._storage_timeout is None:
            return WriteOutcome.SAVED if await call else WriteOutcome.FAILED
        task = asyncio.ensure_future(call)
        try:
            saved = await asyncio.wait_for(asyncio.shield(task), timeout=self._storage_timeout)
        except TimeoutError:
            logger.error(
                "Storage write timed out; waiting for the adapter to settle",
                extra={"operation": operation, "timeout_seconds": self._storage_timeout},
            )
            return WriteOutcome.LATE if await task else WriteOutcome.FAILED
        return WriteOutcome.SAVED if saved else WriteOutcome.FAILED

    async def _persist_prompts(self) -> WriteOutcome:
        records = [prompt_to_stored_record(prompt) for prompt in self._prompts]
        return await self._write_storage(
            self._storage.save_prompts(records), operation="save_prompts"
        )

    async def _persist_categories(self) -> WriteOutcome:
        records = [category.to_record() for category in self._categories]
        return await self._write_storage(
            self._storage.save_categories(records), operation="save_categories"
        )

    def _snapshot_prompts(self) -> list[Prompt]:
        return [prompt.clone() for prompt in self._prompts]

    def _snapshot_categories(self) -> list[Category]:
        return [replace(category) for category in self._categories]

    async def _commit_prompts(self, previous: list[Prompt]) -> bool:
        """Persist prompts; restore *previous* in memory when the write fails."""
        outcome = await self._persist_prompts()
        if outcome is WriteOutcome.SAVED:
            return True
        self._prompts = previous
        if outcome is WriteOutcome.LATE:
            await self._overwrite_late_write(self._persist_prompts, "prompts")
        return False

    async def _commit_categories(self, previous: list[Category]) -> bool:
        """Persist categories; restore *previous* in memory when the write fails."""
        outcome = await self._persist_categories()
        if outcome is WriteOutcome.SAVED:
            return True
        self._categories = previous
        if outcome is WriteOutcome.LATE:
            await self._overwrite_late_write(self._persist_categories, "categories")
        return False

    async def _commit_both(
        self, previous_prompts: list[Prompt], previous_categories: list[Category]
    ) -> bool:
        """Persist prompts then categories, undoing the first write if the second fails."""
        first = await self._persist_prompts()
        if first is not WriteOutcome.SAVED:
            self._prompts = previous_prompts
            self._categories = previous_categories
            if first is WriteOutcome.LATE:
                await self._overwrite_late_write(self._persist_prompts, "prompts")
            return False
        second = await self._persist_categories()
        if second is WriteOutcome.SAVED:
            return True
        self._prompts = previous_prompts
        self._categories = previous_categories
        if await self._persist_prompts() is WriteOutcome.FAILED:
            logger.error("Compensating prompt write failed; resynchronising from storage")
            await self._resync()
            return False
        logger.warning("Category write failed; prompt write compensated")
        if second is WriteOutcome.LATE:
            await self._overwrite_late_write(self._persist_categories, "categories")
        return False

    async def _overwrite_late_write(
        self, persist: Callable[[], Awaitable[WriteOutcome]], label: str
    ) -> None:
        """Write the rolled-back collection over a write that landed after its timeout."""
        if await persist() is not WriteOutcome.FAILED:
            logger.warning("Late %s write overwritten with the rolled-back state", label)
            return
        logger.error("Unable to overwrite late %s write; resynchronising from storage", label)
        await self._resync()

    async def _resync(self) -> None:
        """Reload memory from storage; unload the library when storage cannot be read."""
        try:
            await self._hydrate()
        except PromptStorageError as exc:
            self._loaded = False
            logger.error("Resynchronisation failed; the library must be loaded again: %s", exc)

    # Result helpers ----------------------------------------------------- #

    def _ensure_loaded(self, operation: str) -> MutationResult[Any] | None:
        if self._loaded:
            return None
        return self._reject(
            PromptLibraryError("Prompt library has not been loaded"), operation=operation
        )

    def _reject(self, error: PromptLibraryError, *, operation: str) -> MutationResult[Any]:
        logger.warning("%s rejected: %s", operation, error, extra={"operation": operation})
        return MutationResult.failure(error)

    def _storage_failed(self, error: PromptLibraryError, *, operation: str) -> MutationResult[Any]:
        logger.error("%s failed: %s", operation, error, extra={"operation": operation})
        return MutationResult.failure(error)
