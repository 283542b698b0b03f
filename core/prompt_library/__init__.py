"""Prompt library façade.

:class:`PromptLibrary` owns the live prompt and category collections, applies
mutations in memory, persists them through a :class:`core.storage.LibraryStorage`
adapter, and reports each outcome as a :class:`MutationResult`. Read accessors
always hand out copies.

Updates:
  v0.3.0 - 2026-10-13 - Compose version and category mixins into the façade.
  v0.2.0 - 2026-10-10 - Add explicit load/close lifecycle.
  v0.1.0 - 2026-10-05 - Introduce PromptLibrary façade.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from models.identifiers import now_ms

from ..storage import DEFAULT_THEME
from ..versioning import MAX_VERSIONS
from .categories import UNCATEGORIZED_LABEL, CategorySupport
from .lifecycle import PromptLifecycleMixin
from .state import UNDO_TIMEOUT_MS, MutationResult, UndoEntry
from .storage import LibraryPersistenceMixin
from .versioning import PromptVersionMixin

if TYPE_CHECKING:  # pragma: no cover - typing only
    from types import TracebackType

    from ..storage import LibraryStorage

__all__ = [
    "MAX_VERSIONS",
    "MutationResult",
    "PromptLibrary",
    "UNCATEGORIZED_LABEL",
    "UNDO_TIMEOUT_MS",
    "UndoEntry",
]


class PromptLibrary(
    PromptLifecycleMixin,
    PromptVersionMixin,
    CategorySupport,
    LibraryPersistenceMixin,
):
    """Record store for prompts, their version ledgers, and categories."""

    def __init__(
        self,
        storage: LibraryStorage,
        *,
        max_versions: int = MAX_VERSIONS,
        storage_timeout: float | None = None,
        clock: Callable[[], int] = now_ms,
        default_theme: str = DEFAULT_THEME,
    ) -> None:
        """Create an empty library bound to *storage*; call :meth:`load` before use."""
        self._initialise_persistence(
            storage,
            max_versions=max_versions,
            storage_timeout=storage_timeout,
            clock=clock,
            default_theme=default_theme,
        )

    async def __aenter__(self) -> PromptLibrary:
        await self.load()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def is_empty(self) -> bool:
        """Return True when the library holds no prompts and no categories."""
        return not self._prompts and not self._categories
