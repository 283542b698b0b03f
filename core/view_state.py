"""Transient view state and the filtered projection of the prompt list.

Updates:
  v0.2.0 - 2026-10-16 - Add date filters and copy-count ordering.
  v0.1.0 - 2026-10-15 - Introduce category/search filtering with sort options.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from models.category_model import UNCATEGORIZED
from models.prompt_model import Prompt

logger = logging.getLogger("prompt_library.view")

SORT_OPTIONS: tuple[str, ...] = (
    "createdAtDesc",
    "updatedAtDesc",
    "titleAsc",
    "titleDesc",
    "copyCountDesc",
)
DATE_FILTERS: tuple[str, ...] = ("all", "today", "yesterday", "thisWeek")
MANUAL_SORT = "createdAtDesc"


@dataclass(slots=True)
class ViewState:
    """How the consuming interface currently slices the library; never persisted."""

    category_id: str = UNCATEGORIZED
    search_term: str = ""
    sort_option: str = MANUAL_SORT
    date_filter: str = "all"

    def set_category(self, category_id: str | None) -> None:
        """Filter by *category_id*; ``None`` or ``"all"`` shows every category."""
        self.category_id = category_id or UNCATEGORIZED

    def set_search_term(self, term: str | None) -> None:
        """Store the free-text search term."""
        self.search_term = term or ""

    def set_sort_option(self, option: str) -> bool:
        """Switch ordering; unknown options are ignored and return False."""
        if option not in SORT_OPTIONS:
            logger.warning("Ignoring invalid sort option %r", option)
            return False
        self.sort_option = option
        return True

    def set_date_filter(self, value: str) -> bool:
        """Switch the creation-date window; unknown values are ignored and return False."""
        if value not in DATE_FILTERS:
            logger.warning("Ignoring invalid date filter %r", value)
            return False
        self.date_filter = value
        return True

    def reset(self) -> None:
        """Return to the unfiltered, manually ordered view."""
        self.category_id = UNCATEGORIZED
        self.search_term = ""
        self.sort_option = MANUAL_SORT
        self.date_filter = "all"


def manual_ordering_enabled(view: ViewState) -> bool:
    """Return True when drag-style reordering matches what the user sees."""
    return view.sort_option == MANUAL_SORT


def _local_date(epoch_ms: int) -> date:
    return datetime.fromtimestamp(epoch_ms / 1000).date()


def _matches_date(prompt: Prompt, date_filter: str, today: date) -> bool:
    if date_filter == "all":
        return True
    created = _local_date(prompt.created_at)
    if date_filter == "today":
        return created == today
    if date_filter == "yesterday":
        return created == today - timedelta(days=1)
    # thisWeek: today and the six days before it
    return today - timedelta(days=6) <= created <= today


def _matches_search(prompt: Prompt, needle: str) -> bool:
    if needle in prompt.title.casefold() or needle in prompt.text.casefold():
        return True
    return any(needle in tag for tag in prompt.tags)


def filter_prompts(prompts: Iterable[Prompt], view: ViewState, *, now_ms: int) -> list[Prompt]:
    """Return the prompts visible under *view*, in display order.

    ``createdAtDesc`` keeps the stored (manual) order because new prompts are
    always inserted at the top.
    """
    today = _local_date(now_ms)
    needle = view.search_term.strip().casefold()
    visible = [
        prompt
        for prompt in prompts
        if (view.category_id == UNCATEGORIZED or prompt.category_id == view.category_id)
        and (not needle or _matches_search(prompt, needle))
        and _matches_date(prompt, view.date_filter, today)
    ]
    if view.sort_option == "updatedAtDesc":
        visible.sort(key=lambda prompt: prompt.updated_at, reverse=True)
    elif view.sort_option == "titleAsc":
        visible.sort(key=lambda prompt: prompt.title.casefold())
    elif view.sort_option == "titleDesc":
        visible.sort(key=lambda prompt: prompt.title.casefold(), reverse=True)
    elif view.sort_option == "copyCountDesc":
        visible.sort(key=lambda prompt: prompt.copy_count, reverse=True)
    return visible


__all__ = [
    "DATE_FILTERS",
    "MANUAL_SORT",
    "SORT_OPTIONS",
    "ViewState",
    "filter_prompts",
    "manual_ordering_enabled",
]
