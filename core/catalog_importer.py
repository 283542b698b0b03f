"""Import, merge, and export prompt library documents.

Documents share one shape for both directions::

    {"prompts": [<prompt record>, ...], "categories": [{"id": ..., "name": ...}, ...]}

:func:`plan_import` is a pure function computing the final collections for a
merge or replace import; :func:`import_library` applies such a plan through a
single two-collection commit on the library.

Updates:
  v0.4.0 - 2026-10-19 - Report import outcomes as MutationResult and export selected prompts.
  v0.3.0 - 2026-10-15 - Add YAML documents and empty-document guard.
  v0.2.0 - 2026-10-14 - Remap categories by case-insensitive name during merges.
  v0.1.0 - 2026-10-13 - Replace catalogue seeding with merge/replace document imports.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import yaml

from models.category_model import UNCATEGORIZED, Category, is_valid_category_record
from models.identifiers import generate_id, now_ms
from models.prompt_model import Prompt

from .exceptions import (
    ImportDocumentError,
    PromptLibraryError,
    PromptNotFoundError,
    RecordSchemaError,
)
from .migrations import migrate_prompt_record, prompt_to_stored_record
from .prompt_library import MutationResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .prompt_library import PromptLibrary

logger = logging.getLogger("prompt_library.catalog")

EXPORT_FORMATS: tuple[str, ...] = ("json", "yaml")
_YAML_SUFFIXES = {".yaml", ".yml"}


def _any_list_factory() -> list[Any]:
    return []


class ImportMode(str, Enum):
    """How imported records combine with the live library."""

    MERGE = "merge"
    REPLACE = "replace"


@dataclass(slots=True)
class ImportDocument:
    """Raw prompt and category entries read from an import source."""

    prompts: list[Any] = field(default_factory=_any_list_factory)
    categories: list[Any] = field(default_factory=_any_list_factory)
    source: str | None = None

    @classmethod
    def from_payload(cls, payload: Any, *, source: str | None = None) -> ImportDocument:
        """Build a document from decoded JSON/YAML.

        Raises:
            ImportDocumentError: when the payload is not an object or either
                collection is present but not a list.
        """
        if not isinstance(payload, Mapping):
            raise ImportDocumentError("Import document must be an object with prompts/categories")
        mapping = cast("Mapping[str, Any]", payload)
        collections: dict[str, list[Any]] = {}
        for key in ("prompts", "categories"):
            value = mapping.get(key)
            if value is None:
                collections[key] = []
            elif isinstance(value, list):
                collections[key] = list(cast("list[Any]", value))
            else:
                raise ImportDocumentError(f"Import document field '{key}' must be a list")
        return cls(
            prompts=collections["prompts"], categories=collections["categories"], source=source
        )


@dataclass(slots=True)
class ImportResult:
    """Aggregate statistics from an import operation."""

    mode: ImportMode
    prompts_imported: int = 0
    categories_imported: int = 0
    categories_remapped: int = 0
    prompt_ids_regenerated: int = 0
    prompts_rejected: int = 0
    categories_rejected: int = 0

    def summary(self) -> dict[str, int]:
        """Return the counters for downstream reporting."""
        return {
            "prompts_imported": self.prompts_imported,
            "categories_imported": self.categories_imported,
            "categories_remapped": self.categories_remapped,
            "prompt_ids_regenerated": self.prompt_ids_regenerated,
            "prompts_rejected": self.prompts_rejected,
            "categories_rejected": self.categories_rejected,
        }


@dataclass(slots=True)
class ImportPlan:
    """Final collections an import would produce, plus its statistics."""

    prompts: list[Prompt]
    categories: list[Category]
    result: ImportResult


# --------------------------------------------------------------------------- #
# Validation
# --------------------------------------------------------------------------- #


def _validate_categories(entries: Sequence[Any], result: ImportResult) -> list[Category]:
    categories: list[Category] = []
    for entry in entries:
        if not is_valid_category_record(entry):
            result.categories_rejected += 1
            continue
        try:
            categories.append(Category.from_record(entry))
        except ValueError as exc:
            logger.debug("Rejecting imported category: %s", exc)
            result.categories_rejected += 1
    return categories


def _validate_prompts(entries: Sequence[Any], result: ImportResult, now: int) -> list[Prompt]:
    prompts: list[Prompt] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            result.prompts_rejected += 1
            continue
        try:
            record = migrate_prompt_record(entry, now=now)
            raw_id = record.get("id")
            record["id"] = (
                raw_id.strip()
                if isinstance(raw_id, str) and raw_id.strip()
                else generate_id("prompt")
            )
            prompts.append(Prompt.from_record(record))
        except (RecordSchemaError, TypeError, ValueError) as exc:
            logger.debug("Rejecting imported prompt: %s", exc)
            result.prompts_rejected += 1
    return prompts


# --------------------------------------------------------------------------- #
# Planning
# --------------------------------------------------------------------------- #


def _plan_replace(
    categories: list[Category], prompts: list[Prompt], result: ImportResult
) -> ImportPlan:
    final_categories: list[Category] = []
    category_ids: set[str] = set()
    for category in categories:
        if category.id in category_ids:
            result.categories_rejected += 1
            continue
        category_ids.add(category.id)
        final_categories.append(category)
    result.categories_imported = len(final_categories)

    final_prompts: list[Prompt] = []
    prompt_ids: set[str] = set()
    for prompt in prompts:
        if prompt.id in prompt_ids:
            prompt.id = generate_id("prompt")
            result.prompt_ids_regenerated += 1
        if prompt.category_id not in category_ids:
            prompt.category_id = UNCATEGORIZED
        prompt_ids.add(prompt.id)
        final_prompts.append(prompt)
    result.prompts_imported = len(final_prompts)
    return ImportPlan(prompts=final_prompts, categories=final_categories, result=result)


def _plan_merge(
    categories: list[Category],
    prompts: list[Prompt],
    existing_prompts: Sequence[Prompt],
    existing_categories: Sequence[Category],
    result: ImportResult,
) -> ImportPlan:
    final_categories = [Category(id=item.id, name=item.name) for item in existing_categories]
    category_ids = {category.id for category in final_categories}
    by_name: dict[str, str] = {}
    for category in final_categories:
        by_name.setdefault(category.name.casefold(), category.id)

    remap: dict[str, str] = {}
    for category in categories:
        if category.id in category_ids:
            logger.debug("Imported category %s already exists; keeping existing", category.id)
            continue
        name_key = category.name.casefold()
        matched_id = by_name.get(name_key)
        if matched_id is not None:
            remap[category.id] = matched_id
            result.categories_remapped += 1
            continue
        final_categories.append(category)
        category_ids.add(category.id)
        by_name[name_key] = category.id
        result.categories_imported += 1

    final_prompts = [prompt.clone() for prompt in existing_prompts]
    prompt_ids = {prompt.id for prompt in final_prompts}
    for prompt in prompts:
        if prompt.id in prompt_ids:
            prompt.id = generate_id("prompt")
            result.prompt_ids_regenerated += 1
        resolved = remap.get(prompt.category_id, prompt.category_id)
        prompt.category_id = resolved if resolved in category_ids else UNCATEGORIZED
        prompt_ids.add(prompt.id)
        final_prompts.append(prompt)
        result.prompts_imported += 1
    return ImportPlan(prompts=final_prompts, categories=final_categories, result=result)


def plan_import(
    document: ImportDocument,
    *,
    merge: bool,
    existing_prompts: Sequence[Prompt] = (),
    existing_categories: Sequence[Category] = (),
    now: int | None = None,
) -> ImportPlan:
    """Return the collections an import of *document* would produce.

    Replace imports keep exactly the valid imported records. Merge imports
    append imported records after the existing ones: colliding category ids
    keep the existing category, categories whose name matches an existing one
    (case-insensitively, first match wins) are folded into it, and colliding
    prompt ids are regenerated.

    Raises:
        ImportDocumentError: when the document holds no valid prompt and no
            valid category.
    """
    result = ImportResult(mode=ImportMode.MERGE if merge else ImportMode.REPLACE)
    stamp = now if now is not None else now_ms()
    categories = _validate_categories(document.categories, result)
    prompts = _validate_prompts(document.prompts, result, stamp)
    if not categories and not prompts:
        raise ImportDocumentError("Import document contains no valid prompts or categories")
    if merge:
        return _plan_merge(categories, prompts, existing_prompts, existing_categories, result)
    return _plan_replace(categories, prompts, result)


# --------------------------------------------------------------------------- #
# Library integration
# --------------------------------------------------------------------------- #


def import_requires_confirmation(library: PromptLibrary) -> bool:
    """Return True when an import must ask the user to choose merge or replace."""
    return not library.is_empty()


async def import_library(
    library: PromptLibrary,
    document: ImportDocument,
    *,
    merge: bool,
) -> MutationResult[ImportResult]:
    """Apply *document* to *library* as one atomic two-collection commit.

    A failed result carries :class:`ImportDocumentError` when the document
    holds nothing usable, or the library's error when it is not loaded or the
    new collections could not be persisted. The library is unchanged either way.
    """
    plans: list[ImportPlan] = []

    def _build(
        prompts: list[Prompt], categories: list[Category]
    ) -> tuple[list[Prompt], list[Category]]:
        plan = plan_import(
            document,
            merge=merge,
            existing_prompts=prompts,
            existing_categories=categories,
        )
        plans.append(plan)
        return plan.prompts, plan.categories

    try:
        outcome = await library.rebuild_collections(_build)
    except ImportDocumentError as exc:
        logger.warning("Import rejected: %s", exc, extra={"source": document.source})
        return MutationResult.failure(exc)
    if not outcome or not plans:
        error = outcome.error or PromptLibraryError("Import could not be applied")
        return MutationResult.failure(error)
    result = plans[0].result
    logger.info(
        "Import applied",
        extra={"mode": result.mode.value, "source": document.source, **result.summary()},
    )
    return MutationResult.success(result)


def load_import_document(path: Path) -> ImportDocument:
    """Read a JSON or YAML (by ``.yaml``/``.yml`` suffix) import document."""
    resolved = path.expanduser()
    try:
        contents = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ImportDocumentError(f"Cannot read import document: {resolved}") from exc
    try:
        if resolved.suffix.lower() in _YAML_SUFFIXES:
            payload: object = yaml.safe_load(contents)
        else:
            payload = json.loads(contents)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ImportDocumentError(f"Import document {resolved} is malformed: {exc}") from exc
    return ImportDocument.from_payload(payload, source=str(resolved))


# --------------------------------------------------------------------------- #
# Export
# --------------------------------------------------------------------------- #


def build_export_document(
    library: PromptLibrary, prompt_ids: Sequence[str] | None = None
) -> dict[str, list[dict[str, Any]]]:
    """Return the live collections in the shared document shape.

    With *prompt_ids*, only those prompts are exported, in library order,
    together with the categories they reference.

    Raises:
        PromptNotFoundError: when a requested prompt id is not in the library.
    """
    prompts = library.get_prompts()
    categories = library.get_categories()
    if prompt_ids is not None:
        wanted = set(prompt_ids)
        missing = wanted.difference(prompt.id for prompt in prompts)
        if missing:
            raise PromptNotFoundError(f"Prompts not found: {', '.join(sorted(missing))}")
        prompts = [prompt for prompt in prompts if prompt.id in wanted]
        referenced = {prompt.category_id for prompt in prompts}
        categories = [category for category in categories if category.id in referenced]
    return {
        "prompts": [prompt_to_stored_record(prompt) for prompt in prompts],
        "categories": [category.to_record() for category in categories],
    }


def export_library(
    library: PromptLibrary,
    output_path: Path,
    *,
    fmt: str = "json",
    prompt_ids: Sequence[str] | None = None,
) -> Path:
    """Write the library (or the selected prompts) to *output_path* as JSON or YAML."""
    fmt_lower = fmt.lower()
    if fmt_lower not in EXPORT_FORMATS:
        raise ValueError("fmt must be 'json' or 'yaml'")

    payload = build_export_document(library, prompt_ids)
    resolved_path = output_path.expanduser()
    resolved_path.parent.mkdir(parents=True, exist_ok=True)

    if fmt_lower == "json":
        resolved_path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    else:
        with resolved_path.open("w", encoding="utf-8") as handle:
            yaml.safe_dump(payload, handle, allow_unicode=True, sort_keys=False)

    logger.info(
        "Library exported",
        extra={
            "path": str(resolved_path),
            "format": fmt_lower,
            "prompts": len(payload["prompts"]),
            "categories": len(payload["categories"]),
        },
    )
    return resolved_path


__all__ = [
    "EXPORT_FORMATS",
    "ImportDocument",
    "ImportMode",
    "ImportPlan",
    "ImportResult",
    "build_export_document",
    "export_library",
    "import_library",
    "import_requires_confirmation",
    "load_import_document",
    "plan_import",
]
