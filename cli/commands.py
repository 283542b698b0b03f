"""CLI command handlers for the prompt library.

Each handler is a coroutine receiving the loaded library (or ``None`` when the
command does not need one), the parsed arguments, and the CLI logger, and
returns a process exit code.

Updates:
  v0.3.0 - 2026-10-19 - Export selected prompts; read import outcomes from MutationResult.
  v0.2.0 - 2026-10-17 - Add import with merge/replace policy and theme command.
  v0.1.0 - 2026-10-16 - Add list/add/delete/categories/export handlers.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from core import (
    ImportDocumentError,
    PromptNotFoundError,
    ViewState,
    export_library,
    filter_prompts,
    import_library,
    import_requires_confirmation,
    load_import_document,
    resolve_theme,
)
from models.identifiers import now_ms

from .utils import print_and_log, resolve_export_format, shorten

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from core.prompt_library import PromptLibrary

CommandHandler = Callable[
    ["PromptLibrary | None", argparse.Namespace, logging.Logger], Awaitable[int]
]

EXIT_OK = 0
EXIT_FAILURE = 1


@dataclass(frozen=True)
class CommandSpec:
    """Metadata for dispatching CLI command handlers."""

    handler: CommandHandler
    requires_library: bool = True


def _require_library(library: PromptLibrary | None) -> PromptLibrary:
    if library is None:
        raise ValueError("Prompt library is required for this command.")
    return library


async def run_list(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    view = ViewState()
    view.set_category(getattr(args, "category", None))
    view.set_search_term(getattr(args, "search", ""))
    view.set_sort_option(getattr(args, "sort", view.sort_option))
    view.set_date_filter(getattr(args, "date", view.date_filter))
    prompts = filter_prompts(library.get_prompts(), view, now_ms=now_ms())
    if not prompts:
        print("No prompts found.")
        return EXIT_OK
    for prompt in prompts:
        favourite = "*" if prompt.is_favorite else " "
        tags = f" #{' #'.join(prompt.tags)}" if prompt.tags else ""
        print(
            f"{favourite} {prompt.id}  {prompt.title or '(untitled)'}"
            f"  [{library.category_label(prompt.category_id)}]"
            f"  copies={prompt.copy_count}  versions={len(prompt.versions)}{tags}"
        )
        print(f"    {shorten(prompt.text)}")
    logger.debug("Listed prompts", extra={"count": len(prompts)})
    return EXIT_OK


async def run_add(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    result = await library.add_prompt(args.title, args.text, tags=getattr(args, "tags", None))
    if not result or result.value is None:
        print_and_log(logger, logging.ERROR, f"Failed to add prompt: {result.error}")
        return EXIT_FAILURE
    prompt = result.value
    category_id = getattr(args, "category", None)
    if category_id:
        assigned = await library.update_prompt(prompt.id, category_id=category_id)
        if not assigned:
            print_and_log(
                logger,
                logging.WARNING,
                f"Prompt {prompt.id} added but category was not assigned: {assigned.error}",
            )
            return EXIT_FAILURE
    print(f"Added prompt {prompt.id}")
    return EXIT_OK


async def run_delete(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    result = await library.delete_prompt(args.prompt_id)
    if not result:
        print_and_log(logger, logging.ERROR, f"Failed to delete prompt: {result.error}")
        return EXIT_FAILURE
    print(f"Deleted prompt {args.prompt_id}")
    return EXIT_OK


async def run_categories(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    new_name = getattr(args, "add", None)
    delete_id = getattr(args, "delete", None)
    if new_name is not None:
        added = await library.add_category(new_name)
        if not added or added.value is None:
            print_and_log(logger, logging.ERROR, f"Failed to add category: {added.error}")
            return EXIT_FAILURE
        if library.find_category_by_name(new_name) != added.value:
            print(f"Note: a category named {added.value.name!r} already exists.")
        print(f"Added category {added.value.id} ({added.value.name})")
        return EXIT_OK
    if delete_id is not None:
        deleted = await library.delete_category_and_reassign_prompts(delete_id)
        if not deleted:
            print_and_log(logger, logging.ERROR, f"Failed to delete category: {deleted.error}")
            return EXIT_FAILURE
        print(f"Deleted category {delete_id}; {deleted.value} prompt(s) moved to uncategorised")
        return EXIT_OK
    categories = library.get_categories()
    if not categories:
        print("No categories defined.")
        return EXIT_OK
    for category in categories:
        print(f"{category.id}  {category.name}")
    return EXIT_OK


async def run_export(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    output_path = Path(args.path).expanduser()
    fmt = resolve_export_format(output_path, getattr(args, "format", None))
    try:
        resolved = export_library(
            library, output_path, fmt=fmt, prompt_ids=getattr(args, "prompt_ids", None)
        )
    except (OSError, ValueError, PromptNotFoundError) as exc:
        print_and_log(logger, logging.ERROR, f"Failed to export library: {exc}")
        return EXIT_FAILURE
    print(f"Library exported to {resolved} ({fmt})")
    return EXIT_OK


async def run_import(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    policy = getattr(args, "policy", None)
    if policy is None and import_requires_confirmation(library):
        print_and_log(
            logger,
            logging.ERROR,
            "The library is not empty; choose --merge or --replace to import.",
        )
        return EXIT_FAILURE
    try:
        document = load_import_document(Path(args.path))
    except ImportDocumentError as exc:
        print_and_log(logger, logging.ERROR, f"Import rejected: {exc}")
        return EXIT_FAILURE
    outcome = await import_library(library, document, merge=policy == "merge")
    if not outcome or outcome.value is None:
        verb = "rejected" if isinstance(outcome.error, ImportDocumentError) else "failed"
        print_and_log(logger, logging.ERROR, f"Import {verb}: {outcome.error}")
        return EXIT_FAILURE
    result = outcome.value
    counters = ", ".join(f"{key}={value}" for key, value in result.summary().items())
    verb = "Merged" if result.mode.value == "merge" else "Replaced"
    print(f"{verb} library from {args.path}: {counters}")
    return EXIT_OK


async def run_theme(
    library: PromptLibrary | None,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    library = _require_library(library)
    value = getattr(args, "value", None)
    if value is not None:
        saved = await library.save_theme(value)
        if not saved:
            print_and_log(logger, logging.ERROR, f"Failed to save theme: {saved.error}")
            return EXIT_FAILURE
    preference = await library.load_theme()
    print(f"Theme preference: {preference} (currently {resolve_theme(preference)})")
    return EXIT_OK


COMMAND_SPECS: dict[str | None, CommandSpec] = {
    None: CommandSpec(run_list),
    "list": CommandSpec(run_list),
    "add": CommandSpec(run_add),
    "delete": CommandSpec(run_delete),
    "categories": CommandSpec(run_categories),
    "export": CommandSpec(run_export),
    "import": CommandSpec(run_import),
    "theme": CommandSpec(run_theme),
}


__all__ = ["COMMAND_SPECS", "CommandSpec", "EXIT_FAILURE", "EXIT_OK"]
