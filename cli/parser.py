"""Argument parser for the prompt library CLI.

Updates:
  v0.3.0 - 2026-10-19 - Allow exporting selected prompts with --prompt.
  v0.2.0 - 2026-10-17 - Add import policy flags and theme command.
  v0.1.0 - 2026-10-16 - Add list/add/delete/categories/export subcommands.
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from core.catalog_importer import EXPORT_FORMATS
from core.storage import THEME_CHOICES
from core.view_state import DATE_FILTERS, SORT_OPTIONS


def build_parser() -> argparse.ArgumentParser:
    """Return the configured argument parser."""
    parser = argparse.ArgumentParser(description="Prompt library manager")
    parser.add_argument(
        "--logging-config",
        type=Path,
        default=None,
        help="Path to logging configuration file (INI format)",
    )
    parser.add_argument(
        "--print-settings",
        action="store_true",
        help="Print resolved settings and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="List prompts (default command).")
    list_parser.add_argument(
        "--category", default=None, help="Only show prompts in this category id."
    )
    list_parser.add_argument("--search", default="", help="Case-insensitive search term.")
    list_parser.add_argument(
        "--sort",
        choices=SORT_OPTIONS,
        default=SORT_OPTIONS[0],
        help="Ordering (default: manual order).",
    )
    list_parser.add_argument(
        "--date",
        choices=DATE_FILTERS,
        default="all",
        help="Only show prompts created in this window.",
    )

    add_parser = subparsers.add_parser("add", help="Add a prompt at the top of the library.")
    add_parser.add_argument("title", help="Prompt title.")
    add_parser.add_argument("text", help="Prompt text.")
    add_parser.add_argument("--tags", default=None, help="Comma separated tags.")
    add_parser.add_argument("--category", default=None, help="Category id to assign.")

    delete_parser = subparsers.add_parser("delete", help="Delete a prompt by id.")
    delete_parser.add_argument("prompt_id", help="Identifier of the prompt to delete.")

    categories_parser = subparsers.add_parser("categories", help="List or edit categories.")
    category_actions = categories_parser.add_mutually_exclusive_group()
    category_actions.add_argument("--add", metavar="NAME", default=None, help="Create a category.")
    category_actions.add_argument(
        "--delete",
        metavar="CATEGORY_ID",
        default=None,
        help="Delete a category and move its prompts to uncategorised.",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Export prompts and categories to JSON or YAML.",
    )
    export_parser.add_argument("path", type=Path, help="Destination file path (.json or .yaml)")
    export_parser.add_argument(
        "--format",
        choices=EXPORT_FORMATS,
        default=None,
        help="Explicit output format (defaults based on file extension).",
    )
    export_parser.add_argument(
        "--prompt",
        dest="prompt_ids",
        action="append",
        default=None,
        metavar="ID",
        help="Export only this prompt and its category (repeatable).",
    )

    import_parser = subparsers.add_parser(
        "import",
        help="Import prompts and categories from a JSON or YAML document.",
    )
    import_parser.add_argument("path", type=Path, help="Document to import.")
    policy = import_parser.add_mutually_exclusive_group()
    policy.add_argument(
        "--merge",
        dest="policy",
        action="store_const",
        const="merge",
        help="Keep existing records and add the imported ones.",
    )
    policy.add_argument(
        "--replace",
        dest="policy",
        action="store_const",
        const="replace",
        help="Discard existing records and keep only the imported ones.",
    )

    theme_parser = subparsers.add_parser("theme", help="Show or change the theme preference.")
    theme_parser.add_argument(
        "value",
        nargs="?",
        choices=THEME_CHOICES,
        default=None,
        help="New theme preference.",
    )

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments."""
    return build_parser().parse_args(argv)


__all__ = ["build_parser", "parse_args"]
