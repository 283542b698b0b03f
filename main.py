"""Application entry point for the prompt library CLI.

Updates:
  v0.3.0 - 2026-10-19 - Exit with a failure code when stored collections cannot be read.
  v0.2.0 - 2026-10-17 - Run command handlers inside a single asyncio event loop.
  v0.1.0 - 2026-10-16 - Wire settings, logging, library bootstrap, and CLI commands.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from cli.commands import COMMAND_SPECS, EXIT_FAILURE, CommandSpec
from cli.parser import parse_args
from cli.runtime import setup_logging
from cli.settings_summary import print_settings_summary
from config import SettingsError, load_settings
from core import PromptStorageError, StorageError, build_prompt_library

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    import argparse

    from config import PromptLibrarySettings

EXIT_SETTINGS = 2


async def _run_command(
    spec: CommandSpec,
    settings: PromptLibrarySettings,
    args: argparse.Namespace,
    logger: logging.Logger,
) -> int:
    if not spec.requires_library:
        return await spec.handler(None, args, logger)
    try:
        library = build_prompt_library(settings)
    except StorageError as exc:
        logger.error("Failed to initialise storage: %s", exc)
        return EXIT_FAILURE
    try:
        await library.load()
    except PromptStorageError as exc:
        logger.error("Failed to load prompt library: %s", exc)
        await library.close()
        return EXIT_FAILURE
    try:
        return await spec.handler(library, args, logger)
    finally:
        await library.close()


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint that wires settings, the library, and CLI commands."""
    args = parse_args(argv)
    setup_logging(args.logging_config)

    logger = logging.getLogger("prompt_library.main")
    try:
        settings = load_settings()
    except SettingsError as exc:
        logger.error("Failed to load settings: %s", exc)
        return EXIT_SETTINGS

    if args.print_settings:
        print_settings_summary(settings)
        return 0

    spec = COMMAND_SPECS[getattr(args, "command", None)]
    return asyncio.run(_run_command(spec, settings, args, logger))


if __name__ == "__main__":
    raise SystemExit(main())
