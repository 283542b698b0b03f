"""Runtime boot helpers for the prompt library CLI.

Updates:
  v0.2.0 - 2026-10-18 - Fall back to the packaged logging.conf when run outside the repo.
  v0.1.0 - 2026-10-16 - Extract logging configuration helpers.
"""

from __future__ import annotations

import configparser
import logging
import logging.config
from pathlib import Path

DEFAULT_LOGGING_CONF = Path("config/logging.conf")
PACKAGED_LOGGING_CONF = Path(__file__).resolve().parents[1] / "config" / "logging.conf"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _candidate_configs(explicit: Path | None) -> list[Path]:
    if explicit is not None:
        return [explicit.expanduser()]
    return [DEFAULT_LOGGING_CONF, PACKAGED_LOGGING_CONF]


def setup_logging(logging_conf_path: Path | None) -> Path | None:
    """Configure logging from the first usable INI file; return it, or None for defaults.

    An explicit *logging_conf_path* disables the fallback search.
    """
    for path in _candidate_configs(logging_conf_path):
        if not path.is_file():
            continue
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
        except (configparser.Error, KeyError, ValueError, OSError, RuntimeError) as exc:
            logging.getLogger("prompt_library.cli").warning(
                "Invalid logging configuration %s: %s", path, exc
            )
            continue
        return path
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    return None


__all__ = ["DEFAULT_LOGGING_CONF", "PACKAGED_LOGGING_CONF", "setup_logging"]
