"""Settings management utilities for prompt library configuration.

Updates:
  v0.2.0 - 2026-10-16 - Add storage backend selection and adapter timeout.
  v0.1.0 - 2026-10-03 - Introduce PromptLibrarySettings with JSON, env, and .env sources.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, cast

from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_DOTENV_FALLBACK_PATH = ".env"
_ENV_PREFIX = "PROMPT_LIBRARY_"

DEFAULT_THEME_MODE = "light"
_THEME_CHOICES = {"light", "dark", "auto"}

ThemeMode = Literal["light", "dark", "auto"]
StorageBackend = Literal["sqlite", "memory"]

_CONFIG_KEYS: tuple[str, ...] = (
    "db_path",
    "max_versions",
    "undo_window_seconds",
    "storage_timeout_seconds",
    "theme_mode",
    "storage_backend",
)

logger = logging.getLogger("prompt_library.settings")


def _read_dotenv_values() -> dict[str, str]:
    """Load ``.env`` entries into a mapping without mutating ``os.environ``."""
    env_file_override = os.getenv(f"{_ENV_PREFIX}ENV_FILE")
    if env_file_override is not None:
        candidate = env_file_override.strip()
        if not candidate:
            return {}
        path = Path(candidate).expanduser()
    else:
        path = Path(_DOTENV_FALLBACK_PATH).expanduser()
    if not path.is_file():
        return {}
    raw_values = dotenv_values(str(path))
    return {str(key): str(value) for key, value in raw_values.items() if value is not None}


class SettingsError(Exception):
    """Raised when prompt library configuration cannot be loaded or validated."""


class PromptLibrarySettings(BaseSettings):
    """Application configuration sourced from keyword arguments, JSON files, or the environment."""

    db_path: Path = Field(default=Path("data") / "prompt_library.db")
    max_versions: int = Field(
        default=20,
        description="Maximum number of text versions kept per prompt (oldest evicted first).",
    )
    undo_window_seconds: float = Field(
        default=5.0,
        description="How long interfaces offer to undo a deletion.",
    )
    storage_timeout_seconds: float | None = Field(
        default=None,
        description="Optional bound on each storage adapter call.",
    )
    theme_mode: ThemeMode = Field(default=DEFAULT_THEME_MODE)
    storage_backend: StorageBackend = Field(default="sqlite")

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": _ENV_PREFIX,
            "case_sensitive": False,
            "populate_by_name": True,
        },
    )

    @property
    def undo_window_ms(self) -> int:
        """Return the undo window in milliseconds."""
        return int(self.undo_window_seconds * 1000)

    @field_validator("db_path", mode="before")
    def _normalise_path(cls, value: Any) -> Path:
        """Expand user-relative paths and coerce values to Path instances."""
        if value is None:
            raise ValueError("a filesystem path is required")
        path = Path(str(value)).expanduser()
        return path.resolve()

    @field_validator("max_versions")
    def _validate_max_versions(cls, value: int) -> int:
        """Ensure at least one version is always retained."""
        if value < 1:
            raise ValueError("max_versions must be at least 1")
        return value

    @field_validator("undo_window_seconds")
    def _validate_undo_window(cls, value: float) -> float:
        """Ensure the undo window is positive."""
        if value <= 0:
            raise ValueError("undo_window_seconds must be greater than zero")
        return value

    @field_validator("storage_timeout_seconds", mode="before")
    def _validate_storage_timeout(cls, value: Any) -> float | None:
        """Treat blank values as unset and reject non-positive timeouts."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        timeout = float(value)
        if timeout <= 0:
            raise ValueError("storage_timeout_seconds must be greater than zero")
        return timeout

    @field_validator("theme_mode", mode="before")
    def _normalise_theme_mode(cls, value: str | None) -> str:
        if value is None:
            return DEFAULT_THEME_MODE
        text = str(value).strip().lower()
        if text not in _THEME_CHOICES:
            return DEFAULT_THEME_MODE
        return text

    @field_validator("storage_backend", mode="before")
    def _normalise_storage_backend(cls, value: Any) -> str:
        if value is None:
            return "sqlite"
        return str(value).strip().lower()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(max_versions=5)).
            2. JSON configuration file.
            3. Environment variables, then ``.env`` entries.
            4. File secrets.
        """

        def env_with_dotenv(_: BaseSettings | None = None) -> dict[str, Any]:
            data: dict[str, Any] = {}
            dotenv_entries = _read_dotenv_values()

            def _lookup(candidate: str) -> str | None:
                value = os.getenv(candidate)
                if value is None:
                    value = dotenv_entries.get(candidate)
                if value is None:
                    return None
                stripped_value = str(value).strip()
                return stripped_value or None

            for field in _CONFIG_KEYS:
                for candidate in (f"{_ENV_PREFIX}{field.upper()}", f"{_ENV_PREFIX}{field}"):
                    value = _lookup(candidate)
                    if value is not None:
                        data[field] = value
                        break
            return data

        return (
            init_settings,
            cls._json_config_settings_source(settings_cls),
            cast("PydanticBaseSettingsSource", env_with_dotenv),
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv(f"{_ENV_PREFIX}CONFIG_JSON")
            candidates: list[Path] = []
            if explicit_path:
                candidates.append(Path(explicit_path).expanduser())
            candidates.append((Path("config") / "config.json").expanduser())

            for path in candidates:
                if not path.exists():
                    if explicit_path and path == candidates[0]:
                        raise SettingsError(f"Configuration file not found: {path}")
                    continue
                try:
                    raw_contents = path.read_text(encoding="utf-8")
                except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                    raise SettingsError(f"Unable to read configuration file: {path}") from exc
                try:
                    data = json.loads(raw_contents)
                except json.JSONDecodeError as exc:
                    raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
                if not isinstance(data, dict):
                    message = f"Configuration file {path} must contain a JSON object"
                    raise SettingsError(message)
                mapping_data = cast("Mapping[object, Any]", data)
                data_dict: dict[str, Any] = {str(key): value for key, value in mapping_data.items()}
                unknown = sorted(key for key in data_dict if key not in _CONFIG_KEYS)
                if unknown:
                    logger.warning(
                        "Ignoring unknown key(s) %s in configuration file %s",
                        ", ".join(unknown),
                        path,
                    )
                return {key: data_dict[key] for key in _CONFIG_KEYS if key in data_dict}
            return {}

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> PromptLibrarySettings:
    """Return validated settings, raising SettingsError on failure."""
    try:
        return PromptLibrarySettings(**overrides)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError("Invalid prompt library configuration") from exc


__all__ = [
    "DEFAULT_THEME_MODE",
    "PromptLibrarySettings",
    "SettingsError",
    "StorageBackend",
    "ThemeMode",
    "load_settings",
]
