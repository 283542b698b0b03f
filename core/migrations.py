"""Versioned schema migrations for raw prompt records.

Stored and imported prompt records may come from older releases that kept a
single flat ``text`` field, lacked favourite/copy counters, or stored tags as a
comma separated string. Each step below upgrades a record by exactly one
schema version; :func:`migrate_prompt_record` runs the chain from the record's
``schemaVersion`` (0 when absent) up to :data:`SCHEMA_VERSION`.

Updates:
  v0.3.0 - 2026-10-09 - Add tag normalisation step (schema 3).
  v0.2.0 - 2026-10-07 - Add counter/flag defaults step (schema 2).
  v0.1.0 - 2026-10-06 - Introduce flat-text to version-list upgrade (schema 1).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, cast

from models.category_model import UNCATEGORIZED
from models.identifiers import now_ms
from models.prompt_model import Prompt, normalise_tags

from .exceptions import RecordSchemaError

logger = logging.getLogger("prompt_library.migrations")

SCHEMA_VERSION = 3

MigrationStep = Callable[[dict[str, Any], int], dict[str, Any]]


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _record_timestamp(record: Mapping[str, Any], now: int) -> int:
    for key in ("updatedAt", "createdAt"):
        stamp = _as_int(record.get(key))
        if stamp is not None:
            return stamp
    return now


def _upgrade_to_version_list(record: dict[str, Any], now: int) -> dict[str, Any]:
    """Schema 0 -> 1: synthesise the version ledger."""
    raw_versions = record.get("versions")
    versions: list[dict[str, Any]] = []
    if isinstance(raw_versions, Sequence) and not isinstance(raw_versions, (str, bytes)):
        fallback_stamp = _record_timestamp(record, now)
        for entry in cast("Sequence[object]", raw_versions):
            if not isinstance(entry, Mapping):
                continue
            entry_map = cast("Mapping[str, Any]", entry)
            text = entry_map.get("text")
            if text is None:
                continue
            stamp = _as_int(entry_map.get("timestamp"))
            versions.append(
                {"text": str(text), "timestamp": stamp if stamp is not None else fallback_stamp}
            )
    if not versions:
        legacy_text = record.get("text")
        versions.append(
            {
                "text": "" if legacy_text is None else str(legacy_text),
                "timestamp": _record_timestamp(record, now),
            }
        )
    record["versions"] = versions
    record.pop("text", None)
    return record


def _upgrade_defaults(record: dict[str, Any], now: int) -> dict[str, Any]:
    """Schema 1 -> 2: default flags, counters, category, and timestamps."""
    title = record.get("title")
    record["title"] = "" if title is None else str(title)
    record["isFavorite"] = bool(record.get("isFavorite", False))
    copy_count = _as_int(record.get("copyCount"))
    record["copyCount"] = copy_count if copy_count is not None and copy_count > 0 else 0
    category_id = record.get("categoryId")
    record["categoryId"] = (
        str(category_id) if isinstance(category_id, str) and category_id else UNCATEGORIZED
    )
    created_at = _as_int(record.get("createdAt"))
    if created_at is None:
        created_at = now
    updated_at = _as_int(record.get("updatedAt"))
    record["createdAt"] = created_at
    record["updatedAt"] = updated_at if updated_at is not None else created_at
    return record


def _upgrade_tags(record: dict[str, Any], _: int) -> dict[str, Any]:
    """Schema 2 -> 3: normalise tags into a lower-case unique list."""
    raw_tags = record.get("tags")
    if isinstance(raw_tags, (str, list, tuple, set)):
        record["tags"] = normalise_tags(raw_tags)
    else:
        record["tags"] = []
    return record


# Index N holds the step upgrading schema N to N + 1.
MIGRATIONS: tuple[MigrationStep, ...] = (
    _upgrade_to_version_list,
    _upgrade_defaults,
    _upgrade_tags,
)


def record_schema_version(record: Mapping[str, Any]) -> int:
    """Return the declared schema version of *record* (0 for legacy records)."""
    version = _as_int(record.get("schemaVersion"))
    if version is None or version < 0:
        return 0
    return version


def migrate_prompt_record(raw: Any, *, now: int | None = None) -> dict[str, Any]:
    """Return a copy of *raw* upgraded to :data:`SCHEMA_VERSION`.

    The ``id`` field is left untouched; callers decide whether a missing id is
    acceptable (imports generate one, stored records are rejected).

    Raises:
        RecordSchemaError: if *raw* is not a mapping.
    """
    if not isinstance(raw, Mapping):
        raise RecordSchemaError(f"Prompt records must be objects, got {type(raw).__name__}")
    raw_mapping = cast("Mapping[object, Any]", raw)
    record: dict[str, Any] = {str(key): value for key, value in raw_mapping.items()}
    stamp = now if now is not None else now_ms()
    start = record_schema_version(record)
    if start > SCHEMA_VERSION:
        logger.warning(
            "Prompt record declares a newer schema; re-applying known steps",
            extra={"schema_version": start, "prompt_id": record.get("id")},
        )
        start = 0
    for step in MIGRATIONS[start:]:
        record = step(record, stamp)
    record["schemaVersion"] = SCHEMA_VERSION
    return record


def prompt_from_raw(raw: Any, *, now: int | None = None) -> Prompt:
    """Upgrade *raw* and hydrate it into a :class:`Prompt`.

    Raises:
        RecordSchemaError: when the record is not an object or carries no id.
    """
    record = migrate_prompt_record(raw, now=now)
    prompt_id = record.get("id")
    if not isinstance(prompt_id, str) or not prompt_id.strip():
        raise RecordSchemaError("Prompt record is missing an id")
    try:
        return Prompt.from_record(record)
    except (ValueError, TypeError) as exc:
        raise RecordSchemaError(f"Prompt record {prompt_id} is invalid: {exc}") from exc


def prompt_to_stored_record(prompt: Prompt) -> dict[str, Any]:
    """Return the persisted representation of *prompt* stamped with the schema version."""
    record = prompt.to_record()
    record["schemaVersion"] = SCHEMA_VERSION
    return record


__all__ = [
    "MIGRATIONS",
    "SCHEMA_VERSION",
    "migrate_prompt_record",
    "prompt_from_raw",
    "prompt_to_stored_record",
    "record_schema_version",
]
