"""Tests for the prompt record migration chain.

Updates: v0.1.0 - 2026-10-09 - Cover legacy flat text, defaults, and tag upgrades.
"""

from __future__ import annotations

import pytest

from core.exceptions import RecordSchemaError
from core.migrations import (
    SCHEMA_VERSION,
    migrate_prompt_record,
    prompt_from_raw,
    prompt_to_stored_record,
)
from models.category_model import UNCATEGORIZED
from models.prompt_model import Prompt


def test_flat_text_record_gains_single_version() -> None:
    """Legacy records with a flat text field get one version stamped with updatedAt."""
    record = migrate_prompt_record(
        {"id": "p1", "title": "Old", "text": "Hello", "createdAt": 10, "updatedAt": 20},
        now=99,
    )
    assert record["versions"] == [{"text": "Hello", "timestamp": 20}]
    assert "text" not in record
    assert record["schemaVersion"] == SCHEMA_VERSION


def test_defaults_are_filled() -> None:
    """Missing flags, counters, category, and timestamps receive defaults."""
    record = migrate_prompt_record({"id": "p1", "copyCount": "-3"}, now=500)
    assert record["title"] == ""
    assert record["isFavorite"] is False
    assert record["copyCount"] == 0
    assert record["categoryId"] == UNCATEGORIZED
    assert record["createdAt"] == 500
    assert record["updatedAt"] == 500
    assert record["versions"] == [{"text": "", "timestamp": 500}]


def test_malformed_versions_are_dropped() -> None:
    """Version entries that are not objects or lack text are discarded."""
    record = migrate_prompt_record(
        {"id": "p1", "versions": ["bad", {"timestamp": 3}, {"text": "ok", "timestamp": 4}]},
        now=1,
    )
    assert record["versions"] == [{"text": "ok", "timestamp": 4}]


def test_tags_string_is_normalised() -> None:
    """Comma separated tag strings become a normalised list."""
    record = migrate_prompt_record({"id": "p1", "schemaVersion": 2, "tags": "A, b, a"}, now=1)
    assert record["tags"] == ["a", "b"]


def test_current_records_pass_through_unchanged() -> None:
    """A record already at the current schema keeps its values."""
    prompt = Prompt.create(title="t", text="x", tags=["k"], timestamp=7)
    stored = prompt_to_stored_record(prompt)
    assert migrate_prompt_record(stored, now=999) == stored
    assert prompt_from_raw(stored) == prompt


def test_newer_schema_is_still_normalised() -> None:
    """Records from a newer schema are re-run through every known step."""
    record = migrate_prompt_record({"id": "p1", "schemaVersion": 99, "text": "x"}, now=5)
    assert record["versions"] == [{"text": "x", "timestamp": 5}]
    assert record["schemaVersion"] == SCHEMA_VERSION


def test_non_mapping_and_missing_id_are_rejected() -> None:
    """Records that are not objects or have no id cannot be hydrated."""
    with pytest.raises(RecordSchemaError):
        migrate_prompt_record(["not", "a", "record"])
    with pytest.raises(RecordSchemaError):
        prompt_from_raw({"title": "no id", "text": "x"})
