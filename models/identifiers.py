"""Identifier and clock helpers shared by library records.

Updates: v0.1.0 - 2026-10-02 - Introduce prefixed record ids and epoch-millisecond clock.
"""

from __future__ import annotations

import time
import uuid


def now_ms() -> int:
    """Return the current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id(prefix: str = "item") -> str:
    """Return an opaque, unique identifier such as ``prompt_1760000000000_1a2b3c4d5``."""
    return f"{prefix}_{now_ms()}_{uuid.uuid4().hex[:9]}"


__all__ = ["generate_id", "now_ms"]
