"""Theme preference resolution.

Updates:
  v0.1.0 - 2026-10-16 - Resolve the ``auto`` preference from local time of day.
"""

from __future__ import annotations

from datetime import datetime

from .storage import DEFAULT_THEME, THEME_CHOICES

DARK_FROM_HOUR = 19
DARK_UNTIL_HOUR = 6


def resolve_theme(preference: str, now: datetime | None = None) -> str:
    """Return ``light`` or ``dark`` for *preference*.

    ``auto`` is dark from 19:00 until 06:00 local time. Unknown preferences
    fall back to the default theme.
    """
    if preference not in THEME_CHOICES:
        preference = DEFAULT_THEME
    if preference != "auto":
        return preference
    hour = (now or datetime.now()).hour
    return "dark" if hour >= DARK_FROM_HOUR or hour < DARK_UNTIL_HOUR else "light"


__all__ = ["DARK_FROM_HOUR", "DARK_UNTIL_HOUR", "resolve_theme"]
