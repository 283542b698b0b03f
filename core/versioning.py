"""Bounded version ledger helpers for prompts.

Every prompt keeps a chronological list of text snapshots. The list is capped
at ``max_versions`` entries (oldest evicted first) and never becomes empty.

Updates:
  v0.2.0 - 2026-10-10 - Add version removal and restore helpers.
  v0.1.0 - 2026-10-06 - Extract FIFO ledger cap from prompt updates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from models.identifiers import now_ms
from models.prompt_model import PromptVersion

from .exceptions import PromptVersionError

if TYPE_CHECKING:  # pragma: no cover - typing helpers only
    from models.prompt_model import Prompt

MAX_VERSIONS = 20

__all__ = [
    "MAX_VERSIONS",
    "append_version",
    "current_text",
    "remove_version",
    "trim_versions",
    "version_text",
]


def current_text(prompt: Prompt) -> str:
    """Return the text of the latest version."""
    return prompt.versions[-1].text


def trim_versions(versions: list[PromptVersion], max_versions: int = MAX_VERSIONS) -> int:
    """Drop the oldest entries until *versions* fits the cap; return how many were dropped."""
    limit = max(1, max_versions)
    overflow = len(versions) - limit
    if overflow <= 0:
        return 0
    del versions[:overflow]
    return overflow


def append_version(
    prompt: Prompt,
    text: str,
    *,
    max_versions: int = MAX_VERSIONS,
    timestamp: int | None = None,
) -> PromptVersion:
    """Append *text* as the new current version, evicting the oldest beyond the cap."""
    version = PromptVersion(text=text, timestamp=timestamp if timestamp is not None else now_ms())
    prompt.versions.append(version)
    trim_versions(prompt.versions, max_versions)
    return version


def version_text(prompt: Prompt, index: int) -> str:
    """Return the text stored at *index*, raising when the index is out of range."""
    if index < 0 or index >= len(prompt.versions):
        raise PromptVersionError(
            f"Version index {index} is out of range for prompt {prompt.id} "
            f"({len(prompt.versions)} versions)"
        )
    return prompt.versions[index].text


def remove_version(prompt: Prompt, index: int) -> PromptVersion:
    """Remove and return the version at *index*.

    Raises:
        PromptVersionError: when *index* is out of range or the version is the
            only one left.
    """
    if index < 0 or index >= len(prompt.versions):
        raise PromptVersionError(
            f"Version index {index} is out of range for prompt {prompt.id} "
            f"({len(prompt.versions)} versions)"
        )
    if len(prompt.versions) <= 1:
        raise PromptVersionError(f"Prompt {prompt.id} must keep at least one version")
    return prompt.versions.pop(index)
