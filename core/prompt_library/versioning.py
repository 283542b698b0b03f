"""Version history operations for library prompts.

Updates:
  v0.2.0 - 2026-10-10 - Add restore of earlier versions as the new current text.
  v0.1.0 - 2026-10-06 - Extract version deletion into mixin module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..exceptions import PromptNotFoundError, PromptStorageError, PromptVersionError
from ..versioning import remove_version, version_text
from .state import MutationResult

if TYPE_CHECKING:  # pragma: no cover - typing only
    from models.prompt_model import Prompt, PromptVersion

logger = logging.getLogger("prompt_library.library")

__all__ = ["PromptVersionMixin"]


class PromptVersionMixin:
    """Mixin exposing version ledger edits on live prompts."""

    _prompts: list[Prompt]
    _clock: Callable[[], int]

    def get_prompt_versions(self, prompt_id: str) -> list[PromptVersion]:
        """Return copies of a prompt's versions, oldest first (empty when unknown)."""
        prompt = self.get_prompt(prompt_id)
        return [] if prompt is None else list(prompt.versions)

    async def delete_prompt_version(self, prompt_id: str, index: int) -> MutationResult[Prompt]:
        """Remove one version; the last remaining version can never be deleted."""
        not_ready = self._ensure_loaded("delete_prompt_version")
        if not_ready is not None:
            return not_ready
        async with self._write_gates(prompts=True):
            position = self._prompt_index(prompt_id)
            if position is None:
                return self._reject(
                    PromptNotFoundError(f"Prompt {prompt_id} not found"),
                    operation="delete_prompt_version",
                )
            previous = self._snapshot_prompts()
            prompt = self._prompts[position]
            was_current = index == len(prompt.versions) - 1
            try:
                remove_version(prompt, index)
            except PromptVersionError as exc:
                return self._reject(exc, operation="delete_prompt_version")
            if was_current:
                prompt.updated_at = self._clock()
            if not await self._commit_prompts(previous):
                return self._storage_failed(
                    PromptStorageError(f"Unable to persist version removal for {prompt_id}"),
                    operation="delete_prompt_version",
                )
            result = prompt.clone()
        logger.debug(
            "Prompt version deleted",
            extra={"prompt_id": prompt_id, "index": index, "was_current": was_current},
        )
        return MutationResult.success(result)

    async def restore_prompt_version(self, prompt_id: str, index: int) -> MutationResult[Prompt]:
        """Append the text of version *index* as the prompt's new current version."""
        not_ready = self._ensure_loaded("restore_prompt_version")
        if not_ready is not None:
            return not_ready
        position = self._prompt_index(prompt_id)
        if position is None:
            return self._reject(
                PromptNotFoundError(f"Prompt {prompt_id} not found"),
                operation="restore_prompt_version",
            )
        try:
            text = version_text(self._prompts[position], index)
        except PromptVersionError as exc:
            return self._reject(exc, operation="restore_prompt_version")
        return await self.update_prompt(prompt_id, text=text)
