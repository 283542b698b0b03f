"""Data models for the prompt library.

Updates: v0.2.0 - 2026-10-08 - Export Category dataclass and uncategorised sentinel.
Updates: v0.1.0 - 2026-10-02 - Export Prompt and PromptVersion dataclasses.
"""

from .category_model import UNCATEGORIZED, Category
from .identifiers import generate_id, now_ms
from .prompt_model import Prompt, PromptVersion

__all__ = [
    "Category",
    "Prompt",
    "PromptVersion",
    "UNCATEGORIZED",
    "generate_id",
    "now_ms",
]
