"""Common exception classes for the core package.

All exceptions ultimately inherit from :class:`PromptLibraryError`, allowing
callers to catch a single base class for any library failure while still
distinguishing validation, lookup, persistence, and schema problems.

Mutators on :class:`core.prompt_library.PromptLibrary` do not raise these to
callers; they hand them back inside a failed ``MutationResult``.

Updates:
  v0.4.0 - 2026-10-13 - Add import document errors for the merge engine.
  v0.3.0 - 2026-10-10 - Add undo buffer and record schema errors.
  v0.2.0 - 2026-10-08 - Add category exception hierarchy.
  v0.1.0 - 2026-10-02 - Created module.
"""

from __future__ import annotations


class PromptLibraryError(Exception):
    """Base exception for prompt library failures."""


# ---------------------------------------------------------------------------
# Prompt errors
# ---------------------------------------------------------------------------


class PromptNotFoundError(PromptLibraryError):
    """Raised when a prompt id does not exist in the live collection."""


class PromptValidationError(PromptLibraryError):
    """Raised when a prompt operation receives invalid input (e.g. a bad index)."""


class PromptStorageError(PromptLibraryError):
    """Raised when persisting the prompt collection fails."""


class PromptVersionError(PromptValidationError):
    """Raised when a version ledger operation would break its invariants."""


class UndoBufferEmptyError(PromptValidationError):
    """Raised when a restore is requested but no deleted prompt is pending."""


# ---------------------------------------------------------------------------
# Category errors
# ---------------------------------------------------------------------------


class CategoryError(PromptLibraryError):
    """Base class for category management failures."""


class CategoryNotFoundError(CategoryError):
    """Raised when a category reference does not resolve."""


class CategoryValidationError(CategoryError):
    """Raised when a category name is empty after trimming."""


class CategoryStorageError(CategoryError):
    """Raised when persisting the category collection fails."""


# ---------------------------------------------------------------------------
# Schema and import errors
# ---------------------------------------------------------------------------


class RecordSchemaError(PromptLibraryError):
    """Raised when a raw record cannot be upgraded to the current schema."""


class ImportDocumentError(PromptLibraryError):
    """Raised when an import document is unreadable or contains nothing usable."""
