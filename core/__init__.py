"""Core service layer for the prompt library.

Updates:
  v0.3.0 - 2026-10-16 - Export view state, theme, and import/export helpers.
  v0.2.0 - 2026-10-13 - Export build_prompt_library factory for shared bootstrap.
  v0.1.0 - 2026-10-05 - Surface PromptLibrary and the storage adapters.
"""

from models.category_model import UNCATEGORIZED, Category
from models.prompt_model import Prompt, PromptVersion

from .catalog_importer import (
    ImportDocument,
    ImportMode,
    ImportPlan,
    ImportResult,
    build_export_document,
    export_library,
    import_library,
    import_requires_confirmation,
    load_import_document,
    plan_import,
)
from .exceptions import (
    CategoryError,
    CategoryNotFoundError,
    CategoryStorageError,
    CategoryValidationError,
    ImportDocumentError,
    PromptLibraryError,
    PromptNotFoundError,
    PromptStorageError,
    PromptValidationError,
    PromptVersionError,
    RecordSchemaError,
    UndoBufferEmptyError,
)
from .factory import build_prompt_library, build_storage
from .migrations import SCHEMA_VERSION, migrate_prompt_record
from .prompt_library import (
    MAX_VERSIONS,
    UNDO_TIMEOUT_MS,
    MutationResult,
    PromptLibrary,
    UndoEntry,
)
from .storage import InMemoryStorage, LibraryStorage, SQLiteStorage, StorageError
from .theme import resolve_theme
from .view_state import ViewState, filter_prompts, manual_ordering_enabled

__all__ = [
    "Category",
    "CategoryError",
    "CategoryNotFoundError",
    "CategoryStorageError",
    "CategoryValidationError",
    "ImportDocument",
    "ImportDocumentError",
    "ImportMode",
    "ImportPlan",
    "ImportResult",
    "InMemoryStorage",
    "LibraryStorage",
    "MAX_VERSIONS",
    "MutationResult",
    "Prompt",
    "PromptLibrary",
    "PromptLibraryError",
    "PromptNotFoundError",
    "PromptStorageError",
    "PromptValidationError",
    "PromptVersion",
    "PromptVersionError",
    "RecordSchemaError",
    "SCHEMA_VERSION",
    "SQLiteStorage",
    "StorageError",
    "UNCATEGORIZED",
    "UNDO_TIMEOUT_MS",
    "UndoBufferEmptyError",
    "UndoEntry",
    "ViewState",
    "build_export_document",
    "build_prompt_library",
    "build_storage",
    "export_library",
    "filter_prompts",
    "import_library",
    "import_requires_confirmation",
    "load_import_document",
    "manual_ordering_enabled",
    "migrate_prompt_record",
    "plan_import",
    "resolve_theme",
]
