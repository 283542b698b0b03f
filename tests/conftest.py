"""Pytest configuration and shared storage doubles.

Updates:
  v0.4.0 - 2026-10-19 - Run slow writes in worker threads and script read failures.
  v0.3.0 - 2026-10-18 - Drop handlers installed by CLI logging setup after each test.
  v0.2.0 - 2026-10-18 - Add scripted-failure and slow storage doubles for rollback tests.
  v0.1.0 - 2026-10-04 - Isolate settings sources from the developer environment.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterator

import pytest

from core.storage import InMemoryStorage, StorageError


class ScriptedStorage(InMemoryStorage):
    """In-memory storage whose writes follow a per-key script of outcomes.

    ``script("promptLibraryPrompts", True, False)`` lets the next prompt write
    succeed and the one after it fail; writes beyond the script succeed.
    Setting ``fail_reads`` makes every read raise.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[str] = []
        self.fail_reads = False
        self._outcomes: dict[str, list[bool]] = {}

    def script(self, key: str, *outcomes: bool) -> None:
        self._outcomes.setdefault(key, []).extend(outcomes)

    def fail_always(self, key: str) -> None:
        self._outcomes[key] = [False] * 1000

    async def _write_text(self, key: str, payload: str) -> None:
        self.writes.append(key)
        queue = self._outcomes.get(key)
        if queue and not queue.pop(0):
            raise StorageError(f"simulated failure writing {key}")
        await super()._write_text(key, payload)

    async def _read_text(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError(f"simulated failure reading {key}")
        return await super()._read_text(key)


class SlowStorage(InMemoryStorage):
    """In-memory storage whose writes block a worker thread for ``delay`` seconds.

    Like the SQLite backend, a write already handed to its thread keeps going
    when the awaiting coroutine is cancelled.
    """

    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay

    async def _write_text(self, key: str, payload: str) -> None:
        await asyncio.to_thread(self._write_blocking, key, payload)

    def _write_blocking(self, key: str, payload: str) -> None:
        time.sleep(self.delay)
        self._values[key] = payload


class FakeClock:
    """Deterministic millisecond clock advancing by ``step`` on every call."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> int:
        self.current += self.step
        return self.current


@pytest.fixture()
def scripted_storage() -> ScriptedStorage:
    return ScriptedStorage()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def slow_storage() -> Callable[[float], SlowStorage]:
    return SlowStorage


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer config files and environment out of settings resolution."""
    monkeypatch.setenv("PROMPT_LIBRARY_ENV_FILE", "")
    for name in (
        "PROMPT_LIBRARY_CONFIG_JSON",
        "PROMPT_LIBRARY_DB_PATH",
        "PROMPT_LIBRARY_MAX_VERSIONS",
        "PROMPT_LIBRARY_UNDO_WINDOW_SECONDS",
        "PROMPT_LIBRARY_STORAGE_TIMEOUT_SECONDS",
        "PROMPT_LIBRARY_THEME_MODE",
        "PROMPT_LIBRARY_STORAGE_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Remove handlers that ``setup_logging`` attaches so they never outlive a test."""
    root = logging.getLogger()
    library_logger = logging.getLogger("prompt_library")
    root_handlers = list(root.handlers)
    root_level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in root_handlers:
            root.removeHandler(handler)
    root.setLevel(root_level)
    library_logger.handlers.clear()
    library_logger.setLevel(logging.NOTSET)
    library_logger.propagate = True
