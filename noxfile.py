"""Quality gates for the prompt library.

Updates:
  v0.3.0 - 2026-10-19 - Fold formatting into lint and run gates as default sessions.
  v0.2.0 - 2026-10-18 - Add the cli package to quality gates and share pytest arguments.
  v0.1.0 - 2026-10-03 - Initial scaffold of lint/typecheck/test sessions.

Tools come from the project `.venv` (`pip install -e .[dev]`); sessions reuse it
instead of building their own environments. `nox` runs every gate, `nox -s fmt`
rewrites files in place.
"""

from __future__ import annotations

import sys
from pathlib import Path

import nox

SOURCES = ("main.py", "cli", "config", "core", "models", "tests")
COVERAGE_FLOOR = 80

nox.options.sessions = ["lint", "typecheck", "tests"]


def _tool(session: nox.Session, name: str) -> str:
    bin_dir = Path(".venv") / ("Scripts" if sys.platform == "win32" else "bin")
    executable = bin_dir / (f"{name}.exe" if sys.platform == "win32" else name)
    if not executable.exists():
        session.error(f"{executable} not found; run `pip install -e .[dev]` inside .venv first.")
    return str(executable)


@nox.session(venv_backend="none")
def fmt(session: nox.Session) -> None:
    """Apply ruff formatting."""
    session.run(_tool(session, "ruff"), "format", *SOURCES, external=True)


@nox.session(venv_backend="none")
def lint(session: nox.Session) -> None:
    """Ruff lint rules plus a formatting check."""
    ruff = _tool(session, "ruff")
    session.run(ruff, "check", *SOURCES, external=True)
    session.run(ruff, "format", "--check", *SOURCES, external=True)


@nox.session(venv_backend="none")
def typecheck(session: nox.Session) -> None:
    session.run(_tool(session, "pyright"), external=True)


@nox.session(venv_backend="none")
def tests(session: nox.Session) -> None:
    """Run the suite in parallel with coverage over the library packages."""
    session.run(
        _tool(session, "pytest"),
        "-n",
        "auto",
        "--cov=core",
        "--cov=models",
        "--cov-report=term-missing",
        f"--cov-fail-under={COVERAGE_FLOOR}",
        *session.posargs,
        external=True,
    )
