"""
`.env` loading and project-relative paths.

The Mapbox token usually lives in a `.env` next to `pyproject.toml`, and catalogue
paths in config are written relative to that directory. Both are resolved from the
nearest enclosing directory that holds a `pyproject.toml` or a `.env`, so the CLI
and tests behave the same from any subdirectory.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

_ROOT_MARKERS = ("pyproject.toml", ".env")


@lru_cache
def get_project_root() -> Path:
    """Nearest directory at or above the cwd holding a root marker; the cwd otherwise."""
    cwd = Path.cwd().resolve()
    for directory in (cwd, *cwd.parents):
        if any((directory / marker).is_file() for marker in _ROOT_MARKERS):
            return directory
    return cwd


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project `.env` once, without overriding variables already set."""
    env_path = get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return (get_project_root() / p).resolve()
