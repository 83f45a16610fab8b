"""
Facility catalogue loader.

The catalogue is a JSON array of facilities with coordinates and optional
address/website. By default the sample catalogue bundled with the package is
used; `catalog.path` (or `WALKREACH_CATALOG_PATH`) points at a local file instead.
Entries are validated into typed Pydantic models so the search pipeline can
assume a consistent shape.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from walkreach.config.settings import Settings
from walkreach.core.env import resolve_project_path
from walkreach.domain.models import Facility

logger = logging.getLogger(__name__)

_FACILITIES_ADAPTER = TypeAdapter(list[Facility])


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower()).strip("-")
    return slug or "facility"


def _assign_ids(rows: list[Any]) -> list[Any]:
    """Give entries without an `id` a unique slug of their name."""
    taken = {str(r["id"]) for r in rows if isinstance(r, dict) and r.get("id")}
    out: list[Any] = []
    for r in rows:
        if not isinstance(r, dict) or r.get("id"):
            out.append(r)
            continue
        base = slugify(str(r.get("name") or ""))
        candidate = base
        n = 2
        while candidate in taken:
            candidate = f"{base}-{n}"
            n += 1
        taken.add(candidate)
        out.append({**r, "id": candidate})
    return out


def parse_facilities(payload: Any) -> list[Facility]:
    """Validate a decoded catalogue payload (a JSON array)."""
    if not isinstance(payload, list):
        raise ValueError("Facility catalogue must be a JSON array.")
    facilities = _FACILITIES_ADAPTER.validate_python(_assign_ids(payload))
    seen: set[str] = set()
    for f in facilities:
        if f.id in seen:
            raise ValueError(f"Duplicate facility id {f.id!r} in catalogue.")
        seen.add(f.id)
    return facilities


def load_facilities(path: str | Path) -> list[Facility]:
    """Load and validate a facility catalogue JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    facilities = parse_facilities(payload)
    logger.debug("Loaded %d facilities from %s", len(facilities), resolved)
    return facilities


def load_bundled_facilities() -> list[Facility]:
    """Load the sample catalogue shipped inside `walkreach.data`."""
    text = resources.files("walkreach.data").joinpath("facilities.json").read_text(encoding="utf-8")
    return parse_facilities(json.loads(text))


class CandidateStore:
    """Read-only set of facilities searched by every run of a session.

    Built once; `all_facilities()` always returns the same tuple, so it can be
    shared by concurrent searches without locking.
    """

    def __init__(self, facilities: Iterable[Facility]):
        self._facilities = tuple(facilities)
        self._by_id = {f.id: f for f in self._facilities}

    @classmethod
    def from_settings(cls, settings: Settings) -> "CandidateStore":
        if settings.catalog.path:
            return cls(load_facilities(settings.catalog.path))
        return cls(load_bundled_facilities())

    def all_facilities(self) -> tuple[Facility, ...]:
        return self._facilities

    def get(self, facility_id: str) -> Facility:
        return self._by_id[facility_id]

    def __len__(self) -> int:
        return len(self._facilities)
