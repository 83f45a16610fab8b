# src/walkreach/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/walkreach/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `WALKREACH_CONFIG_PATH` (replaces the packaged defaults)
- environment variables (e.g., `MAPBOX_ACCESS_TOKEN`, `WALKREACH_LOG_LEVEL`)

Design rule:
- Tuning knobs (walk budget, debounce, result caps) live in YAML, not in search logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from walkreach.core.env import load_dotenv_if_present
from walkreach.domain.models import TravelMode


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `walkreach.config`."""
    text = resources.files("walkreach.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "WalkReach"
    http_timeout_seconds: float = Field(15, gt=0)
    log_level: str = "INFO"


class MapboxSettings(BaseModel):
    base_url: str = "https://api.mapbox.com"
    access_token: str | None = None


class GeocodingSettings(BaseModel):
    types: list[str] = Field(default_factory=lambda: ["address", "place", "postcode"])
    autocomplete_limit: int = Field(5, ge=1, le=10)


class IsochroneSettings(BaseModel):
    mode: TravelMode = TravelMode.WALKING
    minutes: int = Field(10, ge=1, le=60)
    denoise: float = Field(1.0, ge=0, le=1)


class AutocompleteSettings(BaseModel):
    min_chars: int = Field(3, ge=1)
    debounce_ms: int = Field(300, ge=0)


class CatalogSettings(BaseModel):
    # None means "use the catalogue bundled with the package".
    path: str | None = None


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    mapbox: MapboxSettings = Field(default_factory=MapboxSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    isochrone: IsochroneSettings = Field(default_factory=IsochroneSettings)
    autocomplete: AutocompleteSettings = Field(default_factory=AutocompleteSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small to avoid exposing unsafe overrides.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("WALKREACH_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    catalog_path = os.getenv("WALKREACH_CATALOG_PATH")
    if catalog_path:
        data.setdefault("catalog", {})["path"] = catalog_path

    token = os.getenv("MAPBOX_ACCESS_TOKEN")
    if token:
        data.setdefault("mapbox", {})["access_token"] = token

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("WALKREACH_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
