"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- geocoding/isochrone client outputs (`ResolvedAddress`, `Suggestion`, `Polygon`)
- catalogue entities (`Facility`)
- search output handed to rendering collaborators (`SearchResult`)

Keeping these models in one place helps:
- validation (reject bad coordinates and degenerate regions early),
- typed refactors,
- consistent JSON output across CLI and renderers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from walkreach.core.geo import bounding_box, format_distance


class TravelMode(str, Enum):
    """Isochrone travel profiles (values match the Mapbox profile names)."""

    WALKING = "walking"
    CYCLING = "cycling"
    DRIVING = "driving"


class Coordinate(BaseModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)

    @classmethod
    def from_lon_lat(cls, pair: Any) -> "Coordinate":
        """Build from a GeoJSON-style `[lon, lat]` pair."""
        lon, lat = pair[0], pair[1]
        return cls(longitude=float(lon), latitude=float(lat))

    def as_lon_lat(self) -> list[float]:
        return [self.longitude, self.latitude]


class ResolvedAddress(BaseModel):
    """The single best geocoder match for a free-text query."""

    model_config = ConfigDict(frozen=True)

    coordinate: Coordinate
    label: str


class Suggestion(BaseModel):
    """One autocomplete row: full label plus a headline/context split for dropdowns."""

    model_config = ConfigDict(frozen=True)

    label: str
    primary_text: str
    secondary_text: str = ""


class Polygon(BaseModel):
    """A closed ring of coordinates (the closing vertex may or may not be repeated)."""

    model_config = ConfigDict(frozen=True)

    ring: tuple[Coordinate, ...]

    @field_validator("ring")
    @classmethod
    def _require_three_distinct(cls, ring: tuple[Coordinate, ...]) -> tuple[Coordinate, ...]:
        distinct = {(c.longitude, c.latitude) for c in ring}
        if len(distinct) < 3:
            raise ValueError(f"polygon ring needs at least 3 distinct vertices, got {len(distinct)}")
        return ring

    @classmethod
    def from_lon_lat(cls, pairs: Any) -> "Polygon":
        """Build from a GeoJSON linear ring (`[[lon, lat], ...]`)."""
        return cls(ring=tuple(Coordinate.from_lon_lat(p) for p in pairs))

    def as_lon_lat(self) -> list[list[float]]:
        """Return a GeoJSON linear ring, closed (first point repeated at the end)."""
        coords = [c.as_lon_lat() for c in self.ring]
        if coords[0] != coords[-1]:
            coords.append(coords[0])
        return coords


class Facility(BaseModel):
    """A static catalogue entry (school, library, clinic, ...)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    coordinate: Coordinate
    address: str | None = None
    website: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_coordinates(cls, data: Any) -> Any:
        # Accept the flat `{"lat": .., "lng": ..}` layout used by exported datasets.
        if not isinstance(data, dict) or "coordinate" in data:
            return data
        lon = data.get("lng", data.get("lon"))
        lat = data.get("lat")
        if lon is None or lat is None:
            return data
        out = {k: v for k, v in data.items() if k not in {"lat", "lng", "lon"}}
        out["coordinate"] = {"longitude": lon, "latitude": lat}
        return out


class RankedFacility(BaseModel):
    """A facility enclosed by the search region, with its distance from the origin."""

    model_config = ConfigDict(frozen=True)

    facility: Facility
    distance_m: float = Field(..., ge=0)

    @property
    def id(self) -> str:
        return self.facility.id

    @property
    def name(self) -> str:
        return self.facility.name

    @property
    def coordinate(self) -> Coordinate:
        return self.facility.coordinate

    @property
    def formatted_distance(self) -> str:
        return format_distance(self.distance_m)


class SearchResult(BaseModel):
    """Outcome of one successful search run; replaced wholesale by the next run."""

    model_config = ConfigDict(frozen=True)

    resolved_address: ResolvedAddress
    region: Polygon
    ranked: tuple[RankedFacility, ...] = ()
    mode: TravelMode = TravelMode.WALKING
    minutes: int = Field(10, ge=1)

    @property
    def is_empty(self) -> bool:
        return not self.ranked

    def get(self, facility_id: str) -> RankedFacility:
        """Look up a ranked facility by its stable id (raises KeyError if absent)."""
        for item in self.ranked:
            if item.id == facility_id:
                return item
        raise KeyError(facility_id)

    def to_feature_collection(self) -> dict[str, Any]:
        """Export as a GeoJSON FeatureCollection for map renderers.

        Features: the origin point, the reachable region, then one point per
        ranked facility (in rank order, `rank` starting at 1).
        """
        origin = self.resolved_address
        features: list[dict[str, Any]] = [
            {
                "type": "Feature",
                "id": "origin",
                "geometry": {"type": "Point", "coordinates": origin.coordinate.as_lon_lat()},
                "properties": {"kind": "origin", "label": origin.label},
            },
            {
                "type": "Feature",
                "id": "region",
                "geometry": {"type": "Polygon", "coordinates": [self.region.as_lon_lat()]},
                "properties": {"kind": "region", "mode": self.mode.value, "minutes": self.minutes},
            },
        ]
        for rank, item in enumerate(self.ranked, start=1):
            f = item.facility
            features.append(
                {
                    "type": "Feature",
                    "id": f.id,
                    "geometry": {"type": "Point", "coordinates": f.coordinate.as_lon_lat()},
                    "properties": {
                        "kind": "facility",
                        "rank": rank,
                        "name": f.name,
                        "address": f.address,
                        "website": f.website,
                        "distance_m": round(item.distance_m, 1),
                        "distance": item.formatted_distance,
                    },
                }
            )
        return {
            "type": "FeatureCollection",
            "bbox": list(bounding_box(self.region.ring)),
            "features": features,
        }
