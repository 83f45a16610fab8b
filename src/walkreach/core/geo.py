"""
Geospatial helpers.

We keep a tiny geometry layer here so the search pipeline can test isochrone
containment and measure distances without pulling in heavier GIS dependencies.

All functions are pure and accept any object exposing `longitude` / `latitude`
in decimal degrees (the domain `Coordinate` model satisfies this).
"""

from __future__ import annotations

from collections.abc import Sequence
from math import asin, cos, radians, sin, sqrt
from typing import Protocol

EARTH_RADIUS_M = 6_371_000


class LonLat(Protocol):
    @property
    def longitude(self) -> float: ...

    @property
    def latitude(self) -> float: ...


def point_in_polygon(point: LonLat, ring: Sequence[LonLat]) -> bool:
    """Even-odd ray casting test of `point` against a closed ring.

    A ray is cast towards increasing longitude; every edge (wrapping last -> first)
    that straddles the point's latitude and crosses the ray toggles inclusion.
    Vertex order (clockwise or counter-clockwise) does not matter, and a repeated
    closing vertex contributes a zero-length edge that never counts.

    Points lying exactly on an edge may land on either side depending on
    floating-point rounding. This is inherent to ray casting and left as is.
    """
    px = point.longitude
    py = point.latitude
    inside = False

    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i].longitude, ring[i].latitude
        xj, yj = ring[j].longitude, ring[j].latitude
        j = i

        # Horizontal edges cannot straddle the latitude band.
        if yi == yj:
            continue
        if (yi > py) == (yj > py):
            continue
        if px < (xj - xi) * (py - yi) / (yj - yi) + xi:
            inside = not inside

    return inside


def haversine_m(a: LonLat, b: LonLat) -> float:
    """Compute great-circle distance in meters between two points."""
    lat1 = radians(a.latitude)
    lon1 = radians(a.longitude)
    lat2 = radians(b.latitude)
    lon2 = radians(b.longitude)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * asin(min(1.0, sqrt(h)))


def format_distance(meters: float) -> str:
    """Render a distance for display: whole meters below 1 km, else km with one decimal."""
    if meters < 1000:
        # Half-up rounding; distances are never negative.
        return f"{int(meters + 0.5)} m"
    return f"{meters / 1000:.1f} km"


def bounding_box(ring: Sequence[LonLat]) -> tuple[float, float, float, float]:
    """Return `(min_lon, min_lat, max_lon, max_lat)` for a non-empty ring."""
    if not ring:
        raise ValueError("bounding_box() requires at least one point")
    lons = [p.longitude for p in ring]
    lats = [p.latitude for p in ring]
    return min(lons), min(lats), max(lons), max(lats)
