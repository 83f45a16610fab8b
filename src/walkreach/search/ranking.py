"""
Filter + rank steps of the search pipeline.

Pure functions: given the resolved origin, the reachable region and the catalogue,
keep the facilities inside the region and order them by straight-line distance.
"""

from __future__ import annotations

from collections.abc import Iterable

from walkreach.core.geo import haversine_m, point_in_polygon
from walkreach.domain.models import Coordinate, Facility, Polygon, RankedFacility


def filter_enclosed(region: Polygon, facilities: Iterable[Facility]) -> list[Facility]:
    """Return the facilities whose coordinate lies inside `region`, in input order."""
    return [f for f in facilities if point_in_polygon(f.coordinate, region.ring)]


def rank_by_distance(origin: Coordinate, facilities: Iterable[Facility]) -> list[RankedFacility]:
    """Attach great-circle distances and sort ascending.

    `sorted` is stable, so equal distances keep catalogue order.
    """
    ranked = [RankedFacility(facility=f, distance_m=haversine_m(origin, f.coordinate)) for f in facilities]
    return sorted(ranked, key=lambda r: r.distance_m)


def rank_reachable(origin: Coordinate, region: Polygon, facilities: Iterable[Facility]) -> list[RankedFacility]:
    """Filter then rank (steps 3 and 4 of a search run)."""
    return rank_by_distance(origin, filter_enclosed(region, facilities))
