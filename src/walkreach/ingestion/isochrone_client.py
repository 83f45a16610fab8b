"""
Isochrone client (Mapbox Isochrone v1).

Requests a single contour (one time threshold) as polygons, with denoising on so
the service drops small disconnected slivers, and reduces the answer to the outer
ring of the first polygon feature. Holes and additional features are ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from walkreach.domain.errors import ISOCHRONE_SERVICE, NoRegion, ServiceError
from walkreach.domain.models import Coordinate, Polygon, TravelMode
from walkreach.ingestion.mapbox import MapboxClient

logger = logging.getLogger(__name__)


def _outer_ring(geometry: dict[str, Any]) -> list[Any]:
    """Return the outer ring of a Polygon, or of the first part of a MultiPolygon."""
    kind = geometry.get("type")
    coords = geometry.get("coordinates")
    if kind == "Polygon":
        return coords[0]
    if kind == "MultiPolygon":
        return coords[0][0]
    raise ValueError(f"unsupported isochrone geometry type {kind!r}")


class IsochroneClient(MapboxClient):
    """Fetches the area reachable from an origin within a time budget."""

    service_name = ISOCHRONE_SERVICE

    async def fetch_reachable_region(
        self,
        origin: Coordinate,
        mode: TravelMode = TravelMode.WALKING,
        minutes: int = 10,
    ) -> Polygon:
        """Return the reachability polygon around `origin`.

        Raises:
            ValueError: If `minutes` is not a positive integer.
            NoRegion: If no usable polygon feature came back.
            ServiceError: On non-2xx status or a malformed payload.
            NetworkError: If the request did not complete.
        """
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise ValueError(f"minutes must be a positive integer, got {minutes!r}")
        mode = TravelMode(mode)

        path = f"/isochrone/v1/mapbox/{mode.value}/{origin.longitude},{origin.latitude}"
        payload = await self._get_json(
            path,
            params={
                "contours_minutes": minutes,
                "polygons": "true",
                "denoise": self._settings.isochrone.denoise,
            },
        )

        features = payload.get("features") or []
        if not features:
            raise NoRegion()

        # Unreadable or out-of-range vertices are a malformed answer; a readable
        # ring with fewer than 3 distinct vertices is an empty region.
        try:
            ring = _outer_ring(features[0].get("geometry") or {})
            vertices = tuple(Coordinate.from_lon_lat(pair) for pair in ring)
        except (AttributeError, KeyError, TypeError, IndexError, ValueError) as exc:
            raise ServiceError(self.service_name, None) from exc

        try:
            region = Polygon(ring=vertices)
        except ValidationError as exc:
            raise NoRegion("degenerate polygon") from exc

        logger.info("Isochrone ready: %d-minute %s region with %d vertices", minutes, mode.value, len(region.ring))
        return region
