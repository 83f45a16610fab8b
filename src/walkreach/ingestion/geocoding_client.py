"""
Geocoding client (Mapbox Geocoding v5, `mapbox.places`).

Two entry points over the same endpoint:
- `resolve_address`: one best match for a submitted query (errors propagate)
- `suggest`: up to N autocomplete candidates (errors degrade to an empty list)
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

from walkreach.domain.errors import GEOCODING_SERVICE, InvalidInput, NotFound, ServiceError
from walkreach.domain.models import Coordinate, ResolvedAddress, Suggestion
from walkreach.ingestion.mapbox import MapboxClient

logger = logging.getLogger(__name__)

_LEADING_SEPARATOR = re.compile(r"^,\s*")


def split_label(label: str, headline: str) -> tuple[str, str]:
    """Split a place label into (headline, context) for a two-line dropdown row.

    The headline is removed once from the label and a leading comma is stripped:
    ("Main St", "Main St, Springfield, 12345") -> ("Main St", "Springfield, 12345").
    """
    headline = headline or label
    context = _LEADING_SEPARATOR.sub("", label.replace(headline, "", 1))
    return headline, context


def _parse_feature_coordinate(feature: dict[str, Any]) -> Coordinate:
    center = feature.get("center")
    if center is None:
        center = (feature.get("geometry") or {}).get("coordinates")
    return Coordinate.from_lon_lat(center)


class GeocodingClient(MapboxClient):
    """Resolves free text to coordinates and produces autocomplete suggestions."""

    service_name = GEOCODING_SERVICE

    def _path(self, query: str) -> str:
        return f"/geocoding/v5/mapbox.places/{quote(query, safe='')}.json"

    def _types(self) -> str:
        return ",".join(self._settings.geocoding.types)

    async def resolve_address(self, query: str) -> ResolvedAddress:
        """Return the single best match for `query`.

        Raises:
            InvalidInput: If `query` is blank.
            NotFound: If the service returned zero matches.
            ServiceError: On non-2xx status or a malformed payload.
            NetworkError: If the request did not complete.
        """
        query = query.strip()
        if not query:
            raise InvalidInput(query)

        payload = await self._get_json(
            self._path(query),
            params={"limit": 1, "types": self._types()},
        )
        features = payload.get("features") or []
        if not features:
            raise NotFound(query)

        try:
            feature = features[0]
            coordinate = _parse_feature_coordinate(feature)
            label = str(feature.get("place_name") or feature.get("text") or query)
        except (AttributeError, KeyError, TypeError, IndexError, ValueError) as exc:
            raise ServiceError(self.service_name, None) from exc

        logger.info("Resolved address to %.5f,%.5f", coordinate.longitude, coordinate.latitude)
        return ResolvedAddress(coordinate=coordinate, label=label)

    async def suggest(self, query: str, max_results: int | None = None) -> list[Suggestion]:
        """Return up to `max_results` suggestions in upstream ranking order.

        Never raises for upstream problems: autocomplete falls back to no suggestions.
        """
        query = query.strip()
        if not query:
            return []
        limit = int(max_results if max_results is not None else self._settings.geocoding.autocomplete_limit)
        if limit <= 0:
            return []

        try:
            payload = await self._get_json(
                self._path(query),
                params={"autocomplete": "true", "limit": limit, "types": self._types()},
            )
        except Exception:
            logger.warning("Autocomplete lookup failed; returning no suggestions", exc_info=True)
            return []

        out: list[Suggestion] = []
        for feature in payload.get("features") or []:
            if not isinstance(feature, dict):
                continue
            label = feature.get("place_name")
            if not isinstance(label, str) or not label:
                continue
            primary, secondary = split_label(label, str(feature.get("text") or ""))
            out.append(Suggestion(label=label, primary_text=primary, secondary_text=secondary))
        return out[:limit]
