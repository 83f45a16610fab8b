"""
Shared plumbing for the Mapbox API clients.

Both the geocoding and the isochrone clients:
- authenticate with the same access token (query parameter),
- share one `httpx.AsyncClient` per search session,
- translate httpx failures into the search error taxonomy
  (`ServiceError` for non-2xx or unreadable bodies, `NetworkError` for transport failures).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from walkreach.config.settings import Settings
from walkreach.core.http import get_json
from walkreach.domain.errors import NetworkError, ServiceError

logger = logging.getLogger(__name__)


class MapboxClient:
    """Base class holding settings, the shared HTTP client and the request helper."""

    service_name = "Mapbox"

    def __init__(self, settings: Settings, http: httpx.AsyncClient | None = None):
        self._settings = settings
        self._http = http

    def _require_token(self) -> str:
        token = self._settings.mapbox.access_token
        if not token:
            raise RuntimeError("Mapbox access token is not configured. Set MAPBOX_ACCESS_TOKEN.")
        return token

    def _url(self, path: str) -> str:
        return self._settings.mapbox.base_url.rstrip("/") + path

    async def _get_json(self, path: str, *, params: dict[str, Any]) -> dict[str, Any]:
        """GET a Mapbox endpoint; return the JSON object or raise a `SearchError`."""
        query = {**params, "access_token": self._require_token()}
        try:
            payload = await get_json(
                self._url(path),
                params=query,
                timeout_seconds=self._settings.app.http_timeout_seconds,
                client=self._http,
            )
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("%s request failed: HTTP %s", self.service_name, status)
            raise ServiceError(self.service_name, status) from exc
        except httpx.RequestError as exc:
            # Never log the request URL: it carries the access token.
            logger.warning("%s request did not complete: %s", self.service_name, type(exc).__name__)
            raise NetworkError(self.service_name, type(exc).__name__) from exc
        except ValueError as exc:
            logger.warning("%s returned a non-JSON body", self.service_name)
            raise ServiceError(self.service_name, None) from exc

        if not isinstance(payload, dict):
            raise ServiceError(self.service_name, None)
        return payload
