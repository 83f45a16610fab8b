"""
Search session wiring.

One `SearchSession` per user/tab: a shared HTTP client, the two Mapbox clients,
the catalogue, one orchestrator and one autocomplete controller. Choosing a
suggestion starts a search for its label. Nothing here is process-wide.
"""

from __future__ import annotations

import logging

import httpx

from walkreach.catalog.loader import CandidateStore
from walkreach.config.settings import Settings, get_settings
from walkreach.core.http import build_async_client
from walkreach.domain.models import TravelMode
from walkreach.ingestion.geocoding_client import GeocodingClient
from walkreach.ingestion.isochrone_client import IsochroneClient
from walkreach.search.autocomplete import AutocompleteController
from walkreach.search.orchestrator import SearchOrchestrator, SearchState

logger = logging.getLogger(__name__)


class SearchSession:
    """Owns every per-session component; use as an async context manager."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: CandidateStore | None = None,
        mode: TravelMode | None = None,
        minutes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        mode = TravelMode(mode if mode is not None else self.settings.isochrone.mode)
        minutes = minutes if minutes is not None else self.settings.isochrone.minutes
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise ValueError(f"minutes must be a positive integer, got {minutes!r}")
        self.store = store if store is not None else CandidateStore.from_settings(self.settings)

        self.http = build_async_client(
            timeout_seconds=self.settings.app.http_timeout_seconds,
            transport=transport,
        )
        self.geocoder = GeocodingClient(self.settings, self.http)
        self.isochrones = IsochroneClient(self.settings, self.http)
        self.search = SearchOrchestrator(self.geocoder, self.isochrones, self.store, mode=mode, minutes=minutes)
        self.autocomplete = AutocompleteController(
            self.geocoder,
            min_chars=self.settings.autocomplete.min_chars,
            debounce_seconds=self.settings.autocomplete.debounce_ms / 1000,
            max_results=self.settings.geocoding.autocomplete_limit,
            on_select=self.search.start,
        )
        logger.debug("Session ready with %d facilities", len(self.store))

    async def submit(self, query: str) -> SearchState | None:
        """Submit the search form: dismiss suggestions, then run the search."""
        self.autocomplete.dismiss()
        return await self.search.submit(query)

    async def aclose(self) -> None:
        self.autocomplete.close()
        self.search.reset()
        await self.http.aclose()

    async def __aenter__(self) -> "SearchSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
