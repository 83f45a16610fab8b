"""
Search orchestrator: the state machine behind one address search.

A run walks through these phases, strictly in order:

    idle -> geocoding -> fetching_region -> filtering -> done
                 \\              \\              \\
                  +--------------+--------------+--> failed

Every transition is published as an immutable `SearchState` to subscribed
listeners (renderers, the CLI). Each run captures a generation number when it
starts; a newer `submit`/`start`/`reset` bumps the generation, and a run that
finds itself superseded after an await drops its outcome instead of publishing
it. The last submission always wins.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from walkreach.catalog.loader import CandidateStore
from walkreach.domain.errors import InvalidInput, SearchError
from walkreach.domain.models import Coordinate, Polygon, RankedFacility, ResolvedAddress, SearchResult, TravelMode
from walkreach.search.messages import user_message
from walkreach.search.ranking import rank_reachable

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    async def resolve_address(self, query: str) -> ResolvedAddress: ...


class RegionProvider(Protocol):
    async def fetch_reachable_region(self, origin: Coordinate, mode: TravelMode, minutes: int) -> Polygon: ...


class SearchPhase(str, Enum):
    IDLE = "idle"
    GEOCODING = "geocoding"
    FETCHING_REGION = "fetching_region"
    FILTERING = "filtering"
    DONE = "done"
    FAILED = "failed"


_BUSY_PHASES = {SearchPhase.GEOCODING, SearchPhase.FETCHING_REGION, SearchPhase.FILTERING}


@dataclass(frozen=True)
class SearchState:
    """Snapshot of the orchestrator, handed to listeners on every transition."""

    phase: SearchPhase = SearchPhase.IDLE
    query: str | None = None
    result: SearchResult | None = None
    error: BaseException | None = None
    generation: int = 0

    @property
    def loading(self) -> bool:
        return self.phase in _BUSY_PHASES

    @property
    def message(self) -> str | None:
        """User-facing error message for failed runs."""
        if self.error is None:
            return None
        return user_message(self.error)


StateListener = Callable[[SearchState], None]


class SearchOrchestrator:
    """Drives geocode -> isochrone -> filter -> rank for one session."""

    def __init__(
        self,
        geocoder: Geocoder,
        regions: RegionProvider,
        store: CandidateStore,
        *,
        mode: TravelMode = TravelMode.WALKING,
        minutes: int = 10,
    ):
        if minutes <= 0:
            raise ValueError("minutes must be > 0")
        self._geocoder = geocoder
        self._regions = regions
        self._store = store
        self._mode = TravelMode(mode)
        self._minutes = int(minutes)
        self._generation = 0
        self._state = SearchState()
        self._listeners: list[StateListener] = []
        self._task: asyncio.Task[SearchState | None] | None = None
        self.last_query: str | None = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def in_flight(self) -> asyncio.Task[SearchState | None] | None:
        """Task created by the latest `start()`, if any."""
        return self._task

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register `listener`; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: SearchState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Search state listener failed")

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _advance(self, generation: int, phase: SearchPhase, query: str) -> bool:
        """Publish `phase` for run `generation`; False if the run was superseded."""
        if not self._is_current(generation):
            return False
        self._publish(SearchState(phase=phase, query=query, generation=generation))
        return True

    async def submit(self, query: str) -> SearchState | None:
        """Run one search to completion.

        Returns the terminal state (`done` or `failed`), or None when a newer
        submission superseded this run before it finished.
        """
        self._generation += 1
        generation = self._generation
        query = (query or "").strip()

        if not query:
            state = SearchState(phase=SearchPhase.FAILED, query=query, error=InvalidInput(query), generation=generation)
            self._publish(state)
            return state

        self.last_query = query
        logger.info("Search #%d started", generation)
        try:
            self._advance(generation, SearchPhase.GEOCODING, query)
            resolved = await self._geocoder.resolve_address(query)

            if not self._advance(generation, SearchPhase.FETCHING_REGION, query):
                return None
            region = await self._regions.fetch_reachable_region(resolved.coordinate, self._mode, self._minutes)

            if not self._advance(generation, SearchPhase.FILTERING, query):
                return None
            ranked = rank_reachable(resolved.coordinate, region, self._store.all_facilities())
            result = SearchResult(
                resolved_address=resolved,
                region=region,
                ranked=tuple(ranked),
                mode=self._mode,
                minutes=self._minutes,
            )
        except SearchError as exc:
            return self._fail(generation, query, exc)
        except Exception as exc:
            if self._is_current(generation):
                logger.exception("Search #%d failed unexpectedly", generation)
            return self._fail(generation, query, exc)

        if not self._is_current(generation):
            return None
        logger.info("Search #%d done: %d facilities reachable", generation, len(result.ranked))
        state = SearchState(phase=SearchPhase.DONE, query=query, result=result, generation=generation)
        self._publish(state)
        return state

    def _fail(self, generation: int, query: str, exc: BaseException) -> SearchState | None:
        if not self._is_current(generation):
            logger.debug("Dropping failure of superseded search #%d", generation)
            return None
        logger.info("Search #%d failed: %s", generation, type(exc).__name__)
        state = SearchState(phase=SearchPhase.FAILED, query=query, error=exc, generation=generation)
        self._publish(state)
        return state

    def start(self, query: str) -> asyncio.Task[SearchState | None]:
        """Schedule `submit(query)` on the running loop, cancelling the previous run's task."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(self.submit(query))
        return self._task

    def reset(self) -> None:
        """Return to idle; any in-flight run is superseded."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._publish(SearchState(generation=self._generation))

    def select(self, facility_id: str) -> RankedFacility:
        """Resolve a renderer selection event to the ranked facility it refers to."""
        result = self._state.result
        if result is None:
            raise KeyError(facility_id)
        return result.get(facility_id)
