import httpx
import pytest

import walkreach.session as session_module
from walkreach.catalog.loader import CandidateStore
from walkreach.domain.models import Coordinate, Facility
from walkreach.search.orchestrator import SearchPhase
from walkreach.session import SearchSession

STORE = CandidateStore(
    [
        Facility(id="inside", name="Inside School", coordinate=Coordinate(longitude=-122.420, latitude=37.775)),
        Facility(id="outside", name="Outside School", coordinate=Coordinate(longitude=-122.300, latitude=37.900)),
    ]
)


def _mapbox_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.startswith("/geocoding/"):
        features = [
            {
                "text": "Market Street",
                "place_name": "Market Street, San Francisco, California",
                "center": [-122.4194, 37.7749],
            }
        ]
        return httpx.Response(200, json={"features": features})
    if path.startswith("/isochrone/"):
        ring = [[-122.43, 37.77], [-122.41, 37.77], [-122.41, 37.78], [-122.43, 37.78], [-122.43, 37.77]]
        geometry = {"type": "Polygon", "coordinates": [ring]}
        return httpx.Response(200, json={"features": [{"geometry": geometry}]})
    return httpx.Response(404)


async def test_session_search_end_to_end(settings):
    async with SearchSession(settings, store=STORE, transport=httpx.MockTransport(_mapbox_handler)) as session:
        state = await session.submit("Market Street")

    assert state.phase is SearchPhase.DONE
    assert [r.id for r in state.result.ranked] == ["inside"]
    assert state.result.ranked[0].formatted_distance.endswith(" m")


async def test_session_reports_upstream_status(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(401))
    async with SearchSession(settings, store=STORE, transport=transport) as session:
        state = await session.submit("Market Street")

    assert state.phase is SearchPhase.FAILED
    assert state.error.status_code == 401
    assert state.message == "Could not look up that address. Please check your input and try again."


async def test_selecting_a_suggestion_starts_a_search(settings):
    fast = settings.model_copy(update={"autocomplete": settings.autocomplete.model_copy(update={"debounce_ms": 0})})
    async with SearchSession(fast, store=STORE, transport=httpx.MockTransport(_mapbox_handler)) as session:
        await session.autocomplete.on_input("Market")
        assert session.autocomplete.visible

        session.autocomplete.move_next()
        session.autocomplete.select_active()
        state = await session.search.in_flight

    assert state.query == "Market Street, San Francisco, California"
    assert state.phase is SearchPhase.DONE


@pytest.mark.parametrize("minutes", [0, -1])
def test_session_rejects_non_positive_minutes_before_opening_a_client(minutes, monkeypatch, settings):
    built = []
    monkeypatch.setattr(session_module, "build_async_client", lambda **kwargs: built.append(kwargs))

    with pytest.raises(ValueError, match="positive integer"):
        SearchSession(settings, store=STORE, minutes=minutes)

    assert built == []


async def test_session_falls_back_to_configured_budget(settings):
    async with SearchSession(settings, store=STORE, transport=httpx.MockTransport(_mapbox_handler)) as session:
        assert session.search.state.phase is SearchPhase.IDLE
        state = await session.submit("Market Street")

    assert state.result.minutes == settings.isochrone.minutes
    assert state.result.mode is settings.isochrone.mode
