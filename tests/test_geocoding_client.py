import httpx
import pytest

from walkreach.domain.errors import InvalidInput, NetworkError, NotFound, ServiceError
from walkreach.ingestion.geocoding_client import GeocodingClient, split_label


FEATURE = {
    "text": "Market Street",
    "place_name": "Market Street, San Francisco, California 94103, United States",
    "center": [-122.4194, 37.7749],
}


def _fake_get_json(payload=None, *, status=None, exc=None, calls=None):
    async def fake(url, *, params=None, headers=None, timeout_seconds=15, client=None):  # noqa: ARG001
        if calls is not None:
            calls.append((url, dict(params or {})))
        if exc is not None:
            raise exc
        if status is not None:
            request = httpx.Request("GET", url)
            response = httpx.Response(status, request=request)
            raise httpx.HTTPStatusError(str(status), request=request, response=response)
        return payload

    return fake


async def test_resolve_address_requests_one_typed_result(monkeypatch, settings):
    calls = []
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": [FEATURE]}, calls=calls))

    resolved = await GeocodingClient(settings).resolve_address("  1 Market St, SF  ")

    assert resolved.label == FEATURE["place_name"]
    assert resolved.coordinate.longitude == -122.4194
    assert resolved.coordinate.latitude == 37.7749

    url, params = calls[0]
    assert url == "https://mapbox.test/geocoding/v5/mapbox.places/1%20Market%20St%2C%20SF.json"
    assert params["limit"] == 1
    assert params["types"] == "address,place,postcode"
    assert params["access_token"] == "test-token"


async def test_resolve_address_zero_matches_is_not_found(monkeypatch, settings):
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": []}))

    with pytest.raises(NotFound):
        await GeocodingClient(settings).resolve_address("nowhere at all")


async def test_resolve_address_http_status_is_service_error(monkeypatch, settings):
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json(status=503))

    with pytest.raises(ServiceError) as info:
        await GeocodingClient(settings).resolve_address("1 Market St")
    assert info.value.status_code == 503
    assert info.value.service == "Geocoding"


async def test_resolve_address_transport_failure_is_network_error(monkeypatch, settings):
    exc = httpx.ConnectError("dns failure", request=httpx.Request("GET", "https://mapbox.test"))
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json(exc=exc))

    with pytest.raises(NetworkError):
        await GeocodingClient(settings).resolve_address("1 Market St")


async def test_resolve_address_timeout_is_network_error(monkeypatch, settings):
    exc = httpx.ReadTimeout("slow", request=httpx.Request("GET", "https://mapbox.test"))
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json(exc=exc))

    with pytest.raises(NetworkError):
        await GeocodingClient(settings).resolve_address("1 Market St")


async def test_resolve_address_malformed_feature_is_service_error(monkeypatch, settings):
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": [{"text": "x"}]}))

    with pytest.raises(ServiceError) as info:
        await GeocodingClient(settings).resolve_address("1 Market St")
    assert info.value.status_code is None


async def test_resolve_address_blank_query_makes_no_request(monkeypatch, settings):
    calls = []
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": []}, calls=calls))

    with pytest.raises(InvalidInput):
        await GeocodingClient(settings).resolve_address("   ")
    assert calls == []


async def test_missing_token_raises_runtime_error(settings):
    no_token = settings.model_copy(update={"mapbox": settings.mapbox.model_copy(update={"access_token": None})})

    with pytest.raises(RuntimeError, match="MAPBOX_ACCESS_TOKEN"):
        await GeocodingClient(no_token).resolve_address("1 Market St")


async def test_suggest_keeps_upstream_order_and_splits_labels(monkeypatch, settings):
    calls = []
    features = [
        FEATURE,
        {"text": "Market Street", "place_name": "Market Street, Oakland, California 94607, United States"},
        {"text": "no label"},
    ]
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": features}, calls=calls))

    suggestions = await GeocodingClient(settings).suggest("Market")

    assert [s.secondary_text for s in suggestions] == [
        "San Francisco, California 94103, United States",
        "Oakland, California 94607, United States",
    ]
    assert all(s.primary_text == "Market Street" for s in suggestions)
    _, params = calls[0]
    assert params["autocomplete"] == "true"
    assert params["limit"] == 5


async def test_suggest_swallows_failures(monkeypatch, settings):
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json(status=500))

    assert await GeocodingClient(settings).suggest("Market") == []


async def test_suggest_respects_max_results(monkeypatch, settings):
    calls = []
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": [FEATURE] * 4}, calls=calls))

    suggestions = await GeocodingClient(settings).suggest("Market", max_results=2)

    assert len(suggestions) == 2
    assert calls[0][1]["limit"] == 2


@pytest.mark.parametrize("max_results", [0, -2])
async def test_suggest_with_no_room_makes_no_request(max_results, monkeypatch, settings):
    calls = []
    monkeypatch.setattr("walkreach.ingestion.mapbox.get_json", _fake_get_json({"features": [FEATURE]}, calls=calls))

    assert await GeocodingClient(settings).suggest("Market", max_results=max_results) == []
    assert calls == []


def test_split_label_without_leading_headline():
    assert split_label("Springfield, USA", "Main St") == ("Main St", "Springfield, USA")
    assert split_label("Springfield", "") == ("Springfield", "")
