import httpx
import pytest

from bagyo.ingestors import location as location_module
from bagyo.ingestors.location import DEFAULT_LOCATION, LocationIngestor


def make_ingestor(handler, latitude=10.3157, longitude=123.8854):
    return LocationIngestor(
        latitude=latitude,
        longitude=longitude,
        base_url="http://test-geo",
        api_key="test",
        timeout=1,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture(autouse=True)
def philippine_settings(monkeypatch):
    monkeypatch.setattr(location_module.settings, "device_latitude", None)
    monkeypatch.setattr(location_module.settings, "device_longitude", None)
    monkeypatch.setattr(location_module.settings, "country_label", "Philippines")


@pytest.mark.anyio
async def test_no_coordinates_uses_manila():
    def handler(request):
        raise AssertionError("geocoder should not be called")

    ingestor = LocationIngestor(transport=httpx.MockTransport(handler))

    assert await ingestor.fetch_location() == DEFAULT_LOCATION


@pytest.mark.anyio
async def test_reverse_geocode_labels_location():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["params"] = dict(request.url.params)
        return httpx.Response(
            200, json=[{"name": "Cebu City", "state": "Central Visayas", "country": "PH"}]
        )

    location = await make_ingestor(handler).fetch_location()

    assert captured["path"] == "/reverse"
    assert captured["params"]["appid"] == "test"
    assert location.latitude == 10.3157
    assert location.longitude == 123.8854
    assert location.label == "Cebu City, Philippines"
    assert location.city == "Cebu City"
    assert location.province == "Central Visayas"


@pytest.mark.anyio
async def test_geocode_failure_keeps_coordinates(caplog):
    caplog.set_level("ERROR", logger="bagyo.ingestors.location")
    location = await make_ingestor(
        lambda request: httpx.Response(503, text="unavailable")
    ).fetch_location()

    assert location.label == "Unknown Location"
    assert (location.latitude, location.longitude) == (10.3157, 123.8854)
    assert "Reverse geocoding failed" in caplog.text


@pytest.mark.anyio
async def test_empty_geocode_result_is_unknown():
    location = await make_ingestor(lambda request: httpx.Response(200, json=[])).fetch_location()

    assert location.label == "Unknown Location"


@pytest.mark.anyio
async def test_update_position_moves_the_lookup():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["params"] = dict(request.url.params)
        return httpx.Response(200, json=[{"name": "Davao City"}])

    ingestor = make_ingestor(handler, latitude=None, longitude=None)
    ingestor.update_position(7.0731, 125.6128)
    location = await ingestor.fetch_location()

    assert captured["params"]["lat"] == "7.0731"
    assert location.label == "Davao City, Philippines"
    assert location.province == "Philippines"
