import asyncio

import httpx
import pytest

from app.core.errors import GeocodingFailure
from app.services.geocoding.geocoder import NominatimGeocoder, best_result, parse_address

ADDRESS = "456 Nguyễn Thị Thập, Phường Tân Phú, Quận 7, TP. Hồ Chí Minh"


def _geocoder(handler, sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return NominatimGeocoder(
        base_url="http://nominatim.local/search",
        user_agent="test-agent",
        rate_limit_seconds=1.1,
        transport=httpx.MockTransport(handler),
        sleep=fake_sleep,
    )


def test_parse_address():
    parts = parse_address(ADDRESS)

    assert parts.house_number == "456"
    assert parts.street == "Nguyễn Thị Thập"
    assert parts.ward == "Phường Tân Phú"
    assert parts.district == "Quận 7"
    assert parts.city == "Ho Chi Minh City"
    assert parse_address("1 Tràng Tiền, Hoàn Kiếm, Hà Nội").city == "Hanoi"


def test_best_result_prefers_house_over_road():
    parts = parse_address(ADDRESS)
    road = {"lat": "1", "lon": "1", "type": "road", "importance": 0.9}
    house = {"lat": "2", "lon": "2", "type": "house", "importance": 0.1, "address": {"house_number": "456"}}

    assert best_result([road, house], parts) is house


def test_structured_hit_returns_coordinates_and_waits_rate_limit():
    sleeps, seen = [], []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[{"lat": "10.73", "lon": "106.70", "type": "house", "importance": 0.3}])

    coords = asyncio.run(_geocoder(handler, sleeps).geocode(ADDRESS))

    assert coords == (10.73, 106.70)
    assert len(seen) == 1
    assert seen[0].headers["User-Agent"] == "test-agent"
    assert seen[0].url.params["street"] == "456 Nguyễn Thị Thập"
    assert sleeps == [1.1]


def test_falls_through_strategies_and_returns_none_when_nothing_found():
    sleeps, seen = [], []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    assert asyncio.run(_geocoder(handler, sleeps).geocode(ADDRESS)) is None
    assert len(seen) == 3
    assert "viewbox" in seen[1].url.params


def test_every_strategy_failing_raises():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(GeocodingFailure):
        asyncio.run(_geocoder(handler, []).geocode(ADDRESS))


def test_blank_address_is_not_queried():
    def handler(request):
        raise AssertionError("should not be called")

    assert asyncio.run(_geocoder(handler, []).geocode("  ")) is None


def test_results_without_coordinates_are_skipped():
    sleeps, seen = [], []

    def handler(request):
        seen.append(request)
        if len(seen) == 1:
            return httpx.Response(200, json=[{"type": "house", "importance": 0.9}])
        return httpx.Response(200, json=[{"lat": "10.74", "lon": "106.71", "type": "amenity"}])

    coords = asyncio.run(_geocoder(handler, sleeps).geocode(ADDRESS))

    assert coords == (10.74, 106.71)
    assert len(seen) == 2


def test_non_list_body_is_a_geocoding_failure():
    def handler(request):
        return httpx.Response(200, json={"error": "Unable to geocode"})

    with pytest.raises(GeocodingFailure):
        asyncio.run(_geocoder(handler, []).geocode(ADDRESS))
