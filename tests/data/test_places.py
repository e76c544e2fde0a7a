"""Tests for the Google Places nearby-search client."""

import httpx

from valuation.data.places import GooglePlacesClient
from valuation.models.property import Coordinates
from valuation.models.provider import Ok, ProviderErrorKind
from valuation.models.proximity import LandmarkCategory

POINT = Coordinates(-22.9711, -43.1822)


def _client(payload: dict, seen: list | None = None, status_code: int = 200) -> GooglePlacesClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return GooglePlacesClient(api_key="test-key", language="pt-BR", transport=httpx.MockTransport(handler))


class TestGooglePlacesClient:
    async def test_parses_results(self):
        payload = {
            "status": "OK",
            "results": [
                {
                    "place_id": "abc",
                    "name": "Praia de Copacabana",
                    "geometry": {"location": {"lat": -22.9714, "lng": -43.1823}},
                    "rating": 4.8,
                },
                {"place_id": "broken", "name": "No geometry"},
            ],
        }
        seen = []
        result = await _client(payload, seen).nearby_search(POINT, 1000, LandmarkCategory.BEACH)

        assert isinstance(result, Ok)
        assert len(result.value) == 1
        place = result.value[0]
        assert place.id == "abc"
        assert place.coordinates == Coordinates(-22.9714, -43.1823)
        assert place.rating == 4.8

        params = seen[0].url.params
        assert params["keyword"] == "beach"
        assert params["radius"] == "1000"
        assert params["location"] == "-22.9711,-43.1822"
        assert params["language"] == "pt-BR"

    async def test_zero_results_is_empty(self):
        result = await _client({"status": "ZERO_RESULTS", "results": []}).nearby_search(
            POINT, 1000, LandmarkCategory.PARK
        )
        assert result == Ok([])

    async def test_over_query_limit(self):
        result = await _client({"status": "OVER_QUERY_LIMIT"}).nearby_search(POINT, 1000, LandmarkCategory.PARK)
        assert result.kind == ProviderErrorKind.RATE_LIMITED

    async def test_unknown_status(self):
        result = await _client({"status": "UNKNOWN_ERROR"}).nearby_search(POINT, 1000, LandmarkCategory.PARK)
        assert result.kind == ProviderErrorKind.HTTP_ERROR

    async def test_server_error(self):
        result = await _client({}, status_code=503).nearby_search(POINT, 1000, LandmarkCategory.PARK)
        assert result.kind == ProviderErrorKind.HTTP_ERROR

    async def test_not_configured(self):
        client = GooglePlacesClient(api_key="")
        assert not client.is_available()
        result = await client.nearby_search(POINT, 1000, LandmarkCategory.PARK)
        assert result.kind == ProviderErrorKind.NOT_CONFIGURED
