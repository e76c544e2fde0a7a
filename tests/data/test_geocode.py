"""Tests for reverse geocoding providers and the zipcode resolver."""

from unittest.mock import AsyncMock, MagicMock

import httpx

from valuation.data.geocode import GeoResolver, GoogleGeocoder, NominatimGeocoder
from valuation.models.property import Coordinates, GeocodeResult
from valuation.models.provider import Ok, ProviderError, ProviderErrorKind

POINT = Coordinates(-23.5614, -46.6559)

NOMINATIM_RESPONSE = {
    "display_name": "Avenida Paulista, Bela Vista, São Paulo",
    "address": {
        "road": "Avenida Paulista",
        "suburb": "Bela Vista",
        "city": "São Paulo",
        "state": "São Paulo",
        "postcode": "01310-100",
    },
}

GOOGLE_RESPONSE = {
    "status": "OK",
    "results": [{
        "formatted_address": "Av. Paulista, 1000 - Bela Vista, São Paulo - SP, 01310-100",
        "address_components": [
            {"long_name": "Bela Vista", "short_name": "Bela Vista", "types": ["sublocality", "political"]},
            {"long_name": "São Paulo", "short_name": "São Paulo", "types": ["locality", "political"]},
            {"long_name": "São Paulo", "short_name": "SP", "types": ["administrative_area_level_1"]},
            {"long_name": "01310-100", "short_name": "01310-100", "types": ["postal_code"]},
        ],
    }],
}


def _transport(payload, status_code: int = 200, seen: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


def _provider(name: str, result=None, available: bool = True, side_effect=None) -> MagicMock:
    provider = MagicMock()
    provider.name = name
    provider.is_available.return_value = available
    provider.reverse_geocode = AsyncMock(return_value=result, side_effect=side_effect)
    return provider


class TestNominatim:
    async def test_parses_address(self):
        seen = []
        geocoder = NominatimGeocoder(transport=_transport(NOMINATIM_RESPONSE, seen=seen))
        result = await geocoder.reverse_geocode(POINT)

        assert isinstance(result, Ok)
        assert result.value.zipcode == "01310100"
        assert result.value.neighbourhood == "Bela Vista"
        assert result.value.city == "São Paulo"
        assert result.value.source == "nominatim"
        assert seen[0].headers["User-Agent"] == "ImovelValuationAPI/1.0"
        assert seen[0].url.params["zoom"] == "18"

    async def test_missing_postcode(self):
        payload = {"address": {"city": "São Paulo"}}
        result = await NominatimGeocoder(transport=_transport(payload)).reverse_geocode(POINT)
        assert isinstance(result, ProviderError)
        assert result.kind == ProviderErrorKind.NOT_FOUND

    async def test_http_error(self):
        result = await NominatimGeocoder(transport=_transport({}, status_code=429)).reverse_geocode(POINT)
        assert result.kind == ProviderErrorKind.RATE_LIMITED


class TestGoogle:
    def test_unavailable_without_key(self):
        assert not GoogleGeocoder(api_key="").is_available()

    async def test_not_configured(self):
        result = await GoogleGeocoder(api_key="").reverse_geocode(POINT)
        assert result.kind == ProviderErrorKind.NOT_CONFIGURED

    async def test_parses_components(self):
        geocoder = GoogleGeocoder(api_key="test-key", transport=_transport(GOOGLE_RESPONSE))
        result = await geocoder.reverse_geocode(POINT)

        assert result.value.zipcode == "01310100"
        assert result.value.neighbourhood == "Bela Vista"
        assert result.value.state == "SP"
        assert result.value.source == "google"

    async def test_denied_status(self):
        payload = {"status": "REQUEST_DENIED", "results": []}
        result = await GoogleGeocoder(api_key="bad", transport=_transport(payload)).reverse_geocode(POINT)
        assert result.kind == ProviderErrorKind.UNAUTHORIZED


class TestGeoResolver:
    async def test_first_success_wins(self):
        first = _provider("nominatim", Ok(GeocodeResult(zipcode="01310-100", source="nominatim")))
        second = _provider("google", Ok(GeocodeResult(zipcode="22021001", source="google")))

        result = await GeoResolver([first, second]).resolve(POINT)

        assert result.zipcode == "01310100"
        assert result.source == "nominatim"
        second.reverse_geocode.assert_not_called()

    async def test_falls_through_on_error(self):
        first = _provider("nominatim", ProviderError(ProviderErrorKind.NETWORK, "timeout"))
        second = _provider("google", Ok(GeocodeResult(zipcode="22021001", source="google")))

        result = await GeoResolver([first, second]).resolve(POINT)
        assert result.zipcode == "22021001"
        assert result.source == "google"

    async def test_falls_through_on_exception(self):
        first = _provider("nominatim", side_effect=RuntimeError("boom"))
        second = _provider("google", Ok(GeocodeResult(zipcode="22021001", source="google")))

        result = await GeoResolver([first, second]).resolve(POINT)
        assert result.zipcode == "22021001"

    async def test_skips_unconfigured(self):
        first = _provider("nominatim", ProviderError(ProviderErrorKind.NOT_FOUND))
        second = _provider("google", available=False)

        assert await GeoResolver([first, second]).resolve(POINT) is None
        second.reverse_geocode.assert_not_called()

    async def test_empty_zipcode_falls_through(self):
        first = _provider("nominatim", Ok(GeocodeResult(zipcode="--", source="nominatim")))
        assert await GeoResolver([first]).resolve(POINT) is None
