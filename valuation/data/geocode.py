"""Reverse geocoding: resolve a zipcode from coordinates.

Providers are tried in priority order (Nominatim first, free; Google second,
only when an API key is configured). The first non-empty zipcode wins.
"""

import logging
from dataclasses import replace

import httpx

from valuation.config import settings
from valuation.data.base import ZipcodeResolver
from valuation.engine.market import clean_zipcode
from valuation.models.property import Coordinates, GeocodeResult
from valuation.models.provider import (
    Ok,
    ProviderError,
    ProviderErrorKind,
    ProviderResult,
    error_kind_for_status,
)

logger = logging.getLogger(__name__)

NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"


async def _get_json(
    url: str,
    params: dict,
    headers: dict | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict | ProviderError:
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=transport) as client:
            resp = await client.get(url, params=params, headers=headers or {})
            resp.raise_for_status()
            return resp.json()
    except httpx.HTTPStatusError as e:
        return ProviderError(error_kind_for_status(e.response.status_code), str(e))
    except httpx.RequestError as e:
        return ProviderError(ProviderErrorKind.NETWORK, str(e))
    except ValueError as e:
        return ProviderError(ProviderErrorKind.MALFORMED, str(e))


class NominatimGeocoder:
    name = "nominatim"

    def __init__(
        self,
        language: str | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.language = language or settings.geocoding_language
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.transport = transport

    def is_available(self) -> bool:
        return True

    async def reverse_geocode(self, coordinates: Coordinates) -> ProviderResult[GeocodeResult]:
        params = {
            "format": "json",
            "lat": str(coordinates.latitude),
            "lon": str(coordinates.longitude),
            "zoom": "18",
            "addressdetails": "1",
            "accept-language": self.language,
        }
        data = await _get_json(
            f"{NOMINATIM_BASE_URL}/reverse",
            params,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )
        if isinstance(data, ProviderError):
            return data

        address = data.get("address") if isinstance(data, dict) else None
        if not address:
            return ProviderError(ProviderErrorKind.NOT_FOUND, "no address for coordinates")

        zipcode = clean_zipcode(address.get("postcode"))
        if not zipcode:
            return ProviderError(ProviderErrorKind.NOT_FOUND, "address has no postcode")

        return Ok(GeocodeResult(
            zipcode=zipcode,
            source=self.name,
            address=data.get("display_name"),
            neighbourhood=address.get("suburb") or address.get("neighbourhood") or address.get("quarter"),
            city=address.get("city") or address.get("town") or address.get("village"),
            state=address.get("state"),
        ))


def _find_component(components: list[dict], *types: str) -> dict | None:
    for component in components:
        if any(t in component.get("types", []) for t in types):
            return component
    return None


class GoogleGeocoder:
    name = "google"

    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        region: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.language = language or settings.geocoding_language
        self.region = region or settings.geocoding_region
        self.transport = transport

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def reverse_geocode(self, coordinates: Coordinates) -> ProviderResult[GeocodeResult]:
        if not self.api_key:
            return ProviderError(ProviderErrorKind.NOT_CONFIGURED, "Google Maps API key not configured")

        params = {
            "latlng": f"{coordinates.latitude},{coordinates.longitude}",
            "key": self.api_key,
            "language": self.language,
            "region": self.region,
        }
        data = await _get_json(GOOGLE_GEOCODE_URL, params, transport=self.transport)
        if isinstance(data, ProviderError):
            return data

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            if status == "OVER_QUERY_LIMIT":
                return ProviderError(ProviderErrorKind.RATE_LIMITED, status)
            if status == "REQUEST_DENIED":
                return ProviderError(ProviderErrorKind.UNAUTHORIZED, status)
            return ProviderError(ProviderErrorKind.NOT_FOUND, str(status))

        result = results[0]
        components = result.get("address_components", [])
        postal = _find_component(components, "postal_code")
        zipcode = clean_zipcode(postal.get("long_name")) if postal else ""
        if not zipcode:
            return ProviderError(ProviderErrorKind.NOT_FOUND, "no postal_code component")

        neighbourhood = _find_component(components, "sublocality", "sublocality_level_1")
        city = _find_component(components, "locality", "administrative_area_level_2")
        state = _find_component(components, "administrative_area_level_1")

        return Ok(GeocodeResult(
            zipcode=zipcode,
            source=self.name,
            address=result.get("formatted_address"),
            neighbourhood=neighbourhood.get("long_name") if neighbourhood else None,
            city=city.get("long_name") if city else None,
            state=state.get("short_name") if state else None,
        ))


class GeoResolver:
    def __init__(self, providers: list[ZipcodeResolver] | None = None):
        self.providers = providers if providers is not None else [NominatimGeocoder(), GoogleGeocoder()]

    async def resolve(self, coordinates: Coordinates) -> GeocodeResult | None:
        """Return the first provider result carrying a zipcode, or None.

        None means "proceed without calibration", never an error.
        """
        for provider in self.providers:
            if not provider.is_available():
                logger.debug("Geocoder %s not configured, skipping", provider.name)
                continue
            try:
                result = await provider.reverse_geocode(coordinates)
            except Exception as e:
                logger.warning("Geocoder %s raised: %s", provider.name, e)
                continue

            if isinstance(result, ProviderError):
                logger.warning("Geocoder %s failed: %s", provider.name, result)
                continue

            zipcode = clean_zipcode(result.value.zipcode)
            if zipcode:
                logger.info("Resolved zipcode %s via %s", zipcode, provider.name)
                return replace(result.value, zipcode=zipcode)

        logger.info(
            "No zipcode found for %.6f, %.6f through any geocoder",
            coordinates.latitude, coordinates.longitude,
        )
        return None
