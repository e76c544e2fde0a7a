"""Google Places nearby-search client for landmark lookups."""

import logging

import httpx

from valuation.config import settings
from valuation.models.property import Coordinates
from valuation.models.provider import (
    Ok,
    ProviderError,
    ProviderErrorKind,
    ProviderResult,
    error_kind_for_status,
)
from valuation.models.proximity import LandmarkCategory, Place

logger = logging.getLogger(__name__)

PLACES_NEARBY_URL = "https://maps.googleapis.com/maps/api/place/nearbysearch/json"

_STATUS_ERRORS = {
    "OVER_QUERY_LIMIT": ProviderErrorKind.RATE_LIMITED,
    "REQUEST_DENIED": ProviderErrorKind.UNAUTHORIZED,
    "INVALID_REQUEST": ProviderErrorKind.INVALID_INPUT,
}


class GooglePlacesClient:
    def __init__(
        self,
        api_key: str | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.language = language or settings.geocoding_language
        self.transport = transport

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def nearby_search(
        self, coordinates: Coordinates, radius_meters: int, category: LandmarkCategory
    ) -> ProviderResult[list[Place]]:
        if not self.api_key:
            return ProviderError(ProviderErrorKind.NOT_CONFIGURED, "Google Places API key not configured")

        params = {
            "location": f"{coordinates.latitude},{coordinates.longitude}",
            "radius": str(radius_meters),
            "keyword": category.value,
            "language": self.language,
            "key": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self.transport) as client:
                resp = await client.get(PLACES_NEARBY_URL, params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            return ProviderError(error_kind_for_status(e.response.status_code), f"HTTP {e.response.status_code}")
        except httpx.RequestError as e:
            return ProviderError(ProviderErrorKind.NETWORK, str(e))
        except ValueError as e:
            return ProviderError(ProviderErrorKind.MALFORMED, f"invalid JSON: {e}")

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return Ok([])
        if status != "OK":
            kind = _STATUS_ERRORS.get(status, ProviderErrorKind.HTTP_ERROR)
            return ProviderError(kind, f"{status}: {data.get('error_message', '')}".strip(": "))

        places: list[Place] = []
        for item in data.get("results", []):
            try:
                location = item["geometry"]["location"]
                places.append(Place(
                    id=item.get("place_id", ""),
                    name=item.get("name", ""),
                    coordinates=Coordinates(float(location["lat"]), float(location["lng"])),
                    rating=item.get("rating"),
                ))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping malformed place result for %s", category.value)
                continue
        return Ok(places)
