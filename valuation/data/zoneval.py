"""Zoneval API client for regional price statistics by zipcode (CEP)."""

import logging

import httpx
from pydantic import ValidationError

from valuation.config import settings
from valuation.engine.market import normalize_zipcode
from valuation.models.market import RegionalStatsSet
from valuation.models.provider import (
    Ok,
    ProviderError,
    ProviderErrorKind,
    ProviderResult,
    error_kind_for_status,
)

logger = logging.getLogger(__name__)

ZONEVAL_BASE_URL = "https://api.zoneval.com"


class ZonevalClient:
    def __init__(
        self,
        api_key: str | None = None,
        api_secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.zoneval_api_key
        self.api_secret = api_secret if api_secret is not None else settings.zoneval_api_secret
        self.headers = {"x-api-key": self.api_key, "x-api-secret": self.api_secret}
        self.transport = transport
        if not self.is_available():
            logger.warning("Zoneval API credentials not configured, market calibration disabled")

    def is_available(self) -> bool:
        return bool(self.api_key and self.api_secret)

    async def _get(self, endpoint: str) -> dict:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self.transport) as client:
            resp = await client.get(f"{ZONEVAL_BASE_URL}{endpoint}", headers=self.headers)
            resp.raise_for_status()
            return resp.json()

    async def fetch_stats(self, zipcode: str) -> ProviderResult[RegionalStatsSet]:
        """Fetch zipcode/neighbourhood/city/state stats for a CEP."""
        if not self.is_available():
            return ProviderError(ProviderErrorKind.NOT_CONFIGURED, "Zoneval API credentials not configured")

        cep = normalize_zipcode(zipcode)
        if cep is None:
            return ProviderError(ProviderErrorKind.INVALID_INPUT, f"invalid CEP format: {zipcode!r}")

        try:
            data = await self._get(f"/zipcodes/{cep}/stats")
        except httpx.HTTPStatusError as e:
            kind = error_kind_for_status(e.response.status_code)
            logger.warning("Zoneval lookup failed for %s: %s", cep, kind.value)
            return ProviderError(kind, f"HTTP {e.response.status_code}")
        except httpx.RequestError as e:
            logger.warning("Zoneval request error for %s: %s", cep, e)
            return ProviderError(ProviderErrorKind.NETWORK, str(e))
        except ValueError as e:
            return ProviderError(ProviderErrorKind.MALFORMED, f"invalid JSON: {e}")

        try:
            return Ok(RegionalStatsSet.model_validate(data))
        except ValidationError as e:
            logger.warning("Failed to parse Zoneval response for %s: %s", cep, e)
            return ProviderError(ProviderErrorKind.MALFORMED, "unexpected response shape")
