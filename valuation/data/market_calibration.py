"""Regional market calibration: cached stats lookup plus estimate evaluation."""

import logging

from valuation.data.base import MarketStatsProvider
from valuation.data.market_cache import MarketCalibrationCache
from valuation.engine.market import build_market_validation, normalize_zipcode
from valuation.models.market import MarketValidation, RegionalStatsSet
from valuation.models.provider import ProviderError

logger = logging.getLogger(__name__)


class MarketCalibrationService:
    def __init__(self, provider: MarketStatsProvider, cache: MarketCalibrationCache):
        self.provider = provider
        self.cache = cache

    def is_available(self) -> bool:
        return self.provider.is_available()

    async def get_regional_stats(self, zipcode: str | None) -> RegionalStatsSet | None:
        """Cached stats when fresh, otherwise one provider call with write-through.

        Returns None for invalid zipcodes and provider failures.
        """
        cep = normalize_zipcode(zipcode)
        if cep is None:
            logger.warning("Invalid zipcode %r, skipping market calibration", zipcode)
            return None

        cached = await self.cache.get(cep)
        if cached is not None:
            logger.info("Using cached market stats for %s", cep)
            return cached

        if not self.provider.is_available():
            logger.info("Market data provider not configured, skipping calibration")
            return None

        try:
            result = await self.provider.fetch_stats(cep)
        except Exception as e:
            logger.warning("Market data provider raised for %s: %s", cep, e)
            return None

        if isinstance(result, ProviderError):
            logger.warning("Market stats unavailable for %s: %s", cep, result)
            return None

        await self.cache.put(cep, result.value)
        return result.value

    async def get_regional_price_per_area(self, zipcode: str | None) -> float | None:
        stats = await self.get_regional_stats(zipcode)
        if stats is None:
            return None
        median = stats.zipcode.per_area.median
        if median <= 0:
            return None
        logger.info("Regional price per m² for %s: %.2f", zipcode, median)
        return median

    async def evaluate(
        self,
        zipcode: str | None,
        estimated_price: float,
        area_size: float,
        stats: RegionalStatsSet | None = None,
    ) -> MarketValidation | None:
        """Evaluate an estimate against the regional benchmark.

        ``stats`` skips the lookup when the caller already holds them.
        """
        if stats is None:
            stats = await self.get_regional_stats(zipcode)
        if stats is None:
            return None

        validation = build_market_validation(stats, estimated_price, area_size)
        if validation is None:
            logger.info("Market deviation undefined for %s (area=%s)", zipcode, area_size)
            return None

        logger.info(
            "Market validation for %s: %s (%.2f%%, confidence %d)",
            zipcode,
            validation.market_reality.value,
            validation.market_deviation_percent,
            validation.confidence,
        )
        return validation
