"""Tests for the market calibration service."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from valuation.data.market_calibration import MarketCalibrationService
from valuation.models.market import MarketReality
from valuation.models.provider import Ok, ProviderError, ProviderErrorKind


@pytest.fixture
def provider(regional_stats):
    provider = MagicMock()
    provider.is_available.return_value = True
    provider.fetch_stats = AsyncMock(return_value=Ok(regional_stats))
    return provider


@pytest.fixture
def cache():
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.put = AsyncMock()
    return cache


class TestGetRegionalStats:
    async def test_cache_hit_skips_provider(self, provider, cache, regional_stats):
        cache.get.return_value = regional_stats
        service = MarketCalibrationService(provider, cache)

        assert await service.get_regional_stats("01310-100") == regional_stats
        cache.get.assert_awaited_once_with("01310100")
        provider.fetch_stats.assert_not_called()

    async def test_miss_fetches_and_writes_through(self, provider, cache, regional_stats):
        service = MarketCalibrationService(provider, cache)

        assert await service.get_regional_stats("01310100") == regional_stats
        provider.fetch_stats.assert_awaited_once_with("01310100")
        cache.put.assert_awaited_once_with("01310100", regional_stats)

    async def test_invalid_zipcode_skipped(self, provider, cache):
        service = MarketCalibrationService(provider, cache)
        assert await service.get_regional_stats("123") is None
        cache.get.assert_not_called()
        provider.fetch_stats.assert_not_called()

    async def test_provider_error_is_not_cached(self, provider, cache):
        provider.fetch_stats.return_value = ProviderError(ProviderErrorKind.RATE_LIMITED, "HTTP 429")
        service = MarketCalibrationService(provider, cache)

        assert await service.get_regional_stats("01310100") is None
        cache.put.assert_not_called()

    async def test_provider_exception_contained(self, provider, cache):
        provider.fetch_stats.side_effect = RuntimeError("boom")
        assert await MarketCalibrationService(provider, cache).get_regional_stats("01310100") is None

    async def test_unconfigured_provider_still_reads_cache(self, provider, cache, regional_stats):
        provider.is_available.return_value = False
        service = MarketCalibrationService(provider, cache)

        assert await service.get_regional_stats("01310100") is None
        cache.get.return_value = regional_stats
        assert await service.get_regional_stats("01310100") == regional_stats
        provider.fetch_stats.assert_not_called()


class TestRegionalPricePerArea:
    async def test_zipcode_median(self, provider, cache):
        assert await MarketCalibrationService(provider, cache).get_regional_price_per_area("01310100") == 4000

    async def test_zero_median_is_absent(self, provider, cache, stats_factory):
        provider.fetch_stats.return_value = Ok(stats_factory(per_area_median=0))
        assert await MarketCalibrationService(provider, cache).get_regional_price_per_area("01310100") is None


class TestEvaluate:
    async def test_above_market(self, provider, cache):
        validation = await MarketCalibrationService(provider, cache).evaluate("01310100", 350_000, 70)
        assert validation.market_reality == MarketReality.ABOVE_MARKET
        assert validation.market_deviation_percent == 25.0
        assert validation.confidence == 100

    async def test_cached_and_fresh_stats_agree(self, provider, cache, regional_stats):
        fresh = await MarketCalibrationService(provider, cache).evaluate("01310100", 300_000, 70)
        cache.get.return_value = regional_stats
        cached = await MarketCalibrationService(provider, cache).evaluate("01310100", 300_000, 70)
        assert fresh == cached

    async def test_preloaded_stats_skip_lookup(self, provider, cache, regional_stats):
        service = MarketCalibrationService(provider, cache)
        await service.evaluate("01310100", 280_000, 70, stats=regional_stats)
        cache.get.assert_not_called()

    async def test_no_stats(self, provider, cache):
        provider.fetch_stats.return_value = ProviderError(ProviderErrorKind.NOT_FOUND)
        assert await MarketCalibrationService(provider, cache).evaluate("01310100", 350_000, 70) is None
