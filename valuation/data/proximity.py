"""Location proximity analysis: landmark search, filtering, scoring and caching."""

import asyncio
import logging
from dataclasses import replace

from valuation.config import settings
from valuation.data.base import LandmarkSearchProvider
from valuation.data.proximity_cache import ProximityCache, proximity_cache_key
from valuation.engine.proximity import DEFAULT_CATEGORIES, build_proximity_result, select_landmarks
from valuation.models.property import Coordinates
from valuation.models.provider import ProviderError, ProviderErrorKind
from valuation.models.proximity import Landmark, LandmarkCategory, ProximityResult

logger = logging.getLogger(__name__)


class ProximityScorer:
    def __init__(self, provider: LandmarkSearchProvider, cache: ProximityCache | None = None):
        self.provider = provider
        self.cache = cache or ProximityCache()

    def is_available(self) -> bool:
        return self.provider.is_available()

    async def _search_category(
        self,
        coordinates: Coordinates,
        radius_meters: int,
        category: LandmarkCategory,
        max_results: int,
    ) -> list[Landmark] | ProviderError:
        result = await self.provider.nearby_search(coordinates, radius_meters, category)
        if isinstance(result, ProviderError):
            logger.warning("Landmark search failed for %s: %s", category.value, result)
            return result

        landmarks = select_landmarks(coordinates, result.value, category, radius_meters, max_results)
        logger.debug(
            "Found %d valid %s landmarks within %dm (%d raw results)",
            len(landmarks), category.value, radius_meters, len(result.value),
        )
        return landmarks

    async def analyze(
        self,
        coordinates: Coordinates,
        radius_meters: int | None = None,
        categories: list[LandmarkCategory] | None = None,
        max_results_per_category: int | None = None,
    ) -> ProximityResult:
        """Score proximity to landmark categories around a point.

        Never raises. A missing API key or an unexpected failure yields an
        empty result with every requested category in ``failed_categories``.
        When only some searches fail, the result covers the categories that
        succeeded, lists the rest as failed, and is not cached.
        """
        radius = radius_meters or settings.proximity_radius_m
        wanted = list(categories) if categories else list(DEFAULT_CATEGORIES)
        max_results = max_results_per_category or settings.proximity_max_results

        key = proximity_cache_key(coordinates, radius, wanted)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Proximity cache hit: %s", key)
            return cached.as_cache_hit()

        if not self.provider.is_available():
            logger.warning("Landmark search provider not configured, returning empty proximity data")
            return ProximityResult.unavailable(wanted)

        try:
            searches = await asyncio.gather(*(
                self._search_category(coordinates, radius, category, max_results)
                for category in wanted
            ))
        except Exception:
            logger.exception("Proximity analysis failed")
            return ProximityResult.unavailable(wanted)

        if any(
            isinstance(found, ProviderError) and found.kind == ProviderErrorKind.NOT_CONFIGURED
            for found in searches
        ):
            return ProximityResult.unavailable(wanted)

        failed = [c for c, found in zip(wanted, searches) if isinstance(found, ProviderError)]
        if len(failed) == len(wanted):
            logger.warning("Every landmark search failed, returning empty proximity data")
            return ProximityResult.unavailable(wanted)

        result = build_proximity_result([
            (category, found) for category, found in zip(wanted, searches)
            if not isinstance(found, ProviderError)
        ])

        if failed:
            logger.warning(
                "Proximity analysis incomplete (failed: %s), not caching",
                ", ".join(c.value for c in failed),
            )
            result = replace(result, failed_categories=failed)
        else:
            self.cache.set(key, result)

        logger.info(
            "Proximity analysis complete: %d landmarks, score %d, beach=%s, shopping=%s",
            len(result.landmarks),
            result.overall_proximity_score,
            result.has_beach_access,
            result.has_shopping_access,
        )
        return result
