"""Batch population of persisted proximity snapshots on property records."""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable

from valuation.config import settings
from valuation.data.market_cache import utcnow
from valuation.data.property_store import NEEDING_UPDATE_LIMIT, PropertyStore
from valuation.data.proximity import ProximityScorer
from valuation.models.proximity import (
    LandmarkCategory,
    PopulationSummary,
    ProximityResult,
    ProximitySelection,
    ProximitySnapshot,
    ProximityStats,
)

logger = logging.getLogger(__name__)

POPULATE_CATEGORIES: list[LandmarkCategory] = [
    LandmarkCategory.BEACH,
    LandmarkCategory.METRO_STATION,
    LandmarkCategory.SHOPPING_MALL,
    LandmarkCategory.HOSPITAL,
    LandmarkCategory.SCHOOL,
    LandmarkCategory.PARK,
]


def _landmarks_json(result: ProximityResult) -> list[dict]:
    return [
        {
            "id": l.id,
            "name": l.name,
            "type": l.category.value,
            "distance": l.distance_meters,
            "proximity_score": l.proximity_score,
            "rating": l.rating,
        }
        for l in result.landmarks
    ]


class ProximityBatchPopulator:
    def __init__(
        self,
        store: PropertyStore,
        scorer: ProximityScorer,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.scorer = scorer
        self.sleep = sleep
        self.clock = clock

    async def populate_one(self, property_id: str) -> ProximitySnapshot | None:
        """Analyze one property and overwrite its proximity fields.

        Returns None, leaving the stored fields untouched, when the property
        has no coordinates, any landmark search failed, or saving fails.
        """
        try:
            coordinates = await self.store.get_location(property_id)
            if coordinates is None:
                logger.warning("Property %s not found or missing coordinates", property_id)
                return None

            result = await self.scorer.analyze(
                coordinates,
                radius_meters=settings.proximity_populate_radius_m,
                categories=POPULATE_CATEGORIES,
            )
            if not result.complete:
                logger.warning(
                    "Landmark search failed for property %s (%s), keeping stored proximity data",
                    property_id, ", ".join(c.value for c in result.failed_categories),
                )
                return None

            snapshot = ProximitySnapshot(
                property_id=property_id,
                coordinates=coordinates,
                proximity_score=result.overall_proximity_score,
                has_beach_access=result.has_access(LandmarkCategory.BEACH),
                has_metro_access=result.has_access(LandmarkCategory.METRO_STATION),
                has_shopping_access=result.has_access(LandmarkCategory.SHOPPING_MALL),
                has_hospital_access=result.has_access(LandmarkCategory.HOSPITAL),
                has_school_access=result.has_access(LandmarkCategory.SCHOOL),
                has_park_access=result.has_access(LandmarkCategory.PARK),
                landmarks=_landmarks_json(result),
                updated_at=self.clock(),
            )
            await self.store.save_proximity(snapshot)
        except Exception:
            logger.exception("Error populating proximity for property %s", property_id)
            return None

        logger.info("Updated proximity data for property %s", property_id)
        return snapshot

    async def populate_many(
        self,
        selection: ProximitySelection,
        batch_size: int | None = None,
        pacing_delay: float | None = None,
    ) -> PopulationSummary:
        """Process the selection in fixed-size concurrent batches.

        Item failures are counted, never raised. The pacing delay is applied
        between batches only.
        """
        size = max(1, batch_size or settings.proximity_batch_size)
        delay = settings.proximity_batch_delay_seconds if pacing_delay is None else pacing_delay

        property_ids = await self.store.select_property_ids(selection)
        summary = PopulationSummary()
        if not property_ids:
            logger.info("No properties selected for proximity population")
            return summary

        logger.info("Populating proximity for %d properties in batches of %d", len(property_ids), size)

        for start in range(0, len(property_ids), size):
            batch = property_ids[start:start + size]
            outcomes = await asyncio.gather(
                *(self.populate_one(property_id) for property_id in batch),
                return_exceptions=True,
            )

            for property_id, outcome in zip(batch, outcomes):
                summary.processed += 1
                if isinstance(outcome, ProximitySnapshot):
                    summary.successful += 1
                    summary.results.append(outcome)
                else:
                    if isinstance(outcome, BaseException):
                        logger.error("Proximity population raised for %s: %s", property_id, outcome)
                    summary.failed += 1

            logger.info(
                "Batch %d done: %d/%d processed",
                start // size + 1, summary.processed, len(property_ids),
            )
            if start + size < len(property_ids) and delay > 0:
                await self.sleep(delay)

        logger.info(
            "Proximity population complete: %d successful, %d failed",
            summary.successful, summary.failed,
        )
        return summary

    async def clear(self, property_id: str) -> bool:
        cleared = await self.store.clear_proximity(property_id)
        if cleared:
            logger.info("Cleared proximity data for property %s", property_id)
        return cleared

    async def properties_needing_update(
        self, older_than_days: int | None = None, limit: int = NEEDING_UPDATE_LIMIT
    ) -> list[str]:
        days = settings.proximity_stale_after_days if older_than_days is None else older_than_days
        return await self.store.properties_needing_update(days, limit)

    async def stats(self) -> ProximityStats:
        return await self.store.stats()
