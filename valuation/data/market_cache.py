"""Persistent TTL cache for regional market statistics, keyed by zipcode."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from valuation.config import settings
from valuation.models.db import MarketCacheRecord
from valuation.models.market import RegionalStatsGroup, RegionalStatsSet

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class MarketCalibrationCache:
    """Best-effort cache: reads and writes never raise.

    An entry is valid while ``now - updated_at <= ttl``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl: timedelta | None = None,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.ttl = ttl if ttl is not None else timedelta(days=settings.market_cache_ttl_days)
        self.clock = clock

    def is_fresh(self, updated_at: datetime | None) -> bool:
        if updated_at is None:
            return False
        return self.clock() - _as_utc(updated_at) <= self.ttl

    async def get(self, zipcode: str) -> RegionalStatsSet | None:
        """Return cached stats, or None on miss, expiry or store failure."""
        try:
            async with self.session_factory() as session:
                record = await session.get(MarketCacheRecord, zipcode)
                if record is None:
                    return None
                if not self.is_fresh(record.updated_at):
                    logger.info("Market cache expired for %s, will fetch fresh data", zipcode)
                    return None
                return RegionalStatsSet(
                    zipcode=RegionalStatsGroup.model_validate(record.zipcode_stats),
                    neighbourhood=RegionalStatsGroup.model_validate(record.neighbourhood_stats),
                    city=RegionalStatsGroup.model_validate(record.city_stats),
                    state=RegionalStatsGroup.model_validate(record.state_stats),
                )
        except Exception as e:
            logger.warning("Market cache read failed for %s: %s", zipcode, e)
            return None

    async def put(self, zipcode: str, stats: RegionalStatsSet) -> None:
        """Upsert the entry for a zipcode (last write wins)."""
        record = MarketCacheRecord(
            zipcode=zipcode,
            zipcode_stats=stats.zipcode.model_dump(by_alias=True),
            neighbourhood_stats=stats.neighbourhood.model_dump(by_alias=True),
            city_stats=stats.city.model_dump(by_alias=True),
            state_stats=stats.state.model_dump(by_alias=True),
            updated_at=self.clock(),
        )
        try:
            async with self.session_factory() as session:
                await session.merge(record)
                await session.commit()
            logger.debug("Market stats cached for %s", zipcode)
        except Exception as e:
            logger.warning("Market cache write failed for %s: %s", zipcode, e)
