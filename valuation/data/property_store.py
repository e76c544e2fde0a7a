"""Property records: locations for proximity population and persisted snapshots."""

import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from valuation.data.market_cache import utcnow
from valuation.engine.aggregation import round_half_up
from valuation.models.db import PropertyRecord
from valuation.models.property import Coordinates
from valuation.models.proximity import ProximitySelection, ProximitySnapshot, ProximityStats

logger = logging.getLogger(__name__)

NEEDING_UPDATE_LIMIT = 1000


class PropertyStore:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock

    async def get_location(self, property_id: str) -> Coordinates | None:
        """Coordinates of a property, or None if unknown or not geolocated."""
        async with self.session_factory() as session:
            row = (await session.execute(
                select(PropertyRecord.lat, PropertyRecord.lng).where(PropertyRecord.id == property_id)
            )).first()
        if row is None or row.lat is None or row.lng is None:
            return None
        return Coordinates(row.lat, row.lng)

    async def save_proximity(self, snapshot: ProximitySnapshot) -> None:
        """Overwrite the proximity fields of a property."""
        async with self.session_factory() as session:
            result = await session.execute(
                update(PropertyRecord)
                .where(PropertyRecord.id == snapshot.property_id)
                .values(
                    proximity_score=snapshot.proximity_score,
                    has_beach_access=snapshot.has_beach_access,
                    has_metro_access=snapshot.has_metro_access,
                    has_shopping_access=snapshot.has_shopping_access,
                    has_hospital_access=snapshot.has_hospital_access,
                    has_school_access=snapshot.has_school_access,
                    has_park_access=snapshot.has_park_access,
                    proximity_landmarks=snapshot.landmarks,
                    proximity_updated_at=snapshot.updated_at,
                )
            )
            await session.commit()
        if result.rowcount == 0:
            raise LookupError(f"Property {snapshot.property_id} not found")

    async def clear_proximity(self, property_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(PropertyRecord)
                .where(PropertyRecord.id == property_id)
                .values(
                    proximity_score=None,
                    has_beach_access=False,
                    has_metro_access=False,
                    has_shopping_access=False,
                    has_hospital_access=False,
                    has_school_access=False,
                    has_park_access=False,
                    proximity_landmarks=None,
                    proximity_updated_at=None,
                )
            )
            await session.commit()
        return result.rowcount > 0

    def _stale_cutoff(self, older_than_days: int) -> datetime:
        return self.clock() - timedelta(days=older_than_days)

    async def select_property_ids(self, selection: ProximitySelection) -> list[str]:
        """Resolve a selection into property ids, ordered by id."""
        if selection.property_ids is not None:
            return list(selection.property_ids)

        query = select(PropertyRecord.id).where(
            PropertyRecord.lat.is_not(None), PropertyRecord.lng.is_not(None)
        )
        if selection.older_than_days is not None:
            cutoff = self._stale_cutoff(selection.older_than_days)
            query = query.where(or_(
                PropertyRecord.proximity_updated_at.is_(None),
                PropertyRecord.proximity_updated_at < cutoff,
            ))
        query = query.order_by(PropertyRecord.id).offset(selection.offset).limit(selection.limit)

        async with self.session_factory() as session:
            return list((await session.scalars(query)).all())

    async def properties_needing_update(
        self, older_than_days: int, limit: int = NEEDING_UPDATE_LIMIT
    ) -> list[str]:
        return await self.select_property_ids(
            ProximitySelection(older_than_days=older_than_days, limit=limit)
        )

    async def stats(self) -> ProximityStats:
        has_data = PropertyRecord.proximity_updated_at.is_not(None)
        async with self.session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(PropertyRecord))
            row = (await session.execute(
                select(
                    func.count(),
                    func.avg(PropertyRecord.proximity_score),
                    func.count().filter(PropertyRecord.has_beach_access.is_(True)),
                    func.count().filter(PropertyRecord.has_metro_access.is_(True)),
                    func.count().filter(PropertyRecord.has_shopping_access.is_(True)),
                ).select_from(PropertyRecord).where(has_data)
            )).one()

        with_data, avg_score, beach, metro, shopping = row
        total = total or 0
        return ProximityStats(
            total_properties=total,
            with_proximity_data=with_data or 0,
            without_proximity_data=total - (with_data or 0),
            average_proximity_score=round_half_up(float(avg_score)) if avg_score is not None else 0,
            beach_access_count=beach or 0,
            metro_access_count=metro or 0,
            shopping_access_count=shopping or 0,
        )
