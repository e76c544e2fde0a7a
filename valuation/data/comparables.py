"""Comparable retrieval over the ``match_properties_structured`` stored function.

The function ranks listings near the subject by structural similarity within
the tolerances below. An optional regional price per m² lets it discard
listings whose price deviates too far from the local market.
"""

import logging
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from valuation.engine.aggregation import round_half_up
from valuation.models.property import Comparable, PropertyAttributes

logger = logging.getLogger(__name__)

BEDROOMS_TOLERANCE = 1
BATHROOMS_TOLERANCE = 1
SIZE_TOLERANCE_PERCENT = 0.3
PARKING_TOLERANCE = 1

MATCH_QUERY = text(
    """
    SELECT * FROM match_properties_structured(
        user_lat => :user_lat,
        user_lng => :user_lng,
        user_bedrooms => :user_bedrooms,
        user_bathrooms => :user_bathrooms,
        user_size => :user_size,
        user_parking_spaces => :user_parking_spaces,
        user_type => :user_type,
        user_usage => :user_usage,
        user_rental_type => :user_rental_type,
        user_furnished => :user_furnished,
        bedrooms_tolerance => :bedrooms_tolerance,
        bathrooms_tolerance => :bathrooms_tolerance,
        size_tolerance_percent => :size_tolerance_percent,
        parking_tolerance => :parking_tolerance,
        radius_km => :radius_km,
        match_count => :match_count,
        avg_region_price => :avg_region_price,
        max_price_deviation => :max_price_deviation
    )
    """
)


class ComparableRetrievalError(RuntimeError):
    """The comparable store could not be queried; no estimate is possible."""


def _row_to_comparable(row: Mapping[str, Any]) -> Comparable:
    similarity = row.get("similarity_score")
    distance = row.get("distance_km")
    return Comparable(
        id=str(row.get("property_id") or row["id"]),
        property_type=row.get("type") or "",
        price=float(row["price"]),
        bedrooms=int(row.get("bedrooms") or 0),
        bathrooms=int(row.get("bathrooms") or 0),
        size=float(row.get("size") or 0),
        parking_spaces=int(row.get("parking_spaces") or 0),
        furnished=bool(row.get("furnished")),
        usage=row.get("usage"),
        rental_type=row.get("rental_type"),
        city=row.get("city") or "",
        state=row.get("state") or "",
        neighborhood=row.get("neighborhood"),
        street=row.get("street") or "",
        link=row.get("link"),
        similarity_score=float(similarity) if similarity is not None else None,
        distance_km=float(distance) if distance is not None else None,
    )


def average_precision(comparables: list[Comparable]) -> int:
    """Mean similarity relative to the best match, as a 0-100 percentage."""
    scores = [c.similarity_score for c in comparables if c.similarity_score is not None]
    if not scores:
        return 0
    best = max(scores)
    if best <= 0:
        return 0
    return round_half_up(sum(s / best * 100 for s in scores) / len(scores))


class SqlComparableSource:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find(
        self,
        subject: PropertyAttributes,
        radius_km: float,
        match_count: int,
        regional_price_per_area: float | None = None,
        max_price_deviation: float | None = None,
    ) -> list[Comparable]:
        if subject.coordinates is None:
            raise ComparableRetrievalError("Comparable search requires coordinates")

        params = {
            "user_lat": subject.coordinates.latitude,
            "user_lng": subject.coordinates.longitude,
            "user_bedrooms": subject.bedrooms,
            "user_bathrooms": subject.bathrooms,
            "user_size": subject.size,
            "user_parking_spaces": subject.parking_spaces,
            "user_type": subject.property_type,
            "user_usage": subject.usage.value if subject.usage else None,
            "user_rental_type": subject.rental_type.value if subject.rental_type else None,
            "user_furnished": subject.furnished,
            "bedrooms_tolerance": BEDROOMS_TOLERANCE,
            "bathrooms_tolerance": BATHROOMS_TOLERANCE,
            "size_tolerance_percent": SIZE_TOLERANCE_PERCENT,
            "parking_tolerance": PARKING_TOLERANCE,
            "radius_km": radius_km,
            "match_count": match_count,
            "avg_region_price": regional_price_per_area,
            "max_price_deviation": max_price_deviation if regional_price_per_area else None,
        }

        try:
            async with self.session_factory() as session:
                result = await session.execute(MATCH_QUERY, params)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.error("Comparable search failed: %s", e)
            raise ComparableRetrievalError(str(e)) from e

        comparables = [_row_to_comparable(row) for row in rows]
        logger.info(
            "Found %d comparables for %s (%d bed, %d bath, %.0fm²) within %.0fkm",
            len(comparables), subject.property_type, subject.bedrooms,
            subject.bathrooms, subject.size, radius_km,
        )
        return comparables
