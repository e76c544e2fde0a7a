"""Shared test fixtures.

Fixture property: 2-bedroom apartment, 70 m², Bela Vista, São Paulo.
Regional benchmark: R$ 4,000/m² zipcode median with support at every level.
"""

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from valuation.models.db import Base
from valuation.models.market import RegionalStats, RegionalStatsGroup, RegionalStatsSet
from valuation.models.property import Comparable, Coordinates, PropertyAttributes, Usage

PAULISTA = Coordinates(-23.5614, -46.6559)


def make_group(per_area_median: float = 4000.0, support: int = 10) -> RegionalStatsGroup:
    return RegionalStatsGroup(
        global_=RegionalStats(average=300_000, median=280_000, support=support),
        per_area=RegionalStats(average=per_area_median * 1.05, median=per_area_median, support=support),
        per_room=RegionalStats(average=120_000, median=110_000, support=support),
    )


def make_stats(
    per_area_median: float = 4000.0,
    zipcode_support: int = 12,
    neighbourhood_support: int = 80,
    city_support: int = 900,
    state_support: int = 5000,
) -> RegionalStatsSet:
    return RegionalStatsSet(
        zipcode=make_group(per_area_median, zipcode_support),
        neighbourhood=make_group(per_area_median, neighbourhood_support),
        city=make_group(per_area_median, city_support),
        state=make_group(per_area_median, state_support),
    )


def make_comparable(price: float, id: str | None = None, similarity: float | None = None) -> Comparable:
    return Comparable(
        id=id or f"c-{int(price)}",
        property_type="apartamento",
        price=price,
        bedrooms=2,
        bathrooms=1,
        size=70,
        usage="venda",
        city="São Paulo",
        state="SP",
        similarity_score=similarity,
    )


@pytest.fixture
def subject() -> PropertyAttributes:
    return PropertyAttributes(
        property_type="apartamento",
        bedrooms=2,
        bathrooms=1,
        size=70,
        parking_spaces=1,
        usage=Usage.SALE,
        coordinates=PAULISTA,
        city="São Paulo",
        state="SP",
    )


@pytest.fixture
def regional_stats() -> RegionalStatsSet:
    return make_stats()


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def stats_factory():
    return make_stats


@pytest.fixture
def comparable_factory():
    return make_comparable
