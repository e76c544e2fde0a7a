"""FastAPI dependency injection.

Components holding process-wide state (the proximity cache, the engine) are
created once and shared across requests.
"""

from functools import lru_cache

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from valuation.config import settings
from valuation.data.comparables import SqlComparableSource
from valuation.data.geocode import GeoResolver
from valuation.data.market_cache import MarketCalibrationCache
from valuation.data.market_calibration import MarketCalibrationService
from valuation.data.pipeline import ValuationPipeline
from valuation.data.places import GooglePlacesClient
from valuation.data.property_store import PropertyStore
from valuation.data.proximity import ProximityScorer
from valuation.data.proximity_cache import ProximityCache
from valuation.data.proximity_populator import ProximityBatchPopulator
from valuation.data.zoneval import ZonevalClient

engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session = async_sessionmaker(engine, expire_on_commit=False)


@lru_cache
def get_proximity_scorer() -> ProximityScorer:
    return ProximityScorer(GooglePlacesClient(), ProximityCache())


@lru_cache
def get_pipeline() -> ValuationPipeline:
    market = MarketCalibrationService(ZonevalClient(), MarketCalibrationCache(async_session))
    return ValuationPipeline(
        comparables=SqlComparableSource(async_session),
        market=market,
        geo_resolver=GeoResolver(),
        proximity=get_proximity_scorer(),
    )


@lru_cache
def get_populator() -> ProximityBatchPopulator:
    return ProximityBatchPopulator(PropertyStore(async_session), get_proximity_scorer())
