"""Pydantic models for regional market statistics and calibration results."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RegionalStats(BaseModel):
    average: float = 0.0
    median: float = 0.0
    support: int = Field(0, ge=0)  # sample size; 0 means no data


class RegionalStatsGroup(BaseModel):
    """Statistics for one granularity, stored in the provider's field names."""
    model_config = ConfigDict(populate_by_name=True)

    global_: RegionalStats = Field(default_factory=RegionalStats, alias="global")
    per_area: RegionalStats = Field(default_factory=RegionalStats, alias="per_m2")
    per_room: RegionalStats = Field(default_factory=RegionalStats)


class RegionalStatsSet(BaseModel):
    """The four granularities returned for one zipcode lookup."""
    model_config = ConfigDict(populate_by_name=True)

    zipcode: RegionalStatsGroup = Field(alias="by_zipcode")
    neighbourhood: RegionalStatsGroup = Field(alias="by_neighbourhood")
    city: RegionalStatsGroup = Field(alias="by_city")
    state: RegionalStatsGroup = Field(alias="by_uf")


class MarketReality(str, Enum):
    ABOVE_MARKET = "above_market"
    BELOW_MARKET = "below_market"
    WITHIN_MARKET = "within_market"


class MarketValidation(BaseModel):
    stats: RegionalStatsSet
    confidence: int = Field(ge=0, le=100)
    price_per_area_estimate: float
    price_per_area_median: float
    market_reality: MarketReality
    market_deviation_percent: float


class InsightType(str, Enum):
    ABOVE_MARKET_ADJUSTMENT = "above_market_adjustment"
    BELOW_MARKET_ADJUSTMENT = "below_market_adjustment"
    WITHIN_MARKET = "within_market"


class MarketInsight(BaseModel):
    type: InsightType
    message: str


class RefinementResult(BaseModel):
    refined_price: float
    adjustment_factor: float = 0.0  # signed: negative pulls the price down
    insight: MarketInsight | None = None
