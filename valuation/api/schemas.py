"""Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel, Field

from valuation.models.market import MarketInsight, MarketReality
from valuation.models.property import RentalType, Usage


# ---- Request schemas ----

class EvaluateRequest(BaseModel):
    type: str = Field(..., description="Property type, e.g. apartamento, casa")
    bedrooms: int = Field(..., ge=0)
    bathrooms: int = Field(..., ge=0)
    size: float = Field(..., gt=0, description="Area in m²")
    parking_spaces: int = Field(0, ge=0)
    furnished: bool = False
    usage: Usage | None = None
    rental_type: RentalType | None = None
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    city: str = ""
    state: str = ""
    zipcode: str | None = Field(None, description="Skips reverse geocoding when valid")
    include_proximity: bool = True


class PopulateProximityRequest(BaseModel):
    property_ids: list[str] | None = None
    offset: int = Field(0, ge=0)
    limit: int = Field(100, ge=1, le=1000)
    older_than_days: int | None = Field(None, ge=0)
    batch_size: int | None = Field(None, ge=1, le=50)
    delay_seconds: float | None = Field(None, ge=0)


# ---- Response schemas ----

class ComparableResponse(BaseModel):
    id: str
    type: str
    price: float
    bedrooms: int
    bathrooms: int
    size: float
    parking_spaces: int
    furnished: bool
    usage: str | None = None
    rental_type: str | None = None
    city: str
    state: str
    neighborhood: str | None = None
    street: str
    link: str | None = None
    similarity_score: float | None = None
    distance_km: float | None = None


class MarketValidationResponse(BaseModel):
    confidence: int
    price_per_area_estimate: float
    price_per_area_median: float
    market_reality: MarketReality
    market_deviation_percent: float


class LandmarkResponse(BaseModel):
    id: str
    name: str
    type: str
    lat: float
    lng: float
    distance: float
    proximity_score: int
    rating: float | None = None


class ProximityResponse(BaseModel):
    landmarks: list[LandmarkResponse]
    overall_proximity_score: int
    has_beach_access: bool
    has_shopping_access: bool
    cache_hit: bool
    failed_categories: list[str] = []


class EvaluateResponse(BaseModel):
    estimated_price: float
    median_price: float
    avg_price: float
    avg_precision: int
    comparables: list[ComparableResponse]
    zipcode: str | None = None
    zipcode_source: str | None = None
    regional_price_per_area: float | None = None

    # Enrichments are null when unavailable
    refined_price: float | None = None
    market_validation: MarketValidationResponse | None = None
    market_insight: MarketInsight | None = None
    proximity_analysis: ProximityResponse | None = None


class ProximitySnapshotResponse(BaseModel):
    property_id: str
    proximity_score: int
    has_beach_access: bool
    has_metro_access: bool
    has_shopping_access: bool
    has_hospital_access: bool
    has_school_access: bool
    has_park_access: bool
    landmarks: list[dict]
    updated_at: datetime


class PopulationSummaryResponse(BaseModel):
    processed: int
    successful: int
    failed: int


class ProximityStatsResponse(BaseModel):
    total_properties: int
    with_proximity_data: int
    without_proximity_data: int
    average_proximity_score: int
    beach_access_count: int
    metro_access_count: int
    shopping_access_count: int


class PropertiesNeedingUpdateResponse(BaseModel):
    property_ids: list[str]
    count: int
