"""Landmark proximity data types."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from valuation.models.property import Coordinates


class LandmarkCategory(str, Enum):
    BEACH = "beach"
    SHOPPING_MALL = "shopping_mall"
    HOSPITAL = "hospital"
    SCHOOL = "school"
    PARK = "park"
    METRO_STATION = "metro_station"
    RESTAURANT = "restaurant"
    BANK = "bank"
    GYM = "gym"
    PHARMACY = "pharmacy"


@dataclass(frozen=True)
class CategoryProfile:
    weight: float
    threshold_meters: float  # distance at which the score reaches 0
    name_filter: bool = False  # apply the name heuristic before accepting a place


@dataclass(frozen=True)
class Place:
    """A raw nearby-search result, before distance validation."""
    id: str
    name: str
    coordinates: Coordinates
    rating: float | None = None


@dataclass(frozen=True)
class Landmark:
    id: str
    name: str
    coordinates: Coordinates
    category: LandmarkCategory
    distance_meters: float
    proximity_score: int = 0  # 0-100
    rating: float | None = None


@dataclass(frozen=True)
class ProximityResult:
    landmarks: list[Landmark] = field(default_factory=list)
    overall_proximity_score: int = 0
    has_beach_access: bool = False
    has_shopping_access: bool = False
    access_by_category: dict[LandmarkCategory, bool] = field(default_factory=dict)
    cache_hit: bool = False
    # categories whose search failed; their access flags are unknown, not false
    failed_categories: list[LandmarkCategory] = field(default_factory=list)

    @classmethod
    def unavailable(cls, categories: list[LandmarkCategory]) -> "ProximityResult":
        """An empty result for an analysis where no category could be searched."""
        return cls(failed_categories=list(categories))

    @property
    def complete(self) -> bool:
        return not self.failed_categories

    @property
    def analyzed(self) -> bool:
        """True when at least one category search succeeded."""
        return self.complete or bool(self.access_by_category)

    def as_cache_hit(self) -> "ProximityResult":
        return replace(self, cache_hit=True)

    def has_access(self, category: LandmarkCategory) -> bool:
        return self.access_by_category.get(category, False)


@dataclass(frozen=True)
class ProximitySnapshot:
    """Denormalized proximity fields persisted on a property record."""
    property_id: str
    coordinates: Coordinates
    proximity_score: int
    has_beach_access: bool
    has_metro_access: bool
    has_shopping_access: bool
    has_hospital_access: bool
    has_school_access: bool
    has_park_access: bool
    landmarks: list[dict]
    updated_at: datetime


@dataclass(frozen=True)
class ProximitySelection:
    """Which properties a batch run should process.

    Explicit ids win; otherwise ``older_than_days`` selects properties with
    missing or stale proximity data, and with neither an offset/limit page of
    all geolocated properties is used.
    """
    property_ids: list[str] | None = None
    offset: int = 0
    limit: int = 100
    older_than_days: int | None = None


@dataclass
class PopulationSummary:
    processed: int = 0
    successful: int = 0
    failed: int = 0
    results: list[ProximitySnapshot] = field(default_factory=list)


@dataclass(frozen=True)
class ProximityStats:
    total_properties: int
    with_proximity_data: int
    without_proximity_data: int
    average_proximity_score: int
    beach_access_count: int
    metro_access_count: int
    shopping_access_count: int
