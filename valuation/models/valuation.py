from dataclasses import dataclass, field

from valuation.models.market import MarketInsight, MarketValidation
from valuation.models.property import Comparable
from valuation.models.proximity import ProximityResult


@dataclass(frozen=True)
class PriceAggregate:
    median: float = 0.0
    trimmed_mean: float = 0.0
    mean: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class ValuationResult:
    estimated_price: float
    median_price: float
    avg_price: float
    comparables: list[Comparable] = field(default_factory=list)
    avg_precision: int = 0
    zipcode: str | None = None
    zipcode_source: str | None = None  # "request" | "nominatim" | "google"
    regional_price_per_area: float | None = None

    # Enrichments: None means the enrichment was unavailable, never fabricated
    refined_price: float | None = None
    market_validation: MarketValidation | None = None
    market_insight: MarketInsight | None = None
    proximity_analysis: ProximityResult | None = None

    @property
    def has_market_calibration(self) -> bool:
        return self.market_validation is not None

    @property
    def has_proximity_analysis(self) -> bool:
        return self.proximity_analysis is not None
