"""Market deviation engine.

Compares a price-per-area estimate against the regional zipcode median,
classifies it, weights confidence by the evidence behind each granularity and
applies a bounded correction to the comparable-based price.

Confidence (0-100):
  zipcode support > 0:        +40
  neighbourhood support > 0:  +30
  city support > 0:           +20
  base:                       +10
"""

import math
import re

from valuation.engine.aggregation import round_half_up
from valuation.models.market import (
    InsightType,
    MarketInsight,
    MarketReality,
    MarketValidation,
    RefinementResult,
    RegionalStatsSet,
)

ZIPCODE_LENGTH = 8

DEVIATION_THRESHOLD_PCT = 15.0
MIN_CONFIDENCE_FOR_ADJUSTMENT = 50
MAX_ADJUSTMENT = 0.10

CONFIDENCE_ZIPCODE = 40
CONFIDENCE_NEIGHBOURHOOD = 30
CONFIDENCE_CITY = 20
CONFIDENCE_BASE = 10

_NON_DIGITS = re.compile(r"\D")


def clean_zipcode(raw: str | None) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", raw or "")


def normalize_zipcode(raw: str | None) -> str | None:
    """Return the 8-digit zipcode, or None if the input does not reduce to one."""
    digits = clean_zipcode(raw)
    if len(digits) != ZIPCODE_LENGTH:
        return None
    return digits


def round_2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def compute_confidence(stats: RegionalStatsSet) -> int:
    confidence = CONFIDENCE_BASE
    if stats.zipcode.global_.support > 0:
        confidence += CONFIDENCE_ZIPCODE
    if stats.neighbourhood.global_.support > 0:
        confidence += CONFIDENCE_NEIGHBOURHOOD
    if stats.city.global_.support > 0:
        confidence += CONFIDENCE_CITY
    return min(confidence, 100)


def classify_deviation(deviation_pct: float) -> MarketReality:
    if deviation_pct > DEVIATION_THRESHOLD_PCT:
        return MarketReality.ABOVE_MARKET
    if deviation_pct < -DEVIATION_THRESHOLD_PCT:
        return MarketReality.BELOW_MARKET
    return MarketReality.WITHIN_MARKET


def build_market_validation(
    stats: RegionalStatsSet,
    estimated_price: float,
    area_size: float,
) -> MarketValidation | None:
    """Evaluate an estimate against regional stats.

    Used for both freshly fetched and cached stats. Returns None when the
    deviation is undefined (no area or no regional median).
    """
    if area_size <= 0:
        return None
    median = stats.zipcode.per_area.median
    if median <= 0:
        return None

    price_per_area = estimated_price / area_size
    deviation = (price_per_area - median) / median * 100

    return MarketValidation(
        stats=stats,
        confidence=compute_confidence(stats),
        price_per_area_estimate=price_per_area,
        price_per_area_median=median,
        market_reality=classify_deviation(deviation),
        market_deviation_percent=round_2(deviation),
    )


def _format_pct(value: float) -> str:
    return f"{abs(value):.2f}".rstrip("0").rstrip(".")


def refine_price(validation: MarketValidation, original_price: float) -> RefinementResult:
    """Apply a confidence-gated correction, capped at MAX_ADJUSTMENT either way.

    The refined price is always rounded to whole currency units, adjusted or not.
    """
    deviation = validation.market_deviation_percent
    confident = validation.confidence > MIN_CONFIDENCE_FOR_ADJUSTMENT

    if validation.market_reality == MarketReality.ABOVE_MARKET and confident:
        factor = min(abs(deviation) / 100, MAX_ADJUSTMENT)
        return RefinementResult(
            refined_price=round_half_up(original_price * (1 - factor)),
            adjustment_factor=-factor,
            insight=MarketInsight(
                type=InsightType.ABOVE_MARKET_ADJUSTMENT,
                message=(
                    f"Estimated price is {_format_pct(deviation)}% above the local market. "
                    f"Adjusted down {_format_pct(factor * 100)}% for realism."
                ),
            ),
        )

    if validation.market_reality == MarketReality.BELOW_MARKET and confident:
        factor = min(abs(deviation) / 100, MAX_ADJUSTMENT)
        return RefinementResult(
            refined_price=round_half_up(original_price * (1 + factor)),
            adjustment_factor=factor,
            insight=MarketInsight(
                type=InsightType.BELOW_MARKET_ADJUSTMENT,
                message=(
                    f"Estimated price is {_format_pct(deviation)}% below the local market. "
                    f"Adjusted up {_format_pct(factor * 100)}% for realism."
                ),
            ),
        )

    insight = None
    if validation.market_reality == MarketReality.WITHIN_MARKET:
        insight = MarketInsight(
            type=InsightType.WITHIN_MARKET,
            message=f"Estimated price is in line with the local market (±{_format_pct(deviation)}% deviation).",
        )
    return RefinementResult(refined_price=round_half_up(original_price), insight=insight)
