"""Robust point estimates over comparable prices.

The trimmed mean drops the same number of values from each end of the sorted
list: ``k = round_half_up(n * TRIM_FRACTION)``. With fewer than five prices
``k`` is 0 and the trimmed mean equals the plain mean.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from valuation.models.valuation import PriceAggregate

TRIM_FRACTION = 0.10
ONE = Decimal("1")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero.

    Goes through the shortest decimal repr, so 0.49999999999999994 rounds
    down. Callers only pass non-negative prices, scores and counts.
    """
    return int(Decimal(str(value)).quantize(ONE, ROUND_HALF_UP))


def median(values: list[float]) -> float:
    """Standard order-statistic median. Returns 0.0 for an empty list."""
    if not values:
        return 0.0
    ordered = sorted(values)
    n = len(ordered)
    mid = n // 2
    if n % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def trim_bounds(n: int, fraction: float = TRIM_FRACTION) -> tuple[int, int]:
    """Return the [start, stop) slice kept by the trimmed mean for ``n`` values."""
    k = round_half_up(n * fraction)
    if n - 2 * k < 1:
        k = 0
    return k, n - k


def trimmed_mean(values: list[float], fraction: float = TRIM_FRACTION) -> float:
    if not values:
        return 0.0
    ordered = sorted(values)
    start, stop = trim_bounds(len(ordered), fraction)
    kept = ordered[start:stop]
    return sum(kept) / len(kept)


def aggregate_prices(prices: Iterable[float]) -> PriceAggregate:
    """Median, trimmed mean and mean of a set of comparable prices.

    An empty input yields a zeroed aggregate instead of dividing by zero.
    """
    values = [float(p) for p in prices]
    if not values:
        return PriceAggregate()

    return PriceAggregate(
        median=median(values),
        trimmed_mean=trimmed_mean(values),
        mean=sum(values) / len(values),
        count=len(values),
    )
