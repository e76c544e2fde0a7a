"""Protocol definitions for external collaborators.

Each capability is one interface so providers can be added or reordered
without touching their callers.
"""

from typing import Protocol, runtime_checkable

from valuation.models.market import RegionalStatsSet
from valuation.models.property import Comparable, Coordinates, GeocodeResult, PropertyAttributes
from valuation.models.provider import ProviderResult
from valuation.models.proximity import LandmarkCategory, Place


@runtime_checkable
class ZipcodeResolver(Protocol):
    name: str

    def is_available(self) -> bool:
        """Whether the provider is configured."""
        ...

    async def reverse_geocode(self, coordinates: Coordinates) -> ProviderResult[GeocodeResult]:
        """Resolve address components, including the postal code, for a point."""
        ...


@runtime_checkable
class MarketStatsProvider(Protocol):
    def is_available(self) -> bool:
        ...

    async def fetch_stats(self, zipcode: str) -> ProviderResult[RegionalStatsSet]:
        """Fetch regional statistics for an 8-digit zipcode."""
        ...


@runtime_checkable
class LandmarkSearchProvider(Protocol):
    def is_available(self) -> bool:
        ...

    async def nearby_search(
        self, coordinates: Coordinates, radius_meters: int, category: LandmarkCategory
    ) -> ProviderResult[list[Place]]:
        """Search for places of a category around a point."""
        ...


@runtime_checkable
class ComparableSource(Protocol):
    async def find(
        self,
        subject: PropertyAttributes,
        radius_km: float,
        match_count: int,
        regional_price_per_area: float | None = None,
        max_price_deviation: float | None = None,
    ) -> list[Comparable]:
        """Retrieve comparable listings for a subject property."""
        ...
