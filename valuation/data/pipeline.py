"""Valuation pipeline: orchestrates data sources to value a subject property.

Flow: zipcode (request or reverse geocode) → regional market stats →
comparables → robust aggregation → market validation + refinement →
proximity analysis

Only a comparable retrieval failure aborts an evaluation. Every other stage
degrades to an absent enrichment.
"""

import logging

from valuation.config import settings
from valuation.data.base import ComparableSource
from valuation.data.comparables import average_precision
from valuation.data.geocode import GeoResolver
from valuation.data.market_calibration import MarketCalibrationService
from valuation.data.proximity import ProximityScorer
from valuation.engine.aggregation import aggregate_prices
from valuation.engine.market import normalize_zipcode, refine_price
from valuation.models.market import RegionalStatsSet
from valuation.models.property import PropertyAttributes
from valuation.models.proximity import ProximityResult
from valuation.models.valuation import ValuationResult

logger = logging.getLogger(__name__)


class ValuationPipeline:
    def __init__(
        self,
        comparables: ComparableSource,
        market: MarketCalibrationService,
        geo_resolver: GeoResolver | None = None,
        proximity: ProximityScorer | None = None,
    ):
        self.comparables = comparables
        self.market = market
        self.geo_resolver = geo_resolver or GeoResolver()
        self.proximity = proximity

    async def resolve_zipcode(self, subject: PropertyAttributes) -> tuple[str | None, str | None]:
        """Return (zipcode, source). A valid zipcode on the request wins."""
        requested = normalize_zipcode(subject.zipcode)
        if requested:
            return requested, "request"
        if subject.zipcode:
            logger.warning("Ignoring invalid request zipcode %r", subject.zipcode)

        if subject.coordinates is None:
            return None, None

        geocoded = await self.geo_resolver.resolve(subject.coordinates)
        if geocoded is None:
            return None, None
        return geocoded.zipcode, geocoded.source

    async def _analyze_proximity(self, subject: PropertyAttributes) -> ProximityResult | None:
        if self.proximity is None or subject.coordinates is None:
            return None
        if not self.proximity.is_available():
            logger.info("Landmark search not configured, skipping proximity analysis")
            return None
        result = await self.proximity.analyze(subject.coordinates)
        if not result.analyzed:
            logger.warning("Proximity analysis unavailable, omitting it from the valuation")
            return None
        return result

    async def evaluate(self, subject: PropertyAttributes, include_proximity: bool = True) -> ValuationResult:
        """Value a property from its comparables, refined by regional market data.

        Raises ComparableRetrievalError when comparables cannot be retrieved.
        """
        # Step 1: Zipcode
        zipcode, zipcode_source = await self.resolve_zipcode(subject)
        logger.info("Valuing %s in %s (zipcode %s via %s)", subject.property_type, subject.city, zipcode, zipcode_source)

        # Step 2: Regional benchmark
        stats: RegionalStatsSet | None = None
        regional_price_per_area: float | None = None
        if zipcode:
            stats = await self.market.get_regional_stats(zipcode)
            if stats is not None and stats.zipcode.per_area.median > 0:
                regional_price_per_area = stats.zipcode.per_area.median

        # Step 3: Comparables (failures propagate)
        comparables = await self.comparables.find(
            subject,
            radius_km=settings.comparable_radius_km,
            match_count=settings.comparable_match_count,
            regional_price_per_area=regional_price_per_area,
            max_price_deviation=settings.comparable_max_price_deviation,
        )

        # Step 4: Robust aggregation
        aggregate = aggregate_prices(c.price for c in comparables)

        # Step 5: Market validation + refinement
        refined_price = None
        validation = None
        insight = None
        if stats is not None and aggregate.count > 0:
            validation = await self.market.evaluate(zipcode, aggregate.trimmed_mean, subject.size, stats=stats)
            if validation is not None:
                refinement = refine_price(validation, aggregate.trimmed_mean)
                refined_price = refinement.refined_price
                insight = refinement.insight
        elif aggregate.count == 0:
            logger.warning("No comparables found, skipping market calibration")

        # Step 6: Proximity
        proximity = await self._analyze_proximity(subject) if include_proximity else None

        return ValuationResult(
            estimated_price=aggregate.trimmed_mean,
            median_price=aggregate.median,
            avg_price=aggregate.mean,
            comparables=comparables,
            avg_precision=average_precision(comparables),
            zipcode=zipcode,
            zipcode_source=zipcode_source,
            regional_price_per_area=regional_price_per_area,
            refined_price=refined_price,
            market_validation=validation,
            market_insight=insight,
            proximity_analysis=proximity,
        )
