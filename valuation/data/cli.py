"""CLI for running valuations and proximity population against the configured store.

Usage:
    python -m valuation.data.cli evaluate --type apartamento --beds 2 --baths 1 --size 70 --lat -23.56 --lng -46.65
    python -m valuation.data.cli market 01310-100
    python -m valuation.data.cli populate-proximity --batch-size 10 --limit 100
    python -m valuation.data.cli populate-proximity --ids abc123 def456
    python -m valuation.data.cli proximity-stats
"""

import argparse
import asyncio
import logging

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from valuation.config import require_database_url, settings
from valuation.data.comparables import SqlComparableSource
from valuation.data.market_cache import MarketCalibrationCache
from valuation.data.market_calibration import MarketCalibrationService
from valuation.data.pipeline import ValuationPipeline
from valuation.data.places import GooglePlacesClient
from valuation.data.property_store import PropertyStore
from valuation.data.proximity import ProximityScorer
from valuation.data.proximity_populator import ProximityBatchPopulator
from valuation.data.zoneval import ZonevalClient
from valuation.models.property import Coordinates, PropertyAttributes, RentalType, Usage
from valuation.models.proximity import ProximitySelection


def print_valuation(result) -> None:
    print(f"\n{'=' * 60}")
    print(f"  Valuation ({len(result.comparables)} comparables, precision {result.avg_precision}%)")
    print(f"{'=' * 60}")
    print(f"  Estimated Price:  R$ {result.estimated_price:,.0f}")
    print(f"  Median Price:     R$ {result.median_price:,.0f}")
    print(f"  Average Price:    R$ {result.avg_price:,.0f}")
    print(f"  Zipcode:          {result.zipcode or 'N/A'} ({result.zipcode_source or 'unresolved'})")
    if result.regional_price_per_area:
        print(f"  Regional R$/m²:   {result.regional_price_per_area:,.2f}")
    if result.market_validation:
        v = result.market_validation
        print(f"  Market Reality:   {v.market_reality.value} ({v.market_deviation_percent:+.2f}%)")
        print(f"  Confidence:       {v.confidence}")
        print(f"  Refined Price:    R$ {result.refined_price:,.0f}")
    if result.market_insight:
        print(f"  Insight:          {result.market_insight.message}")
    if result.proximity_analysis:
        p = result.proximity_analysis
        print(f"  Proximity Score:  {p.overall_proximity_score}{' (cached)' if p.cache_hit else ''}")
        for landmark in p.landmarks:
            print(f"    {landmark.category.value:>14}  {landmark.distance_meters:>7.0f}m  {landmark.name}")
    print()


def print_stats(stats) -> None:
    print(f"\n{'=' * 60}")
    print(f"  Proximity Statistics")
    print(f"{'=' * 60}")
    print(f"  Total properties:     {stats.total_properties}")
    print(f"  With proximity data:  {stats.with_proximity_data}")
    print(f"  Without:              {stats.without_proximity_data}")
    print(f"  Average score:        {stats.average_proximity_score}")
    print(f"  Beach access:         {stats.beach_access_count}")
    print(f"  Metro access:         {stats.metro_access_count}")
    print(f"  Shopping access:      {stats.shopping_access_count}")
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Property valuation CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="Value a property from its comparables")
    evaluate.add_argument("--type", dest="property_type", required=True, help="Property type, e.g. apartamento")
    evaluate.add_argument("--beds", type=int, required=True, help="Number of bedrooms")
    evaluate.add_argument("--baths", type=int, required=True, help="Number of bathrooms")
    evaluate.add_argument("--size", type=float, required=True, help="Area in m²")
    evaluate.add_argument("--parking", type=int, default=0, help="Parking spaces (default: 0)")
    evaluate.add_argument("--furnished", action="store_true", help="Furnished property")
    evaluate.add_argument("--usage", choices=[u.value for u in Usage], default=Usage.SALE.value)
    evaluate.add_argument("--rental-type", choices=[r.value for r in RentalType])
    evaluate.add_argument("--lat", type=float, required=True, help="Latitude")
    evaluate.add_argument("--lng", type=float, required=True, help="Longitude")
    evaluate.add_argument("--zipcode", help="Zipcode (skips reverse geocoding)")
    evaluate.add_argument("--no-proximity", action="store_true", help="Skip proximity analysis")

    market = sub.add_parser("market", help="Show regional market stats for a zipcode")
    market.add_argument("zipcode")

    populate = sub.add_parser("populate-proximity", help="Populate proximity data on stored properties")
    populate.add_argument("--ids", nargs="+", help="Explicit property ids")
    populate.add_argument("--offset", type=int, default=0)
    populate.add_argument("--limit", type=int, default=100)
    populate.add_argument("--older-than-days", type=int, help="Only missing or stale proximity data")
    populate.add_argument("--batch-size", type=int, default=settings.proximity_batch_size)
    populate.add_argument("--delay", type=float, default=settings.proximity_batch_delay_seconds)

    sub.add_parser("proximity-stats", help="Show proximity coverage statistics")
    return parser


async def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=settings.log_level)

    engine = create_async_engine(require_database_url(), echo=settings.debug)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    market = MarketCalibrationService(ZonevalClient(), MarketCalibrationCache(session_factory))
    scorer = ProximityScorer(GooglePlacesClient())
    populator = ProximityBatchPopulator(PropertyStore(session_factory), scorer)

    try:
        if args.command == "evaluate":
            pipeline = ValuationPipeline(SqlComparableSource(session_factory), market, proximity=scorer)
            subject = PropertyAttributes(
                property_type=args.property_type,
                bedrooms=args.beds,
                bathrooms=args.baths,
                size=args.size,
                parking_spaces=args.parking,
                furnished=args.furnished,
                usage=Usage(args.usage),
                rental_type=RentalType(args.rental_type) if args.rental_type else None,
                coordinates=Coordinates(args.lat, args.lng),
                zipcode=args.zipcode,
            )
            result = await pipeline.evaluate(subject, include_proximity=not args.no_proximity)
            print_valuation(result)

        elif args.command == "market":
            stats = await market.get_regional_stats(args.zipcode)
            if stats is None:
                print(f"No market stats available for {args.zipcode}")
                return
            print(stats.model_dump_json(by_alias=True, indent=2))

        elif args.command == "populate-proximity":
            selection = ProximitySelection(
                property_ids=args.ids,
                offset=args.offset,
                limit=args.limit,
                older_than_days=args.older_than_days,
            )
            summary = await populator.populate_many(selection, args.batch_size, args.delay)
            print(f"\nProcessed {summary.processed}: {summary.successful} successful, {summary.failed} failed\n")

        elif args.command == "proximity-stats":
            print_stats(await populator.stats())
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
