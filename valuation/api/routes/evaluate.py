"""Valuation routes: the primary API entry point."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from valuation.api.deps import get_pipeline
from valuation.api.schemas import (
    ComparableResponse,
    EvaluateRequest,
    EvaluateResponse,
    LandmarkResponse,
    MarketValidationResponse,
    ProximityResponse,
)
from valuation.data.comparables import ComparableRetrievalError
from valuation.data.pipeline import ValuationPipeline
from valuation.models.property import Coordinates, PropertyAttributes
from valuation.models.proximity import ProximityResult
from valuation.models.valuation import ValuationResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["valuation"])


def _to_subject(req: EvaluateRequest) -> PropertyAttributes:
    return PropertyAttributes(
        property_type=req.type,
        bedrooms=req.bedrooms,
        bathrooms=req.bathrooms,
        size=req.size,
        parking_spaces=req.parking_spaces,
        furnished=req.furnished,
        usage=req.usage,
        rental_type=req.rental_type,
        coordinates=Coordinates(req.lat, req.lng),
        zipcode=req.zipcode,
        city=req.city,
        state=req.state,
    )


def _proximity_to_response(result: ProximityResult) -> ProximityResponse:
    return ProximityResponse(
        landmarks=[
            LandmarkResponse(
                id=l.id,
                name=l.name,
                type=l.category.value,
                lat=l.coordinates.latitude,
                lng=l.coordinates.longitude,
                distance=round(l.distance_meters, 1),
                proximity_score=l.proximity_score,
                rating=l.rating,
            )
            for l in result.landmarks
        ],
        overall_proximity_score=result.overall_proximity_score,
        has_beach_access=result.has_beach_access,
        has_shopping_access=result.has_shopping_access,
        cache_hit=result.cache_hit,
        failed_categories=[c.value for c in result.failed_categories],
    )


def _result_to_response(result: ValuationResult) -> EvaluateResponse:
    validation = None
    if result.market_validation is not None:
        v = result.market_validation
        validation = MarketValidationResponse(
            confidence=v.confidence,
            price_per_area_estimate=v.price_per_area_estimate,
            price_per_area_median=v.price_per_area_median,
            market_reality=v.market_reality,
            market_deviation_percent=v.market_deviation_percent,
        )

    return EvaluateResponse(
        estimated_price=result.estimated_price,
        median_price=result.median_price,
        avg_price=result.avg_price,
        avg_precision=result.avg_precision,
        comparables=[
            ComparableResponse(
                id=c.id,
                type=c.property_type,
                price=c.price,
                bedrooms=c.bedrooms,
                bathrooms=c.bathrooms,
                size=c.size,
                parking_spaces=c.parking_spaces,
                furnished=c.furnished,
                usage=c.usage,
                rental_type=c.rental_type,
                city=c.city,
                state=c.state,
                neighborhood=c.neighborhood,
                street=c.street,
                link=c.link,
                similarity_score=c.similarity_score,
                distance_km=c.distance_km,
            )
            for c in result.comparables
        ],
        zipcode=result.zipcode,
        zipcode_source=result.zipcode_source,
        regional_price_per_area=result.regional_price_per_area,
        refined_price=result.refined_price,
        market_validation=validation,
        market_insight=result.market_insight,
        proximity_analysis=(
            _proximity_to_response(result.proximity_analysis)
            if result.proximity_analysis is not None else None
        ),
    )


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(req: EvaluateRequest, pipeline: ValuationPipeline = Depends(get_pipeline)):
    """Estimate a property's price from comparables, refined by market and location data."""
    try:
        result = await pipeline.evaluate(_to_subject(req), include_proximity=req.include_proximity)
    except ComparableRetrievalError as e:
        logger.error("Valuation failed: %s", e)
        raise HTTPException(status_code=502, detail="Comparable retrieval failed")

    return _result_to_response(result)
