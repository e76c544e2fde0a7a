"""Proximity population routes for stored properties."""

from fastapi import APIRouter, Depends, HTTPException, Query

from valuation.api.deps import get_populator
from valuation.api.schemas import (
    PopulateProximityRequest,
    PopulationSummaryResponse,
    PropertiesNeedingUpdateResponse,
    ProximitySnapshotResponse,
    ProximityStatsResponse,
)
from valuation.data.property_store import NEEDING_UPDATE_LIMIT
from valuation.data.proximity_populator import ProximityBatchPopulator
from valuation.models.proximity import ProximitySelection

router = APIRouter(prefix="/proximity", tags=["proximity"])


@router.post("/populate", response_model=PopulationSummaryResponse)
async def populate(
    req: PopulateProximityRequest,
    populator: ProximityBatchPopulator = Depends(get_populator),
):
    """Populate proximity data for a selection of properties, in batches."""
    selection = ProximitySelection(
        property_ids=req.property_ids,
        offset=req.offset,
        limit=req.limit,
        older_than_days=req.older_than_days,
    )
    summary = await populator.populate_many(selection, req.batch_size, req.delay_seconds)
    return PopulationSummaryResponse(
        processed=summary.processed,
        successful=summary.successful,
        failed=summary.failed,
    )


@router.post("/populate/{property_id}", response_model=ProximitySnapshotResponse)
async def populate_one(property_id: str, populator: ProximityBatchPopulator = Depends(get_populator)):
    snapshot = await populator.populate_one(property_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Property not found, missing coordinates or update failed")

    return ProximitySnapshotResponse(
        property_id=snapshot.property_id,
        proximity_score=snapshot.proximity_score,
        has_beach_access=snapshot.has_beach_access,
        has_metro_access=snapshot.has_metro_access,
        has_shopping_access=snapshot.has_shopping_access,
        has_hospital_access=snapshot.has_hospital_access,
        has_school_access=snapshot.has_school_access,
        has_park_access=snapshot.has_park_access,
        landmarks=snapshot.landmarks,
        updated_at=snapshot.updated_at,
    )


@router.delete("/clear/{property_id}")
async def clear(property_id: str, populator: ProximityBatchPopulator = Depends(get_populator)):
    if not await populator.clear(property_id):
        raise HTTPException(status_code=404, detail="Property not found")
    return {"property_id": property_id, "cleared": True}


@router.get("/stats", response_model=ProximityStatsResponse)
async def stats(populator: ProximityBatchPopulator = Depends(get_populator)):
    s = await populator.stats()
    return ProximityStatsResponse(
        total_properties=s.total_properties,
        with_proximity_data=s.with_proximity_data,
        without_proximity_data=s.without_proximity_data,
        average_proximity_score=s.average_proximity_score,
        beach_access_count=s.beach_access_count,
        metro_access_count=s.metro_access_count,
        shopping_access_count=s.shopping_access_count,
    )


@router.get("/needing-update", response_model=PropertiesNeedingUpdateResponse)
async def needing_update(
    older_than_days: int | None = Query(None, ge=0),
    limit: int = Query(NEEDING_UPDATE_LIMIT, ge=1, le=5000),
    populator: ProximityBatchPopulator = Depends(get_populator),
):
    ids = await populator.properties_needing_update(older_than_days, limit)
    return PropertiesNeedingUpdateResponse(property_ids=ids, count=len(ids))
