import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import BaseModel

from app.api.dependencies import get_pipeline, get_trip_repo
from app.core.errors import ConflictError
from app.core.repository import TripRepository
from app.core.schemas import EnrichedTrip, TripGenerateRequest
from app.core.trip_pipeline import TripEnrichmentPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


class SaveTripRequest(BaseModel):
    trip: EnrichedTrip
    is_public: bool = True


@router.post("/generate", response_model=dict[str, Any])
def generate_trip(
    payload: TripGenerateRequest,
    pipeline: TripEnrichmentPipeline = Depends(get_pipeline),
) -> dict[str, Any]:
    """
    Generate an itinerary for the request and enrich every stop with map data.

    Provider failures degrade to template itineraries and synthetic place data,
    so this only fails on unexpected errors.
    """
    trip = pipeline.build(payload)
    return trip.model_dump(mode="json")


@router.post("", status_code=status.HTTP_201_CREATED)
def save_trip(
    payload: SaveTripRequest,
    repo: TripRepository = Depends(get_trip_repo),
) -> dict[str, str]:
    try:
        trip_id = repo.save_trip(payload.trip, is_public=payload.is_public)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return {"id": trip_id, "message": "Trip saved successfully"}


@router.get("/public")
def list_public_trips(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    repo: TripRepository = Depends(get_trip_repo),
) -> dict[str, Any]:
    return {"trips": repo.list_public_trips(limit=limit, offset=offset)}


@router.get("/{trip_id}")
def get_trip(
    trip_id: str = Path(
        ...,
        min_length=1,
        max_length=50,
        pattern="^[a-zA-Z0-9_-]+$",
        description="Trip ID",
    ),
    repo: TripRepository = Depends(get_trip_repo),
) -> dict[str, Any]:
    data = repo.get_trip_by_id(trip_id)
    if not data:
        raise HTTPException(status_code=404, detail="Trip not found")
    return data
