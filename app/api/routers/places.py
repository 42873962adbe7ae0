import logging

from fastapi import APIRouter, Depends, HTTPException, Path

from app.api.dependencies import get_catalogs, get_geocoder, get_route_service
from app.core.errors import NotFoundError, TransportError
from app.core.geocoding import GeocodingProvider
from app.core.poi_service import PoiCatalog
from app.core.routing import RoutePlanner
from app.core.schemas import (
    AutocompleteRequest,
    AutocompleteSuggestion,
    GeocodeRequest,
    GeocodeResult,
    NearbyRequest,
    PlaceDetails,
    PlaceDetailsRequest,
    PoiCandidate,
    ReverseGeocodeRequest,
    ReverseGeocodeResult,
    RouteRequest,
    RouteResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/places", tags=["places"])


@router.post("/geocode", response_model=GeocodeResult)
def geocode(
    payload: GeocodeRequest,
    geocoder: GeocodingProvider = Depends(get_geocoder),
) -> GeocodeResult:
    """Resolve a free-text address to coordinates."""
    try:
        return geocoder.geocode(payload.address)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="No results for address")
    except TransportError as e:
        raise HTTPException(status_code=502, detail=f"Geocoding failed: {e}")


@router.post("/reverse", response_model=ReverseGeocodeResult)
def reverse_geocode(
    payload: ReverseGeocodeRequest,
    geocoder: GeocodingProvider = Depends(get_geocoder),
) -> ReverseGeocodeResult:
    """Resolve coordinates to an address, falling back to the coordinates themselves."""
    try:
        return geocoder.reverse_geocode(payload.lat, payload.lng)
    except (NotFoundError, TransportError) as e:
        logger.warning(f"Reverse geocoding failed for ({payload.lat}, {payload.lng}): {e}")
        return ReverseGeocodeResult(formatted_address=f"{payload.lat:.4f}, {payload.lng:.4f}")


@router.post("/autocomplete", response_model=list[AutocompleteSuggestion])
def autocomplete(
    payload: AutocompleteRequest,
    geocoder: GeocodingProvider = Depends(get_geocoder),
) -> list[AutocompleteSuggestion]:
    """Return destination suggestions for a free-text query."""
    try:
        return geocoder.autocomplete(payload.input, limit=payload.limit)
    except TransportError as e:
        raise HTTPException(status_code=502, detail=f"Autocomplete failed: {e}")


@router.post("/nearby", response_model=list[PoiCandidate])
def nearby(
    payload: NearbyRequest,
    catalogs: tuple[PoiCatalog, ...] = Depends(get_catalogs),
) -> list[PoiCandidate]:
    """Points of interest near a coordinate from every configured catalog."""
    results: list[PoiCandidate] = []
    for catalog in catalogs:
        try:
            results.extend(catalog.search_nearby(payload.lat, payload.lng, radius=payload.radius))
        except TransportError as e:
            logger.warning(f"{catalog.name} nearby search failed: {e}")
    return results


@router.post("/route", response_model=RouteResult)
def route(
    payload: RouteRequest,
    planner: RoutePlanner = Depends(get_route_service),
) -> RouteResult:
    """Distance, duration and geometry of a route through the points in order."""
    return planner.route(payload.points)


@router.post("/details", response_model=PlaceDetails)
def place_details(
    payload: PlaceDetailsRequest,
    geocoder: GeocodingProvider = Depends(get_geocoder),
) -> PlaceDetails:
    """Full record for a place id returned by geocoding or autocomplete."""
    try:
        return geocoder.get_place_details(payload.place_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Place not found")
    except TransportError as e:
        raise HTTPException(status_code=502, detail=f"Place details failed: {e}")


@router.get("/{place_id}", response_model=PlaceDetails)
def get_place(
    place_id: str = Path(..., min_length=1, max_length=300, description="Place ID"),
    geocoder: GeocodingProvider = Depends(get_geocoder),
) -> PlaceDetails:
    return place_details(PlaceDetailsRequest(place_id=place_id), geocoder)
