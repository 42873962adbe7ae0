"""
Shared FastAPI dependencies. Tests replace these through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import HTTPException, status

from app.core.errors import ConfigurationMissingError
from app.core.geocoding import GeocodingProvider, get_geocoding_provider
from app.core.poi_service import PoiCatalog, get_poi_catalogs
from app.core.repository import TripRepository, get_repo
from app.core.routing import RoutePlanner, get_route_planner
from app.core.trip_pipeline import TripEnrichmentPipeline, build_trip_pipeline


@lru_cache
def get_pipeline() -> TripEnrichmentPipeline:
    return build_trip_pipeline()


@lru_cache
def get_geocoder() -> GeocodingProvider:
    return get_geocoding_provider()


@lru_cache
def get_catalogs() -> tuple[PoiCatalog, ...]:
    return tuple(get_poi_catalogs())


@lru_cache
def get_route_service() -> RoutePlanner:
    return get_route_planner()


def get_trip_repo() -> TripRepository:
    try:
        return get_repo()
    except ConfigurationMissingError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
