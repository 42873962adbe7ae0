"""
Points-of-interest catalogs used to recover ratings and metadata near a geocoded place.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from app.core.errors import ConfigurationMissingError, NotFoundError
from app.core.geocoding import (
    GOOGLE_PLACES_BASE,
    fetch_google_place_details,
    fetch_json,
    google_api_get,
    google_photo_url,
    weekly_opening_hours,
)
from app.core.schemas import PoiCandidate
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

OPENTRIPMAP_API_BASE = "https://api.opentripmap.com/0.1/en/places"
OPENTRIPMAP_KINDS = (
    "interesting_places,tourist_facilities,museums,theatres_and_entertainments,"
    "architecture,historic,natural,sport,amusements,shops"
)
PLACES_API_BASE = GOOGLE_PLACES_BASE


class PoiCatalog(ABC):
    """A searchable catalog of nearby points of interest."""

    name: str = "catalog"

    @abstractmethod
    def search_nearby(self, lat: float, lng: float, radius: int = 1000) -> list[PoiCandidate]:
        """Return candidates near a coordinate. Raises TransportError on failure."""

    def with_details(self, candidate: PoiCandidate) -> PoiCandidate:
        """Complete a matched candidate with a per-place lookup, if the catalog has one."""
        return candidate


class OpenTripMapCatalog(PoiCatalog):
    """OpenTripMap radius search (keyed, free tier)."""

    name = "opentripmap"

    def __init__(self, api_key: str, timeout: float = 10, limit: int = 10) -> None:
        if not api_key:
            raise ConfigurationMissingError("OPENTRIPMAP_API_KEY not configured")
        self.api_key = api_key
        self.timeout = timeout
        self.limit = limit

    def search_nearby(self, lat: float, lng: float, radius: int = 1000) -> list[PoiCandidate]:
        data = fetch_json(
            f"{OPENTRIPMAP_API_BASE}/radius",
            params={
                "radius": radius,
                "lon": lng,
                "lat": lat,
                "kinds": OPENTRIPMAP_KINDS,
                "format": "json",
                "limit": self.limit,
                "apikey": self.api_key,
            },
            timeout=self.timeout,
        )

        # format=json yields a list; the GeoJSON default wraps it in "features"
        if isinstance(data, dict):
            records = [f.get("properties", {}) for f in data.get("features", [])]
        else:
            records = data or []

        candidates = []
        for record in records:
            if not record.get("name"):
                continue
            point = record.get("point") or {}
            candidates.append(
                PoiCandidate(
                    name=record["name"],
                    rating=self.scale_rate(record.get("rate")),
                    external_id=record.get("xid"),
                    kinds=[k for k in (record.get("kinds") or "").split(",") if k],
                    lat=point.get("lat"),
                    lng=point.get("lon"),
                )
            )
        return candidates

    @staticmethod
    def scale_rate(rate: Any) -> float | None:
        """
        Convert an OpenTripMap popularity rate to a 0-5 rating.

        OpenTripMap rates on 0-3, optionally suffixed with "h" for heritage
        sites (e.g. "3h"). A rate of 0 carries no information.
        """
        if rate is None:
            return None
        match = re.match(r"\s*(\d+(?:\.\d+)?)", str(rate))
        if not match:
            return None
        value = float(match.group(1))
        if value <= 0:
            return None
        return round(min(value, 3.0) / 3.0 * 5.0, 1)


class GooglePlacesCatalog(PoiCatalog):
    """Google Places Nearby Search, with Place Details for the matched candidate."""

    name = "google_places"

    def __init__(self, api_key: str, timeout: float = 10) -> None:
        if not api_key:
            raise ConfigurationMissingError("GOOGLE_MAPS_API_KEY not configured")
        self.api_key = api_key
        self.timeout = timeout

    def get_place_photo_url(self, photo_reference: str | None, max_width: int = 400) -> str | None:
        return google_photo_url(self.api_key, photo_reference, max_width=max_width)

    def search_nearby(self, lat: float, lng: float, radius: int = 1000) -> list[PoiCandidate]:
        try:
            data = google_api_get(
                f"{PLACES_API_BASE}/nearbysearch/json",
                {"location": f"{lat},{lng}", "radius": radius},
                self.api_key,
                self.timeout,
            )
        except NotFoundError:
            return []

        candidates = []
        for place in data.get("results", []):
            photos = place.get("photos") or [{}]
            location = (place.get("geometry") or {}).get("location") or {}
            candidates.append(
                PoiCandidate(
                    name=place.get("name", ""),
                    rating=place.get("rating"),
                    review_count=place.get("user_ratings_total"),
                    external_id=place.get("place_id"),
                    kinds=place.get("types", []),
                    image_url=self.get_place_photo_url(photos[0].get("photo_reference")),
                    price_level=place.get("price_level"),
                    lat=location.get("lat"),
                    lng=location.get("lng"),
                )
            )
        return candidates

    def with_details(self, candidate: PoiCandidate) -> PoiCandidate:
        if not candidate.external_id:
            return candidate
        details = fetch_google_place_details(
            self.api_key,
            candidate.external_id,
            timeout=self.timeout,
            fields="opening_hours,price_level,rating,user_ratings_total",
        )
        return candidate.model_copy(
            update={
                "opening_hours": weekly_opening_hours(details),
                "rating": details.get("rating", candidate.rating),
                "review_count": details.get("user_ratings_total", candidate.review_count),
                "price_level": details.get("price_level", candidate.price_level),
            }
        )


def match_candidate(name: str, candidates: list[PoiCandidate]) -> PoiCandidate | None:
    """
    Pick the candidate that best corresponds to a place name.

    First candidate whose name contains the place name (case-insensitive),
    otherwise the first candidate, otherwise None.
    """
    if not candidates:
        return None
    needle = name.strip().lower()
    for candidate in candidates:
        if needle and needle in candidate.name.lower():
            return candidate
    return candidates[0]


def get_poi_catalogs(settings: Settings | None = None) -> list[PoiCatalog]:
    """Build every catalog that has credentials configured."""
    settings = settings or get_settings()
    catalogs: list[PoiCatalog] = []
    if settings.google_maps_api_key:
        catalogs.append(
            GooglePlacesCatalog(settings.google_maps_api_key, timeout=settings.http_timeout_seconds)
        )
    if settings.opentripmap_api_key:
        catalogs.append(
            OpenTripMapCatalog(settings.opentripmap_api_key, timeout=settings.http_timeout_seconds)
        )
    if not catalogs:
        logger.info("No POI catalog configured; ratings will be backfilled")
    return catalogs
