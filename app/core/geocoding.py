"""
Geocoding providers: an open Nominatim backend and a keyed Google Maps backend.

Both implement the same GeocodingProvider interface; get_geocoding_provider()
chooses one from the configured credentials.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from app.core.errors import ConfigurationMissingError, NotFoundError, TransportError
from app.core.rate_limiter import RateLimiter, get_nominatim_rate_limiter
from app.core.schemas import (
    AutocompleteSuggestion,
    GeocodeResult,
    PlaceDetails,
    ReverseGeocodeResult,
)
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_PLACES_BASE = "https://maps.googleapis.com/maps/api/place"
GOOGLE_AUTOCOMPLETE_URL = f"{GOOGLE_PLACES_BASE}/autocomplete/json"
GOOGLE_DETAILS_URL = f"{GOOGLE_PLACES_BASE}/details/json"
GOOGLE_DETAILS_FIELDS = (
    "name,formatted_address,geometry,rating,user_ratings_total,photos,"
    "opening_hours,price_level,website,formatted_phone_number"
)

# Nominatim lookup wants N/W/R prefixed ids
OSM_LOOKUP_PREFIXES = {"node": "N", "way": "W", "relation": "R"}

# OSM place types mapped onto Google-style types for autocomplete results
OSM_TYPE_MAPPING = {
    "city": "locality",
    "town": "locality",
    "village": "locality",
    "country": "country",
    "state": "administrative_area_level_1",
    "county": "administrative_area_level_2",
}


def fetch_json(
    url: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float = 10,
) -> Any:
    """GET a JSON document, converting every transport failure into TransportError."""
    try:
        response = requests.get(url, params=params, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise TransportError(f"GET {url} failed: {e}", status_code=status) from e
    except requests.exceptions.RequestException as e:
        raise TransportError(f"GET {url} failed: {e}") from e
    except ValueError as e:
        raise TransportError(f"GET {url} returned invalid JSON: {e}") from e


def google_api_get(
    url: str, params: dict[str, Any], api_key: str, timeout: float = 10
) -> dict[str, Any]:
    """Call a Google Maps web service and check its "status" field."""
    data = fetch_json(url, params={**params, "key": api_key}, timeout=timeout)
    if not isinstance(data, dict):
        raise TransportError(f"Unexpected Google payload from {url}")
    status = data.get("status")
    if status in ("ZERO_RESULTS", "NOT_FOUND"):
        raise NotFoundError(f"Google returned {status} for {params}")
    if status != "OK":
        raise TransportError(f"Google request failed with status {status}")
    return data


def google_photo_url(api_key: str, photo_reference: str | None, max_width: int = 400) -> str | None:
    if not photo_reference:
        return None
    return (
        f"{GOOGLE_PLACES_BASE}/photo"
        f"?maxwidth={max_width}"
        f"&photo_reference={photo_reference}"
        f"&key={api_key}"
    )


def fetch_google_place_details(
    api_key: str, place_id: str, timeout: float = 10, fields: str = GOOGLE_DETAILS_FIELDS
) -> dict[str, Any]:
    """Fetch the Place Details "result" object for a Google place id."""
    data = google_api_get(
        GOOGLE_DETAILS_URL, {"place_id": place_id, "fields": fields}, api_key, timeout
    )
    result = data.get("result")
    if not isinstance(result, dict):
        raise NotFoundError(f"No Google place details for '{place_id}'")
    return result


def weekly_opening_hours(details: dict[str, Any]) -> list[str] | None:
    """Google's weekday_text lines ("Monday: 9:00 AM - 5:00 PM", ...) or None. open_now is ignored."""
    weekday_text = (details.get("opening_hours") or {}).get("weekday_text")
    if not weekday_text:
        return None
    return [str(line) for line in weekday_text]


class GeocodingProvider(ABC):
    """Common capability interface for geocoding backends."""

    name: str = "geocoder"
    requires_throttling: bool = False

    @abstractmethod
    def geocode(self, address: str) -> GeocodeResult:
        """Resolve free text to coordinates. Raises NotFoundError or TransportError."""

    @abstractmethod
    def reverse_geocode(self, lat: float, lng: float) -> ReverseGeocodeResult:
        """Resolve coordinates to a formatted address."""

    @abstractmethod
    def autocomplete(self, query: str, limit: int = 5) -> list[AutocompleteSuggestion]:
        """Return place suggestions for a partial query."""

    @abstractmethod
    def get_place_details(self, external_id: str) -> PlaceDetails:
        """Fetch the full record for an id this backend issued. Raises NotFoundError."""


class NominatimGeocoder(GeocodingProvider):
    """OpenStreetMap Nominatim. Requires an identifying User-Agent and 1 req/s."""

    name = "nominatim"
    requires_throttling = True

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        rate_limiter: RateLimiter,
        timeout: float = 10,
    ) -> None:
        if not user_agent:
            raise ConfigurationMissingError("Nominatim requires an identifying User-Agent")
        self.base_url = base_url.rstrip("/")
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self.rate_limiter = rate_limiter
        self.timeout = timeout

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        self.rate_limiter.acquire()
        return fetch_json(
            f"{self.base_url}/{path}",
            params=params,
            headers=self.headers,
            timeout=self.timeout,
        )

    def geocode(self, address: str) -> GeocodeResult:
        data = self._get(
            "search",
            {"q": address, "format": "json", "limit": 1, "addressdetails": 1},
        )
        if not isinstance(data, list):
            raise TransportError(f"Unexpected Nominatim payload for '{address}'")
        if not data:
            raise NotFoundError(f"No Nominatim results for '{address}'")

        result = data[0]
        try:
            lat = float(result["lat"])
            lng = float(result["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed Nominatim result for '{address}': {e}") from e

        external_id = None
        if result.get("osm_type") and result.get("osm_id"):
            external_id = f"osm_{result['osm_type']}_{result['osm_id']}"

        return GeocodeResult(
            lat=lat,
            lng=lng,
            formatted_address=result.get("display_name") or address,
            external_id=external_id,
        )

    def reverse_geocode(self, lat: float, lng: float) -> ReverseGeocodeResult:
        data = self._get(
            "reverse",
            {"lat": lat, "lon": lng, "format": "json", "addressdetails": 1},
        )
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected Nominatim payload for ({lat}, {lng})")
        if data.get("error") or not data.get("display_name"):
            raise NotFoundError(f"No Nominatim address for ({lat}, {lng})")
        return ReverseGeocodeResult(formatted_address=data["display_name"])

    def get_place_details(self, external_id: str) -> PlaceDetails:
        """Look up an "osm_<type>_<id>" identifier with the Nominatim lookup endpoint."""
        osm_type, _, osm_id = external_id.removeprefix("osm_").partition("_")
        prefix = OSM_LOOKUP_PREFIXES.get(osm_type)
        if not external_id.startswith("osm_") or prefix is None or not osm_id.isdigit():
            raise NotFoundError(f"Not an OpenStreetMap place id: '{external_id}'")

        data = self._get(
            "lookup",
            {"osm_ids": f"{prefix}{osm_id}", "format": "json", "extratags": 1},
        )
        if not isinstance(data, list):
            raise TransportError(f"Unexpected Nominatim payload for '{external_id}'")
        if not data:
            raise NotFoundError(f"No Nominatim record for '{external_id}'")

        place = data[0]
        tags = place.get("extratags") or {}
        display_name = place.get("display_name", "")
        try:
            lat, lng = float(place["lat"]), float(place["lon"])
        except (KeyError, TypeError, ValueError):
            lat = lng = None

        return PlaceDetails(
            external_id=external_id,
            name=place.get("name") or display_name.split(",")[0],
            address=display_name,
            lat=lat,
            lng=lng,
            opening_hours=[tags["opening_hours"]] if tags.get("opening_hours") else None,
            website=tags.get("website") or tags.get("contact:website"),
            phone=tags.get("phone") or tags.get("contact:phone"),
        )

    def autocomplete(self, query: str, limit: int = 5) -> list[AutocompleteSuggestion]:
        data = self._get(
            "search",
            {"q": query, "format": "json", "limit": limit, "addressdetails": 1},
        )
        suggestions = []
        for place in data if isinstance(data, list) else []:
            display_name = place.get("display_name", "")
            parts = [p.strip() for p in display_name.split(",")]
            suggestions.append(
                AutocompleteSuggestion(
                    place_id=f"osm_{place.get('osm_type')}_{place.get('osm_id')}",
                    description=display_name,
                    main_text=place.get("name") or parts[0],
                    secondary_text=", ".join(parts[1:]),
                    types=self._place_types(place),
                )
            )
        return suggestions

    @staticmethod
    def _place_types(place: dict[str, Any]) -> list[str]:
        types = [t for t in (place.get("type"), place.get("class")) if t]
        types.extend(OSM_TYPE_MAPPING[t] for t in list(types) if t in OSM_TYPE_MAPPING)
        return types or ["establishment"]


class GoogleGeocoder(GeocodingProvider):
    """Google Maps Geocoding + Places Autocomplete (keyed, not throttled here)."""

    name = "google"
    requires_throttling = False

    def __init__(self, api_key: str, timeout: float = 10) -> None:
        if not api_key:
            raise ConfigurationMissingError("GOOGLE_MAPS_API_KEY not configured")
        self.api_key = api_key
        self.timeout = timeout

    def _get(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        return google_api_get(url, params, self.api_key, self.timeout)

    def geocode(self, address: str) -> GeocodeResult:
        data = self._get(GOOGLE_GEOCODE_URL, {"address": address})
        results = data.get("results") or []
        if not results:
            raise NotFoundError(f"No Google results for '{address}'")

        result = results[0]
        try:
            location = result["geometry"]["location"]
            lat, lng = float(location["lat"]), float(location["lng"])
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed Google result for '{address}': {e}") from e

        return GeocodeResult(
            lat=lat,
            lng=lng,
            formatted_address=result.get("formatted_address") or address,
            external_id=result.get("place_id"),
        )

    def reverse_geocode(self, lat: float, lng: float) -> ReverseGeocodeResult:
        data = self._get(GOOGLE_GEOCODE_URL, {"latlng": f"{lat},{lng}"})
        results = data.get("results") or []
        if not results:
            raise NotFoundError(f"No Google address for ({lat}, {lng})")
        return ReverseGeocodeResult(formatted_address=results[0]["formatted_address"])

    def autocomplete(self, query: str, limit: int = 5) -> list[AutocompleteSuggestion]:
        try:
            data = self._get(
                GOOGLE_AUTOCOMPLETE_URL,
                {"input": query, "types": "(cities)", "language": "en"},
            )
        except NotFoundError:
            return []

        suggestions = []
        for prediction in data.get("predictions", [])[:limit]:
            formatting = prediction.get("structured_formatting", {})
            suggestions.append(
                AutocompleteSuggestion(
                    place_id=prediction.get("place_id", ""),
                    description=prediction.get("description", ""),
                    main_text=formatting.get("main_text") or prediction.get("description", ""),
                    secondary_text=formatting.get("secondary_text", ""),
                    types=prediction.get("types", []),
                )
            )
        return suggestions

    def get_place_details(self, external_id: str) -> PlaceDetails:
        result = fetch_google_place_details(self.api_key, external_id, timeout=self.timeout)
        location = (result.get("geometry") or {}).get("location") or {}
        photos = [
            google_photo_url(self.api_key, photo.get("photo_reference"))
            for photo in result.get("photos") or []
        ]
        return PlaceDetails(
            external_id=external_id,
            name=result.get("name", ""),
            address=result.get("formatted_address", ""),
            lat=location.get("lat"),
            lng=location.get("lng"),
            rating=result.get("rating"),
            review_count=result.get("user_ratings_total"),
            opening_hours=weekly_opening_hours(result),
            price_level=result.get("price_level"),
            website=result.get("website"),
            phone=result.get("formatted_phone_number"),
            photo_urls=[url for url in photos if url],
        )


def get_geocoding_provider(settings: Settings | None = None) -> GeocodingProvider:
    """
    Build the geocoder for the available configuration.

    Google is used when an API key is configured, unless GEOCODER_BACKEND
    forces "nominatim". Nominatim instances share one process-wide limiter.
    """
    settings = settings or get_settings()
    backend = settings.geocoder_backend.lower()

    if backend != "nominatim" and settings.google_maps_api_key:
        logger.info("Using Google Maps geocoder")
        return GoogleGeocoder(settings.google_maps_api_key, timeout=settings.http_timeout_seconds)

    if backend == "google":
        logger.warning("GEOCODER_BACKEND=google but no GOOGLE_MAPS_API_KEY; using Nominatim")

    logger.info("Using Nominatim geocoder")
    limiter = get_nominatim_rate_limiter(settings.nominatim_min_interval_ms / 1000)
    return NominatimGeocoder(
        base_url=settings.nominatim_api_url,
        user_agent=settings.nominatim_user_agent,
        rate_limiter=limiter,
        timeout=settings.http_timeout_seconds,
    )
