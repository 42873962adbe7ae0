"""
Place enrichment: geocode a generated stop, merge in secondary catalog data and
backfill anything no provider supplied.

Field values are merged by coalesce() in a fixed precedence order:

    geocoder  >  POI catalog match  >  image lookup  >  existing values  >  synthetic

so a non-empty value already on the input is never replaced by a synthetic one.
"""

import logging
import random
from typing import Any

from app.core.errors import NotFoundError, TransportError
from app.core.geo_utils import approximate_city_centroid, jitter_coordinates
from app.core.geocoding import GeocodingProvider
from app.core.image_service import WikipediaImageLookup
from app.core.poi_service import PoiCatalog, match_candidate
from app.core.schemas import EnrichedPlace, GeocodeResult, PlaceStub

logger = logging.getLogger(__name__)

# Fields owned by enrichment; "coordinates" is the (lat, lng) pair
ENRICHMENT_FIELDS = (
    "address",
    "coordinates",
    "rating",
    "review_count",
    "image_url",
    "external_id",
    "opening_hours",
    "price_level",
)

POI_SEARCH_RADIUS_METERS = 1000
COORDINATE_JITTER_DEGREES = 0.02
PLACEHOLDER_IMAGE_URL = "https://picsum.photos/300/200?random={seed}"

Layer = dict[str, Any]


def is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list, tuple)) and len(value) == 0)


def coalesce(*layers: Layer) -> Layer:
    """Take, per enrichment field, the first non-empty value across layers in order."""
    merged: Layer = {}
    for field in ENRICHMENT_FIELDS:
        for layer in layers:
            value = layer.get(field)
            if not is_empty(value):
                merged[field] = value
                break
    return merged


def existing_layer(place: PlaceStub) -> Layer:
    """Enrichment values already present on the input (e.g. a re-enriched place)."""
    lat = getattr(place, "lat", None)
    lng = getattr(place, "lng", None)
    return {
        "address": place.address,
        "coordinates": (lat, lng) if lat is not None and lng is not None else None,
        "rating": getattr(place, "rating", None),
        "review_count": getattr(place, "review_count", None),
        "image_url": getattr(place, "image_url", None),
        "external_id": getattr(place, "external_id", None),
        "opening_hours": getattr(place, "opening_hours", None),
        "price_level": getattr(place, "price_level", None),
    }


def geocode_layer(result: GeocodeResult) -> Layer:
    return {
        "address": result.formatted_address,
        "coordinates": (result.lat, result.lng),
        "external_id": result.external_id,
    }


class PlaceEnricher:
    """Turns a PlaceStub into a fully populated EnrichedPlace without ever raising."""

    def __init__(
        self,
        geocoder: GeocodingProvider,
        poi_catalogs: list[PoiCatalog] | None = None,
        image_lookup: WikipediaImageLookup | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.geocoder = geocoder
        self.poi_catalogs = poi_catalogs or []
        self.image_lookup = image_lookup
        self.rng = rng or random.Random()

    @property
    def requires_throttling(self) -> bool:
        return self.geocoder.requires_throttling

    def enrich(self, stub: PlaceStub, reference_location: str) -> EnrichedPlace:
        """
        Enrich a single place.

        Args:
            stub: Generated place (an already enriched place is accepted too)
            reference_location: Trip destination, e.g. "Paris, France"

        Returns:
            EnrichedPlace with every enrichment field defined
        """
        query = f"{stub.name} {reference_location}"
        layers: list[Layer] = []

        try:
            result = self.geocoder.geocode(query)
        except NotFoundError:
            logger.info(f"No geocoding results for '{query}', using fallback values")
            result = None
        except TransportError as e:
            logger.warning(f"Geocoding failed for '{query}': {e}")
            result = None

        if result is not None:
            layers.append(geocode_layer(result))
            layers.append(self._poi_layer(stub.name, result.lat, result.lng))
            layers.append(self._image_layer(stub.name, reference_location))

        layers.append(existing_layer(stub))
        layers.append(self._synthetic_layer(stub, reference_location))
        return self._build(stub, coalesce(*layers))

    def backfill(self, stub: PlaceStub, reference_location: str) -> EnrichedPlace:
        """Fill the enrichment fields from the input and synthetic values only."""
        merged = coalesce(existing_layer(stub), self._synthetic_layer(stub, reference_location))
        return self._build(stub, merged)

    def _poi_layer(self, name: str, lat: float, lng: float) -> Layer:
        for catalog in self.poi_catalogs:
            try:
                candidates = catalog.search_nearby(lat, lng, radius=POI_SEARCH_RADIUS_METERS)
            except Exception as e:
                logger.warning(f"{catalog.name} lookup failed for '{name}': {e}")
                continue

            match = match_candidate(name, candidates)
            if match is None:
                continue
            logger.debug(f"{catalog.name} matched '{name}' to '{match.name}'")
            try:
                match = catalog.with_details(match)
            except Exception as e:
                logger.warning(f"{catalog.name} details failed for '{match.name}': {e}")
            return {
                "rating": match.rating,
                "review_count": match.review_count,
                "image_url": match.image_url,
                "external_id": match.external_id,
                "opening_hours": match.opening_hours,
                "price_level": match.price_level,
            }
        return {}

    def _image_layer(self, name: str, reference_location: str) -> Layer:
        if self.image_lookup is None:
            return {}
        try:
            return {"image_url": self.image_lookup.find_image(name, reference_location)}
        except NotFoundError:
            return {}
        except Exception as e:
            logger.warning(f"Image lookup failed for '{name}': {e}")
            return {}

    def _synthetic_layer(self, stub: PlaceStub, reference_location: str) -> Layer:
        centroid = approximate_city_centroid(reference_location)
        return {
            "address": f"{stub.name}, {reference_location}",
            "coordinates": jitter_coordinates(
                *centroid, spread=COORDINATE_JITTER_DEGREES, rng=self.rng
            ),
            "rating": round(self.rng.uniform(3.0, 5.0), 1),
            "review_count": self.rng.randrange(50, 550),
            "image_url": PLACEHOLDER_IMAGE_URL.format(seed=self.rng.randrange(1000)),
        }

    @staticmethod
    def _build(stub: PlaceStub, merged: Layer) -> EnrichedPlace:
        base = stub.model_dump(include=set(PlaceStub.model_fields) - {"address"})
        lat, lng = merged["coordinates"]
        rating = min(5.0, max(0.0, round(float(merged["rating"]), 1)))

        return EnrichedPlace(
            **base,
            address=merged["address"],
            lat=float(lat),
            lng=float(lng),
            rating=rating,
            review_count=int(merged["review_count"]),
            image_url=merged["image_url"],
            external_id=merged.get("external_id"),
            opening_hours=merged.get("opening_hours"),
            price_level=merged.get("price_level"),
        )
