from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

Mood = Literal["fun", "chill", "nature", "romantic"]
Preference = Literal["foodie", "cultural", "shopping"]


# =============================================================================
# Trip request
# =============================================================================


class TripRequest(BaseModel):
    """Immutable trip parameters collected from the client."""

    model_config = ConfigDict(frozen=True)

    mood: str = Field(..., min_length=1, description="fun, chill, nature or romantic")
    location: str = Field(..., min_length=1, max_length=200)
    duration_hours: int = Field(..., ge=1, le=24)
    budget_tier: int = Field(2, ge=0, le=4, description="0=free ... 4=premium+")
    preferences: frozenset[Preference] = Field(default_factory=frozenset)
    custom_prompt: str | None = Field(None, max_length=500)

    @field_validator("mood", mode="before")
    @classmethod
    def normalize_mood(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("location")
    @classmethod
    def strip_location(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("location must not be blank")
        return v


class TripGenerateRequest(TripRequest):
    """HTTP payload for trip generation; only the known moods are accepted."""

    mood: Mood


# =============================================================================
# Places
# =============================================================================


class PlaceStub(BaseModel):
    """A place as produced by generation, before geographic enrichment."""

    name: str = Field(..., min_length=1)
    type: str = Field("", description="Free-text category, e.g. 'Museum'")
    time: str = Field("", description="Display start time, e.g. '10:00 AM'")
    duration_label: str = Field(
        "", validation_alias=AliasChoices("duration_label", "durationLabel", "duration")
    )
    description: str = ""
    cost_label: str = Field(
        "", validation_alias=AliasChoices("cost_label", "costLabel", "cost")
    )
    address: str | None = None
    tips: str | None = None


class EnrichedPlace(PlaceStub):
    """A place with coordinates, rating and image, real or backfilled."""

    address: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    rating: float = Field(..., ge=0.0, le=5.0)
    review_count: int = Field(
        ..., ge=0, validation_alias=AliasChoices("review_count", "reviewCount", "reviews")
    )
    image_url: str = Field(
        ..., validation_alias=AliasChoices("image_url", "imageUrl", "image")
    )
    external_id: str | None = Field(None, description="Provider place identifier")
    opening_hours: list[str] | None = None
    price_level: int | None = Field(None, ge=0, le=4)


# =============================================================================
# Itineraries
# =============================================================================


class GeneratedItinerary(BaseModel):
    id: str
    created_at: datetime
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    places: list[PlaceStub] = Field(..., min_length=4, max_length=6)
    total_distance_label: str = ""
    estimated_cost_label: str = ""
    best_time_to_start: str = ""
    transportation_tips: str = ""
    weather_notes: str = ""
    additional_tips: str = ""
    # Echoed request parameters
    mood: str
    location: str
    duration_hours: int
    budget_tier: int
    preferences: list[str] = Field(default_factory=list)
    source: Literal["ai", "mock"] = "ai"


class EnrichedTrip(GeneratedItinerary):
    places: list[EnrichedPlace] = Field(..., min_length=1)
    request: TripRequest

    @classmethod
    def from_generated(
        cls, itinerary: GeneratedItinerary, places: list[EnrichedPlace], request: TripRequest
    ) -> "EnrichedTrip":
        data = itinerary.model_dump(exclude={"places"})
        return cls(**data, places=places, request=request)


# =============================================================================
# Geodata
# =============================================================================


class GeocodeResult(BaseModel):
    lat: float
    lng: float
    formatted_address: str
    external_id: str | None = None


class ReverseGeocodeResult(BaseModel):
    formatted_address: str


class AutocompleteSuggestion(BaseModel):
    place_id: str
    description: str
    main_text: str
    secondary_text: str = ""
    types: list[str] = Field(default_factory=list)


class PlaceDetails(BaseModel):
    """Full record for a place id from either geocoding backend."""

    external_id: str
    name: str
    address: str = ""
    lat: float | None = None
    lng: float | None = None
    rating: float | None = None
    review_count: int | None = None
    opening_hours: list[str] | None = Field(
        None, description="Weekly schedule, one line per day or an OSM opening_hours string"
    )
    price_level: int | None = None
    website: str | None = None
    phone: str | None = None
    photo_urls: list[str] = Field(default_factory=list)


class Coordinate(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RouteResult(BaseModel):
    distance_km: float
    duration_minutes: float
    geometry: list[list[float]] = Field(
        default_factory=list, description="[lng, lat] pairs along the route"
    )
    source: Literal["osrm", "estimate"]


class PoiCandidate(BaseModel):
    """A nearby point of interest returned by a secondary catalog."""

    name: str
    rating: float | None = None
    review_count: int | None = None
    external_id: str | None = None
    kinds: list[str] = Field(default_factory=list)
    image_url: str | None = None
    price_level: int | None = None
    opening_hours: list[str] | None = None
    lat: float | None = None
    lng: float | None = None


# =============================================================================
# HTTP payloads
# =============================================================================


class GeocodeRequest(BaseModel):
    address: str = Field(..., min_length=1, max_length=300)


class ReverseGeocodeRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class AutocompleteRequest(BaseModel):
    input: str = Field(..., min_length=1, max_length=100)
    limit: int = Field(5, ge=1, le=10)


class PlaceDetailsRequest(BaseModel):
    place_id: str = Field(..., min_length=1, max_length=300)


class RouteRequest(BaseModel):
    points: list[Coordinate] = Field(..., min_length=2, max_length=25)


class NearbyRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius: int = Field(1000, ge=100, le=50000)
