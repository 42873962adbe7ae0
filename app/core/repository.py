from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from pymongo import DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.errors import ConfigurationMissingError, ConflictError
from app.core.schemas import EnrichedTrip
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def trip_to_document(trip: EnrichedTrip, is_public: bool = True) -> dict[str, Any]:
    """Flatten an EnrichedTrip into the persisted trip document."""
    data = trip.model_dump(mode="json")
    return {
        "id": data["id"],
        "title": data["title"],
        "description": data["description"],
        "location": data["location"],
        "mood": data["mood"],
        "duration_hours": data["duration_hours"],
        "budget_tier": data["budget_tier"],
        "preferences": data["preferences"],
        "custom_prompt": data["request"].get("custom_prompt"),
        "itinerary": data["places"],
        "total_distance_label": data["total_distance_label"],
        "estimated_cost_label": data["estimated_cost_label"],
        "best_time_to_start": data["best_time_to_start"],
        "transportation_tips": data["transportation_tips"],
        "weather_notes": data["weather_notes"],
        "additional_tips": data["additional_tips"],
        "source": data["source"],
        "is_public": is_public,
        "view_count": 0,
        "created_at": data["created_at"],
    }


class TripRepository:
    def __init__(self, mongodb_uri: str, database_name: str) -> None:
        if not mongodb_uri:
            raise ConfigurationMissingError("MONGODB_URI environment variable is required")

        self.client = MongoClient(
            mongodb_uri,
            serverSelectionTimeoutMS=5000,  # 5 second timeout
            connectTimeoutMS=10000,  # 10 second connection timeout
            socketTimeoutMS=20000,  # 20 second socket timeout
            retryWrites=True,
            retryReads=True,
        )
        self.db = self.client[database_name]
        self.trips_collection = self.db.trips

        try:
            self.trips_collection.create_index("id", unique=True)
            self.trips_collection.create_index([("is_public", 1), ("created_at", DESCENDING)])
        except Exception as e:
            logger.warning(f"Index creation failed (continuing without indexes): {e}")

    def save_trip(self, trip: EnrichedTrip, is_public: bool = True) -> str:
        doc = trip_to_document(trip, is_public=is_public)
        try:
            self.trips_collection.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"Trip {doc['id']} already exists") from e
        logger.info(f"Saved trip {doc['id']}")
        return doc["id"]

    def get_trip_by_id(self, trip_id: str) -> dict | None:
        """Fetch a trip and count the view."""
        trip_doc = self.trips_collection.find_one_and_update(
            {"id": trip_id},
            {"$inc": {"view_count": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if trip_doc:
            trip_doc.pop("_id", None)  # Remove MongoDB ObjectId
        return trip_doc

    def list_public_trips(self, limit: int = 20, offset: int = 0) -> list[dict]:
        cursor = (
            self.trips_collection.find({"is_public": True})
            .sort("created_at", DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        trips = []
        for trip_doc in cursor:
            trip_doc.pop("_id", None)
            trips.append(trip_doc)
        return trips


@lru_cache
def _cached_repo(mongodb_uri: str, database_name: str) -> TripRepository:
    return TripRepository(mongodb_uri, database_name)


def get_repo(settings: Settings | None = None) -> TripRepository:
    """Return the shared repository for the configured database."""
    settings = settings or get_settings()
    return _cached_repo(settings.mongodb_uri, settings.database_name)
