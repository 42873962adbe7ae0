import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routers.places import router as places_router
from app.api.routers.trips import router as trips_router
from app.core.llm_provider import missing_api_key
from app.core.settings import get_settings

load_dotenv()


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    application = FastAPI(title="MoodTrip Backend")

    # CORS: local frontend during development
    allowed_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Add production origins from environment if set
    if settings.allowed_origins:
        allowed_origins.extend(
            [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @application.get("/healthz")
    def healthz() -> dict:
        """Report which backends are active; "mock" means template itineraries."""
        s = get_settings()
        use_google = bool(s.google_maps_api_key) and s.geocoder_backend.lower() != "nominatim"
        return {
            "status": "ok",
            "ai_model": "mock" if missing_api_key(s.aisuite_model) else s.aisuite_model,
            "geocoder": "google" if use_google else "nominatim",
            "poi_catalogs": [
                name
                for name, key in (
                    ("google_places", s.google_maps_api_key),
                    ("opentripmap", s.opentripmap_api_key),
                )
                if key
            ],
        }

    application.include_router(trips_router)
    application.include_router(places_router)
    return application


app = create_app()
