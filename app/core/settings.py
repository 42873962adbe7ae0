import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    aisuite_model: str = os.getenv("AISUITE_MODEL", "google-genai:gemini-1.5-flash")
    ai_temperature: float = float(os.getenv("AI_TEMPERATURE", "0.7"))
    ai_max_output_tokens: int = int(os.getenv("AI_MAX_OUTPUT_TOKENS", "2048"))

    google_maps_api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    # "auto" picks Google when a key is present, otherwise Nominatim
    geocoder_backend: str = os.getenv("GEOCODER_BACKEND", "auto")
    nominatim_api_url: str = os.getenv(
        "NOMINATIM_API_URL", "https://nominatim.openstreetmap.org"
    )
    nominatim_user_agent: str = os.getenv(
        "NOMINATIM_USER_AGENT", "MoodTrip/1.0 (contact@moodtrip.app)"
    )
    nominatim_min_interval_ms: int = int(os.getenv("NOMINATIM_MIN_INTERVAL_MS", "1000"))
    opentripmap_api_key: str = os.getenv("OPENTRIPMAP_API_KEY", "")
    wikipedia_api_url: str = os.getenv(
        "WIKIPEDIA_API_URL", "https://en.wikipedia.org/api/rest_v1"
    )
    # Sent to Wikipedia and other open APIs that reject anonymous clients
    http_user_agent: str = os.getenv("HTTP_USER_AGENT", "MoodTrip/1.0 (contact@moodtrip.app)")
    osrm_api_url: str = os.getenv(
        "OSRM_API_URL", "https://router.project-osrm.org/route/v1/driving"
    )
    http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))

    mongodb_uri: str = os.getenv("MONGODB_URI", "")
    database_name: str = os.getenv("DATABASE_NAME", "moodtrip_db")

    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def get_settings() -> Settings:
    return Settings()
