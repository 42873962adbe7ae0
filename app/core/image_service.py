"""
Place image lookup using Wikipedia page-summary thumbnails.
"""

import logging
from urllib.parse import quote

from app.core.errors import NotFoundError, TransportError
from app.core.geocoding import fetch_json

logger = logging.getLogger(__name__)

WIKIPEDIA_API_BASE = "https://en.wikipedia.org/api/rest_v1"
DEFAULT_USER_AGENT = "MoodTrip/1.0 (contact@moodtrip.app)"


class WikipediaImageLookup:
    """Finds a representative image for a place from its Wikipedia summary."""

    def __init__(
        self,
        base_url: str = WIKIPEDIA_API_BASE,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        # Wikimedia rejects anonymous library User-Agents
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self.timeout = timeout

    def get_thumbnail(self, title: str) -> str | None:
        """Return the thumbnail URL of the page titled `title`, or None."""
        if not title or not title.strip():
            return None
        try:
            data = fetch_json(
                f"{self.base_url}/page/summary/{quote(title.strip(), safe='')}",
                headers=self.headers,
                timeout=self.timeout,
            )
        except TransportError as e:
            # 404: no page with that title
            if e.status_code == 404:
                return None
            raise
        if not isinstance(data, dict):
            return None
        thumbnail = data.get("thumbnail") or {}
        return thumbnail.get("source")

    def find_image(self, place_name: str, location: str = "") -> str:
        """
        Get an image URL for a place.

        Flow:
        1. Look up the page named after the place
        2. If that has no thumbnail, try "<place> <location>"

        Raises:
            NotFoundError: when neither page has a thumbnail
            TransportError: when Wikipedia cannot be reached
        """
        queries = [place_name]
        if location:
            queries.append(f"{place_name} {location}")

        for query in queries:
            image_url = self.get_thumbnail(query)
            if image_url:
                logger.debug(f"Found Wikipedia image for '{query}'")
                return image_url

        raise NotFoundError(f"No Wikipedia thumbnail for '{place_name}'")
