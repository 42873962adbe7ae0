"""
Route calculation between itinerary stops using an OSRM server, with a
straight-line estimate when the router is unavailable.
"""

import logging
from typing import Sequence

from app.core.errors import NotFoundError, TransportError
from app.core.geo_utils import route_distance_km
from app.core.geocoding import fetch_json
from app.core.schemas import Coordinate, RouteResult
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Average city driving speed for the straight-line estimate
ESTIMATE_SPEED_KMH = 30.0


def estimate_route(points: Sequence[Coordinate], speed_kmh: float = ESTIMATE_SPEED_KMH) -> RouteResult:
    """Haversine route through the points in order, timed at a flat average speed."""
    distance = route_distance_km((p.lat, p.lng) for p in points)
    return RouteResult(
        distance_km=round(distance, 2),
        duration_minutes=round(distance / speed_kmh * 60, 1),
        geometry=[[p.lng, p.lat] for p in points],
        source="estimate",
    )


class RoutePlanner:
    def __init__(self, osrm_url: str, user_agent: str, timeout: float = 15) -> None:
        self.osrm_url = osrm_url.rstrip("/")
        self.headers = {"User-Agent": user_agent}
        self.timeout = timeout

    def osrm_route(self, points: Sequence[Coordinate]) -> RouteResult:
        """
        Ask OSRM for a route visiting the points in order.

        Raises:
            NotFoundError: OSRM found no route
            TransportError: the server could not be reached or answered badly
        """
        coords = ";".join(f"{p.lng},{p.lat}" for p in points)
        data = fetch_json(
            f"{self.osrm_url}/{coords}",
            params={"overview": "full", "geometries": "geojson"},
            headers=self.headers,
            timeout=self.timeout,
        )
        if not isinstance(data, dict):
            raise TransportError("Unexpected OSRM payload")
        if data.get("code") == "NoRoute" or not data.get("routes"):
            raise NotFoundError(f"No OSRM route through {len(points)} points")
        if data.get("code") != "Ok":
            raise TransportError(f"OSRM returned {data.get('code')}")

        route = data["routes"][0]
        try:
            return RouteResult(
                distance_km=round(float(route["distance"]) / 1000, 2),
                duration_minutes=round(float(route["duration"]) / 60, 1),
                geometry=(route.get("geometry") or {}).get("coordinates", []),
                source="osrm",
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed OSRM route: {e}") from e

    def route(self, points: Sequence[Coordinate]) -> RouteResult:
        """Route through the points, falling back to a straight-line estimate."""
        if len(points) < 2:
            raise ValueError("A route needs at least two points")
        try:
            return self.osrm_route(points)
        except (NotFoundError, TransportError) as e:
            logger.warning(f"Route calculation failed, using straight-line estimate: {e}")
            return estimate_route(points)


def get_route_planner(settings: Settings | None = None) -> RoutePlanner:
    settings = settings or get_settings()
    return RoutePlanner(
        osrm_url=settings.osrm_api_url,
        user_agent=settings.http_user_agent,
        timeout=settings.http_timeout_seconds,
    )
