"""
Geographic utilities: approximate city centroids, coordinate jitter and route distance.
"""

import math
import random
from typing import Iterable, Tuple

# Approximate centroids for common destinations, used when no geocoder answers
CITY_CENTROIDS: dict[str, Tuple[float, float]] = {
    "new york": (40.7128, -74.0060),
    "los angeles": (34.0522, -118.2437),
    "chicago": (41.8781, -87.6298),
    "san francisco": (37.7749, -122.4194),
    "miami": (25.7617, -80.1918),
    "seattle": (47.6062, -122.3321),
    "boston": (42.3601, -71.0589),
    "austin": (30.2672, -97.7431),
    "denver": (39.7392, -104.9903),
    "portland": (45.5152, -122.6784),
    "las vegas": (36.1699, -115.1398),
    "orlando": (28.5383, -81.3792),
    "nashville": (36.1627, -86.7816),
    "phoenix": (33.4484, -112.0740),
    "san diego": (32.7157, -117.1611),
    "london": (51.5074, -0.1278),
    "paris": (48.8566, 2.3522),
    "tokyo": (35.6762, 139.6503),
    "mumbai": (19.0760, 72.8777),
    "delhi": (28.7041, 77.1025),
    "bangalore": (12.9716, 77.5946),
}

DEFAULT_CENTROID: Tuple[float, float] = CITY_CENTROIDS["new york"]


def approximate_city_centroid(location: str) -> Tuple[float, float]:
    """
    Look up an approximate centroid for a free-text location.

    Matching is a case-insensitive containment test against the known city
    names, so "Paris, France" resolves to Paris.

    Args:
        location: Free-text destination (e.g., "Paris, France")

    Returns:
        (lat, lng) tuple; New York when nothing matches
    """
    text = (location or "").lower()
    for city, coords in CITY_CENTROIDS.items():
        if city in text:
            return coords
    return DEFAULT_CENTROID


def jitter_coordinates(
    lat: float, lng: float, spread: float = 0.02, rng: random.Random | None = None
) -> Tuple[float, float]:
    """Return (lat, lng) moved by a uniform offset within +/- spread degrees."""
    rng = rng or random
    return (
        lat + rng.uniform(-spread, spread),
        lng + rng.uniform(-spread, spread),
    )


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lng1: Coordinates of point 1
        lat2, lng2: Coordinates of point 2

    Returns:
        Distance in kilometers
    """
    R = 6371  # Earth's radius in kilometers

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def route_distance_km(points: Iterable[Tuple[float, float]]) -> float:
    """Sum of leg distances visiting the points in the given order."""
    total = 0.0
    previous = None
    for point in points:
        if previous is not None:
            total += haversine_distance(previous[0], previous[1], point[0], point[1])
        previous = point
    return total
