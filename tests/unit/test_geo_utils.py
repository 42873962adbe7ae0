import random

import pytest

from app.core.geo_utils import (
    DEFAULT_CENTROID,
    approximate_city_centroid,
    haversine_distance,
    jitter_coordinates,
    route_distance_km,
)


@pytest.mark.parametrize(
    "location, expected",
    [
        ("Paris, France", (48.8566, 2.3522)),
        ("  TOKYO ", (35.6762, 139.6503)),
        ("San Francisco Bay Area", (37.7749, -122.4194)),
        ("Reykjavik", DEFAULT_CENTROID),
        ("", DEFAULT_CENTROID),
    ],
)
def test_approximate_city_centroid(location, expected):
    assert approximate_city_centroid(location) == expected


def test_jitter_stays_within_spread():
    rng = random.Random(3)
    for _ in range(200):
        lat, lng = jitter_coordinates(48.8566, 2.3522, spread=0.02, rng=rng)
        assert abs(lat - 48.8566) <= 0.02
        assert abs(lng - 2.3522) <= 0.02


def test_haversine_paris_london():
    distance = haversine_distance(48.8566, 2.3522, 51.5074, -0.1278)
    assert distance == pytest.approx(343.5, abs=1.0)


def test_route_distance_sums_legs():
    points = [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)]
    one_leg = haversine_distance(0.0, 0.0, 0.0, 1.0)
    assert route_distance_km(points) == pytest.approx(2 * one_leg)
    assert route_distance_km([(10.0, 10.0)]) == 0.0
    assert route_distance_km([]) == 0.0
