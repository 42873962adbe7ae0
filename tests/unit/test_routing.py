import pytest
import requests

from app.core import geocoding
from app.core.routing import RoutePlanner, estimate_route, get_route_planner
from app.core.schemas import Coordinate
from app.core.settings import Settings

POINTS = [Coordinate(lat=38.6916, lng=-9.2160), Coordinate(lat=38.6979, lng=-9.2068)]


class FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        return self.payload


def _patch_get(monkeypatch, response):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "headers": headers})
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(geocoding.requests, "get", fake_get)
    return calls


def _planner() -> RoutePlanner:
    return RoutePlanner("https://osrm.test/route/v1/driving/", user_agent="MoodTripTests/1.0")


def test_osrm_route(monkeypatch):
    payload = {
        "code": "Ok",
        "routes": [
            {
                "distance": 1234.0,
                "duration": 250.0,
                "geometry": {"coordinates": [[-9.216, 38.6916], [-9.2068, 38.6979]]},
            }
        ],
    }
    calls = _patch_get(monkeypatch, FakeResponse(payload))

    result = _planner().route(POINTS)

    assert calls[0]["url"] == "https://osrm.test/route/v1/driving/-9.216,38.6916;-9.2068,38.6979"
    assert calls[0]["params"] == {"overview": "full", "geometries": "geojson"}
    assert calls[0]["headers"]["User-Agent"] == "MoodTripTests/1.0"
    assert result.source == "osrm"
    assert result.distance_km == 1.23
    assert result.duration_minutes == 4.2
    assert result.geometry == [[-9.216, 38.6916], [-9.2068, 38.6979]]


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse({"code": "NoRoute", "routes": []}),
        FakeResponse({"code": "InvalidQuery", "routes": [{}]}),
        FakeResponse(["not", "an", "object"]),
        FakeResponse({}, status_code=503),
        requests.exceptions.ConnectionError("connection refused"),
    ],
)
def test_failed_osrm_route_falls_back_to_estimate(monkeypatch, response):
    _patch_get(monkeypatch, response)
    result = _planner().route(POINTS)
    assert result.source == "estimate"
    assert result == estimate_route(POINTS)


def test_estimate_route():
    result = estimate_route(POINTS, speed_kmh=30.0)
    assert 0.9 < result.distance_km < 1.2
    assert result.duration_minutes == round(result.distance_km / 30.0 * 60, 1)
    assert result.geometry == [[-9.216, 38.6916], [-9.2068, 38.6979]]


def test_route_needs_two_points():
    with pytest.raises(ValueError):
        _planner().route(POINTS[:1])


def test_route_planner_from_settings():
    planner = get_route_planner(
        Settings(osrm_api_url="https://osrm.test/route/v1/foot", http_user_agent="Agent/2.0")
    )
    assert planner.osrm_url == "https://osrm.test/route/v1/foot"
    assert planner.headers["User-Agent"] == "Agent/2.0"
