import pytest
from httpx import ASGITransport, AsyncClient

from app import main
from app.api.dependencies import (
    get_catalogs,
    get_geocoder,
    get_pipeline,
    get_route_service,
    get_trip_repo,
)
from app.core.errors import ConflictError, NotFoundError, TransportError
from app.core.geocoding import GeocodingProvider
from app.core.itinerary_generator import ItineraryGenerator
from app.core.place_enricher import PlaceEnricher
from app.core.poi_service import PoiCatalog
from app.core.repository import trip_to_document
from app.core.schemas import (
    AutocompleteSuggestion,
    Coordinate,
    GeocodeResult,
    PlaceDetails,
    PoiCandidate,
    ReverseGeocodeResult,
    RouteResult,
)
from app.core.settings import Settings
from app.core.trip_pipeline import TripEnrichmentPipeline
from app.main import create_app


class StubGeocoder(GeocodingProvider):
    name = "stub"

    def geocode(self, address):
        if address.startswith("Nowhere"):
            raise NotFoundError(address)
        if address.startswith("Offline"):
            raise TransportError("connection refused")
        return GeocodeResult(lat=38.7223, lng=-9.1393, formatted_address=f"{address}, Portugal")

    def reverse_geocode(self, lat, lng):
        if lat == 0:
            raise NotFoundError("ocean")
        return ReverseGeocodeResult(formatted_address="Praça do Comércio, Lisbon")

    def autocomplete(self, query, limit=5):
        return [
            AutocompleteSuggestion(place_id="osm_relation_1", description="Lisbon, Portugal", main_text="Lisbon")
        ][:limit]

    def get_place_details(self, external_id):
        if external_id != "osm_way_42":
            raise NotFoundError(external_id)
        return PlaceDetails(
            external_id=external_id,
            name="Belem Tower",
            address="Belem Tower, Lisbon, Portugal",
            lat=38.6916,
            lng=-9.216,
            opening_hours=["Tu-Su 10:00-18:30"],
        )


class StubCatalog(PoiCatalog):
    name = "stub_catalog"

    def search_nearby(self, lat, lng, radius=1000):
        return [PoiCandidate(name="Belem Tower", rating=4.6, lat=lat, lng=lng)]


class BrokenCatalog(PoiCatalog):
    name = "broken_catalog"

    def search_nearby(self, lat, lng, radius=1000):
        raise TransportError("quota exceeded")


class StubRoutePlanner:
    def __init__(self):
        self.requests: list[list[Coordinate]] = []

    def route(self, points):
        self.requests.append(list(points))
        return RouteResult(
            distance_km=1.23,
            duration_minutes=4.2,
            geometry=[[p.lng, p.lat] for p in points],
            source="osrm",
        )


class InMemoryTripRepository:
    def __init__(self):
        self.trips: dict[str, dict] = {}

    def save_trip(self, trip, is_public=True):
        doc = trip_to_document(trip, is_public=is_public)
        if doc["id"] in self.trips:
            raise ConflictError(f"Trip {doc['id']} already exists")
        self.trips[doc["id"]] = doc
        return doc["id"]

    def get_trip_by_id(self, trip_id):
        doc = self.trips.get(trip_id)
        if doc:
            doc["view_count"] += 1
        return doc

    def list_public_trips(self, limit=20, offset=0):
        public = [t for t in self.trips.values() if t["is_public"]]
        return public[offset : offset + limit]


@pytest.fixture
def app():
    application = create_app()
    repo = InMemoryTripRepository()
    pipeline = TripEnrichmentPipeline(
        ItineraryGenerator(llm=None),
        PlaceEnricher(StubGeocoder()),
        sleep=lambda seconds: None,
    )
    application.dependency_overrides[get_pipeline] = lambda: pipeline
    application.dependency_overrides[get_geocoder] = lambda: StubGeocoder()
    application.dependency_overrides[get_catalogs] = lambda: (StubCatalog(), BrokenCatalog())
    application.dependency_overrides[get_trip_repo] = lambda: repo
    application.dependency_overrides[get_route_service] = lambda: StubRoutePlanner()
    return application


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_healthz_integration(app):
    async with _client(app) as ac:
        response = await ac.get("/healthz")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["geocoder"] in ("google", "nominatim")
    assert isinstance(body["poi_catalogs"], list)


@pytest.mark.asyncio
async def test_generate_trip_integration(app):
    payload = {
        "mood": "Chill",
        "location": " Lisbon ",
        "duration_hours": 5,
        "budget_tier": 1,
        "preferences": ["foodie", "cultural"],
    }
    async with _client(app) as ac:
        response = await ac.post("/trips/generate", json=payload)

    assert response.status_code == 200
    trip = response.json()
    assert trip["title"] == "Peaceful Relaxation Day in Lisbon"
    assert trip["source"] == "mock"
    assert trip["preferences"] == ["cultural", "foodie"]
    assert len(trip["places"]) == 4
    first = trip["places"][0]
    assert first["name"] == "Botanical Garden"
    assert first["address"] == "Botanical Garden Lisbon, Portugal"
    assert (first["lat"], first["lng"]) == (38.7223, -9.1393)
    assert 3.0 <= first["rating"] <= 5.0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"mood": "sleepy"},
        {"duration_hours": 0},
        {"duration_hours": 25},
        {"budget_tier": 5},
        {"location": "   "},
        {"preferences": ["nightlife"]},
        {"custom_prompt": "x" * 501},
    ],
)
async def test_generate_trip_validation_integration(app, overrides):
    payload = {"mood": "fun", "location": "Lisbon", "duration_hours": 4, **overrides}
    async with _client(app) as ac:
        response = await ac.post("/trips/generate", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_save_and_fetch_trip_integration(app):
    request = {"mood": "romantic", "location": "Lisbon", "duration_hours": 8}
    async with _client(app) as ac:
        trip = (await ac.post("/trips/generate", json=request)).json()

        saved = await ac.post("/trips", json={"trip": trip, "is_public": True})
        assert saved.status_code == 201
        trip_id = saved.json()["id"]
        assert trip_id == trip["id"]

        fetched = await ac.get(f"/trips/{trip_id}")
        assert fetched.status_code == 200
        doc = fetched.json()
        assert doc["title"] == trip["title"]
        assert doc["view_count"] == 1
        assert len(doc["itinerary"]) == 4

        again = await ac.get(f"/trips/{trip_id}")
        assert again.json()["view_count"] == 2

        listing = await ac.get("/trips/public", params={"limit": 10})
        assert listing.status_code == 200
        assert [t["id"] for t in listing.json()["trips"]] == [trip_id]

        missing = await ac.get("/trips/trip_missing")
        assert missing.status_code == 404


@pytest.mark.asyncio
async def test_geocode_integration(app):
    async with _client(app) as ac:
        ok = await ac.post("/places/geocode", json={"address": "Rossio Lisbon"})
        assert ok.status_code == 200
        assert ok.json()["lat"] == 38.7223

        missing = await ac.post("/places/geocode", json={"address": "Nowhere Land"})
        assert missing.status_code == 404

        offline = await ac.post("/places/geocode", json={"address": "Offline Town"})
        assert offline.status_code == 502


@pytest.mark.asyncio
async def test_reverse_geocode_fallback_integration(app):
    async with _client(app) as ac:
        found = await ac.post("/places/reverse", json={"lat": 38.7075, "lng": -9.1364})
        fallback = await ac.post("/places/reverse", json={"lat": 0, "lng": 12.345678})

    assert found.json()["formatted_address"] == "Praça do Comércio, Lisbon"
    assert fallback.status_code == 200
    assert fallback.json()["formatted_address"] == "0.0000, 12.3457"


@pytest.mark.asyncio
async def test_autocomplete_and_nearby_integration(app):
    async with _client(app) as ac:
        suggestions = await ac.post("/places/autocomplete", json={"input": "Lis"})
        nearby = await ac.post("/places/nearby", json={"lat": 38.69, "lng": -9.21})

    assert suggestions.status_code == 200
    assert suggestions.json()[0]["main_text"] == "Lisbon"
    assert nearby.status_code == 200
    assert [p["name"] for p in nearby.json()] == ["Belem Tower"]


@pytest.mark.asyncio
async def test_place_details_integration(app):
    async with _client(app) as ac:
        found = await ac.post("/places/details", json={"place_id": "osm_way_42"})
        by_path = await ac.get("/places/osm_way_42")
        missing = await ac.post("/places/details", json={"place_id": "osm_way_7"})
        missing_by_path = await ac.get("/places/osm_way_7")
        empty = await ac.post("/places/details", json={"place_id": ""})

    assert found.status_code == 200
    body = found.json()
    assert body["name"] == "Belem Tower"
    assert body["opening_hours"] == ["Tu-Su 10:00-18:30"]
    assert by_path.json() == body
    assert missing.status_code == 404
    assert missing_by_path.status_code == 404
    assert empty.status_code == 422


@pytest.mark.asyncio
async def test_route_integration(app):
    points = [{"lat": 38.6916, "lng": -9.216}, {"lat": 38.6979, "lng": -9.2068}]
    async with _client(app) as ac:
        response = await ac.post("/places/route", json={"points": points})
        single = await ac.post("/places/route", json={"points": points[:1]})

    assert response.status_code == 200
    body = response.json()
    assert body["distance_km"] == 1.23
    assert body["source"] == "osrm"
    assert body["geometry"] == [[-9.216, 38.6916], [-9.2068, 38.6979]]
    assert single.status_code == 422


@pytest.mark.asyncio
async def test_saving_trip_twice_is_conflict_integration(app):
    request = {"mood": "fun", "location": "Lisbon", "duration_hours": 4}
    async with _client(app) as ac:
        trip = (await ac.post("/trips/generate", json=request)).json()
        first = await ac.post("/trips", json={"trip": trip})
        second = await ac.post("/trips", json={"trip": trip})

    assert first.status_code == 201
    assert second.status_code == 409
    assert trip["id"] in second.json()["detail"]


@pytest.mark.asyncio
async def test_cors_origins_come_from_settings(monkeypatch):
    monkeypatch.setattr(
        main, "get_settings", lambda: Settings(allowed_origins="https://moodtrip.example")
    )
    application = create_app()
    headers = {"Origin": "https://moodtrip.example", "Access-Control-Request-Method": "GET"}
    async with _client(application) as ac:
        allowed = await ac.options("/healthz", headers=headers)
        denied = await ac.options(
            "/healthz", headers={**headers, "Origin": "https://elsewhere.example"}
        )

    assert allowed.headers["access-control-allow-origin"] == "https://moodtrip.example"
    assert "access-control-allow-origin" not in denied.headers
