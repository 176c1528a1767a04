from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from helpers import make_route, straight_path
from rainmap.api.routes import geocode as geocode_routes
from rainmap.config import DEFAULT_ROUTE_COLOR
from rainmap.main import app
from rainmap.schemas.route import GeocodeResult
from rainmap.services import directions, rain_logic

PLAN_BODY = {"start": {"lat": 10.0, "lng": 20.0}, "end": {"lat": 10.1, "lng": 20.0}}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def two_routes(monkeypatch):
    wet = make_route("route-0", straight_path(25, 10.0, start_lat=40.0), 10.0)
    dry = make_route("route-1", straight_path(25, 10.0, start_lat=10.0), 10.0)

    async def fake_routes(start, end):
        return [wet, dry]

    async def fake_forecast(lat: float, lng: float) -> int:
        return 5 if lat < 30 else 75

    monkeypatch.setattr(directions, "get_routes", fake_routes)
    monkeypatch.setattr(rain_logic, "get_rain_probability", fake_forecast)
    return wet, dry


def test_health(client) -> None:
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_plan_picks_driest_route(client, two_routes) -> None:
    wet, dry = two_routes

    r = client.post("/routes/plan", json=PLAN_BODY)

    assert r.status_code == 200
    data = r.json()
    assert data["best_route_id"] == dry.id
    assert data["ranking"] == [dry.id, wet.id]
    assert data["weather"][dry.id]["score"] == pytest.approx(5)
    assert data["weather"][wet.id]["recommendation"] == "Stormy! Avoid."
    assert len(data["routes"]) == 2

    segments = data["segments"]
    assert len(segments) == 1
    assert segments[0]["band"] == "safe"
    assert len(segments[0]["positions"]) == len(dry.path)


def test_plan_with_no_routes(client, monkeypatch) -> None:
    async def no_routes(start, end):
        return []

    monkeypatch.setattr(directions, "get_routes", no_routes)

    r = client.post("/routes/plan", json=PLAN_BODY)

    assert r.status_code == 200
    data = r.json()
    assert data["routes"] == []
    assert data["best_route_id"] is None
    assert data["message"]


def test_plan_routing_failure_is_502(client, monkeypatch) -> None:
    async def broken(start, end):
        raise directions.DirectionsError("Failed to fetch routes")

    monkeypatch.setattr(directions, "get_routes", broken)

    r = client.post("/routes/plan", json=PLAN_BODY)

    assert r.status_code == 502
    assert "Failed to fetch routes" in r.json()["detail"]


def test_plan_rejects_bad_coordinates(client) -> None:
    r = client.post("/routes/plan", json={"start": {"lat": 120.0, "lng": 0.0}, "end": {"lat": 0.0, "lng": 0.0}})
    assert r.status_code == 422


def test_segments_without_weather_fall_back(client) -> None:
    route = make_route("route-0", straight_path(6, 3.0), 3.0)

    r = client.post("/routes/segments", json={"route": route.model_dump(mode="json")})

    assert r.status_code == 200
    data = r.json()
    assert data["interpolated"] is False
    assert data["segments"][0]["color"] == DEFAULT_ROUTE_COLOR
    assert len(data["segments"][0]["positions"]) == 6


def test_segments_with_weather(client, two_routes) -> None:
    wet, _ = two_routes
    plan = client.post("/routes/plan", json=PLAN_BODY).json()
    body = {"route": wet.model_dump(mode="json"), "weather": plan["weather"][wet.id]}

    r = client.post("/routes/segments", json=body)

    assert r.status_code == 200
    data = r.json()
    assert data["interpolated"] is True
    assert [s["band"] for s in data["segments"]] == ["heavy"]


def test_segments_reject_mismatched_weather(client, two_routes) -> None:
    wet, dry = two_routes
    plan = client.post("/routes/plan", json=PLAN_BODY).json()
    body = {"route": wet.model_dump(mode="json"), "weather": plan["weather"][dry.id]}

    r = client.post("/routes/segments", json=body)

    assert r.status_code == 400


def test_geocode_search(client, monkeypatch) -> None:
    async def fake_search(query, count=5):
        assert query == "Bristol"
        return [GeocodeResult(label="Bristol, England", lat=51.45, lng=-2.58)]

    monkeypatch.setattr(geocode_routes, "search_places", fake_search)

    r = client.get("/geocode/search", params={"q": "Bristol"})

    assert r.status_code == 200
    assert r.json() == [{"label": "Bristol, England", "lat": 51.45, "lng": -2.58}]
