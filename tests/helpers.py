from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Sequence

from rainmap.schemas.route import LatLng, Route, WeatherPoint

KM_PER_DEGREE_LAT = 111.195


def straight_path(n: int, length_km: float, start_lat: float = 10.0, lng: float = 20.0) -> List[LatLng]:
    """n evenly spaced points heading due north, length_km long in total."""
    if n == 1:
        return [LatLng(lat=start_lat, lng=lng)]
    step = (length_km / KM_PER_DEGREE_LAT) / (n - 1)
    return [LatLng(lat=start_lat + i * step, lng=lng) for i in range(n)]


def make_route(route_id: str, path: Sequence[LatLng], distance: float, duration: int = 30) -> Route:
    return Route(
        id=route_id,
        summary=f"Test {route_id}",
        duration=duration,
        distance=distance,
        path=list(path),
    )


def weather_point(point: LatLng, probability: int) -> WeatherPoint:
    return WeatherPoint(
        lat=point.lat,
        lng=point.lng,
        time=datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc),
        rain_probability=probability,
        condition="Clear",
    )
