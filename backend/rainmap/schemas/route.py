from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Condition = Literal["Clear", "Cloudy", "Light Rain", "Heavy Rain", "Storm"]


class LatLng(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class Route(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    summary: str
    duration: int  # minutes
    distance: float = Field(ge=0)  # km
    path: List[LatLng]


class WeatherPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    time: datetime
    rain_probability: int = Field(ge=0, le=100)
    condition: Condition
    eta_minutes: Optional[int] = None


class RouteWeather(BaseModel):
    route_id: str
    average_rain_chance: int
    max_rain_chance: int
    points: List[WeatherPoint]
    recommendation: str
    score: float


class ColoredSegment(BaseModel):
    positions: List[LatLng]
    color: str
    band: str


class GeocodeResult(BaseModel):
    label: str
    lat: float
    lng: float


# ---- Request / response bodies ----


class RoutePlanRequest(BaseModel):
    start: LatLng
    end: LatLng


class RoutePlanResponse(BaseModel):
    routes: List[Route]
    weather: Dict[str, RouteWeather] = {}
    ranking: List[str] = []
    best_route_id: Optional[str] = None
    segments: List[ColoredSegment] = []
    message: Optional[str] = None


class SegmentsRequest(BaseModel):
    route: Route
    weather: Optional[RouteWeather] = None


class SegmentsResponse(BaseModel):
    route_id: str
    segments: List[ColoredSegment]
    interpolated: bool
