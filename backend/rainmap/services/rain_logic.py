from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from math import floor
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from ..config import AVERAGE_WEIGHT, MAX_WEIGHT, MISSING_SCORE
from ..schemas.route import Condition, LatLng, Route, RouteWeather, WeatherPoint
from .sampling import select_sample_points
from .weather import get_rain_probability

logger = logging.getLogger(__name__)

ForecastFn = Callable[[float, float], Awaitable[int]]


# ---------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------

def get_condition(probability: float) -> Condition:
    if probability > 70:
        return "Storm"
    if probability > 50:
        return "Heavy Rain"
    if probability > 20:
        return "Light Rain"
    if probability > 10:
        return "Cloudy"
    return "Clear"


def get_recommendation(average_rain_chance: int, max_rain_chance: int) -> str:
    # 10-40% peak with a low average falls through to "Safe to ride."
    if max_rain_chance > 70:
        return "Stormy! Avoid."
    if max_rain_chance > 40:
        return "Rainy sections ahead."
    if average_rain_chance > 20:
        return "Might drizzle."
    if max_rain_chance < 10:
        return "Dry route!"
    return "Safe to ride."


def compute_score(average_rain_chance: int, max_rain_chance: int) -> float:
    """Lower is better. The worst point weighs more than the average."""
    return AVERAGE_WEIGHT * average_rain_chance + MAX_WEIGHT * max_rain_chance


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


# ---------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------

def _build_weather_point(point: LatLng, probability: int, eta_minutes: int) -> WeatherPoint:
    return WeatherPoint(
        lat=point.lat,
        lng=point.lng,
        time=datetime.now(timezone.utc),
        rain_probability=probability,
        condition=get_condition(probability),
        eta_minutes=eta_minutes,
    )


def summarise_points(route_id: str, points: Sequence[WeatherPoint]) -> RouteWeather:
    """
    Reduce per-sample probabilities to the route's average, peak, score
    and recommendation.
    """
    probabilities = [p.rain_probability for p in points]

    if probabilities:
        average = _round_half_up(sum(probabilities) / len(probabilities))
        peak = max(probabilities)
    else:
        average = 0
        peak = 0

    return RouteWeather(
        route_id=route_id,
        average_rain_chance=average,
        max_rain_chance=peak,
        points=list(points),
        recommendation=get_recommendation(average, peak),
        score=compute_score(average, peak),
    )


async def analyze_route_weather(
    route: Route,
    get_forecast: Optional[ForecastFn] = None,
) -> RouteWeather:
    """
    Sample the route, look up rain for every sample concurrently and
    score the result.

    A lookup that raises only affects its own sample, which is recorded
    as 0% / Clear. The caller always gets a RouteWeather back.
    """
    forecast = get_forecast or get_rain_probability

    samples = select_sample_points(route.path, route.distance)
    logger.info("[SAMPLING] Route %r: %skm -> %d samples", route.summary, route.distance, len(samples))

    async def lookup(point: LatLng) -> int:
        # A non-numeric answer (None, NaN) fails this slot like a raised error.
        return max(0, min(100, int(await forecast(point.lat, point.lng))))

    # Results come back in sample order; failed slots hold the exception.
    results = await asyncio.gather(*(lookup(p) for p in samples), return_exceptions=True)

    step_minutes = route.duration / len(samples) if samples else 0.0
    points: List[WeatherPoint] = []

    for index, (sample, result) in enumerate(zip(samples, results)):
        eta = round(index * step_minutes)

        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning("Failed to fetch weather for sample %d of %s: %r", index, route.id, result)
            probability = 0
        else:
            probability = result
            logger.debug(
                "  Sample %d: [%.4f, %.4f] (T+%dm) -> %d%%",
                index + 1, sample.lat, sample.lng, eta, probability,
            )

        points.append(_build_weather_point(sample, probability, eta))

    weather = summarise_points(route.id, points)

    logger.info(
        "[RESULT] Route %r: Avg %d%%, Max %d%%, Score %.1f",
        route.summary, weather.average_rain_chance, weather.max_rain_chance, weather.score,
    )
    return weather


async def analyze_routes(
    routes: Sequence[Route],
    get_forecast: Optional[ForecastFn] = None,
) -> Dict[str, RouteWeather]:
    """Analyse every route concurrently, keyed by route id."""
    results = await asyncio.gather(*(analyze_route_weather(r, get_forecast) for r in routes))
    return {w.route_id: w for w in results}


# ---------------------------------------------------------------------
# Comparing routes
# ---------------------------------------------------------------------

def _score_of(route: Route, weather_by_id: Mapping[str, RouteWeather]) -> float:
    weather = weather_by_id.get(route.id)
    return weather.score if weather is not None else MISSING_SCORE


def pick_best_route(
    routes: Sequence[Route],
    weather_by_id: Mapping[str, RouteWeather],
) -> Optional[Route]:
    """
    Driest route by score. On a tie the later route wins; routes without
    weather score as MISSING_SCORE.
    """
    best: Optional[Route] = None
    for route in routes:
        if best is None or not _score_of(best, weather_by_id) < _score_of(route, weather_by_id):
            best = route
    return best


def rank_routes(
    routes: Sequence[Route],
    weather_by_id: Mapping[str, RouteWeather],
) -> List[Route]:
    """Routes ordered driest first."""
    return sorted(routes, key=lambda r: _score_of(r, weather_by_id))
