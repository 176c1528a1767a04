# backend/rainmap/api/routes/routes.py

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from ...schemas.route import (
    RoutePlanRequest,
    RoutePlanResponse,
    SegmentsRequest,
    SegmentsResponse,
)
from ...services import directions, rain_logic
from ...services.segments import segments_for_route

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/plan", response_model=RoutePlanResponse)
async def plan_routes(payload: RoutePlanRequest) -> RoutePlanResponse:
    """
    Find driving routes between two points, score each for rain and
    return them driest first, with coloured segments for the best one.
    """
    try:
        routes = await directions.get_routes(payload.start, payload.end)
    except directions.DirectionsError as e:
        logger.warning("Routing failed: %s", e)
        raise HTTPException(status_code=502, detail=f"Routing service error: {e}")

    if not routes:
        return RoutePlanResponse(routes=[], message="No routes found between these points.")

    weather_by_id = await rain_logic.analyze_routes(routes)

    ranking = [r.id for r in rain_logic.rank_routes(routes, weather_by_id)]
    best = rain_logic.pick_best_route(routes, weather_by_id)

    segments = []
    if best is not None:
        segments, _ = segments_for_route(best, weather_by_id.get(best.id))

    return RoutePlanResponse(
        routes=routes,
        weather=weather_by_id,
        ranking=ranking,
        best_route_id=best.id if best is not None else None,
        segments=segments,
    )


@router.post("/segments", response_model=SegmentsResponse)
def route_segments(payload: SegmentsRequest) -> SegmentsResponse:
    """
    Coloured segments for one route. Without weather the whole path comes
    back as a single default-coloured segment.
    """
    if payload.weather is not None and payload.weather.route_id != payload.route.id:
        raise HTTPException(status_code=400, detail="weather.route_id does not match route.id")

    segments, interpolated = segments_for_route(payload.route, payload.weather)
    return SegmentsResponse(route_id=payload.route.id, segments=segments, interpolated=interpolated)
