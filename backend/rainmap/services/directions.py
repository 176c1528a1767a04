from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import HTTP_TIMEOUT_S, OSRM_BASE_URL
from ..schemas.route import LatLng, Route

logger = logging.getLogger(__name__)


class DirectionsError(RuntimeError):
    pass


def _parse_route(index: int, raw: Dict[str, Any]) -> Route:
    geometry = raw.get("geometry") or {}
    coords = geometry.get("coordinates")
    dist_m = raw.get("distance")
    dur_s = raw.get("duration")

    if dist_m is None or dur_s is None or not coords:
        logger.warning("OSRM route keys: %s", list(raw.keys()))
        raise DirectionsError("OSRM route missing distance/duration/geometry fields")

    # OSRM GeoJSON is lng,lat
    path = [LatLng(lat=float(lat), lng=float(lng)) for lng, lat in coords]

    return Route(
        id=f"route-{index}",
        summary=f"Route {index + 1} (via {raw.get('weight_name') or 'routability'})",
        duration=round(float(dur_s) / 60.0),
        distance=round(float(dist_m) / 1000.0, 1),
        path=path,
    )


async def get_routes(
    start: LatLng,
    end: LatLng,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout_s: float = HTTP_TIMEOUT_S,
) -> List[Route]:
    """
    Driving routes (with alternatives) from OSRM.

    An empty list means OSRM found no route. Network, HTTP and payload
    problems raise DirectionsError.
    """
    coords = f"{start.lng},{start.lat};{end.lng},{end.lat}"
    url = f"{OSRM_BASE_URL}/{coords}"

    params = {
        "overview": "full",
        "geometries": "geojson",
        "alternatives": "true",
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout_s) as own_client:
                r = await own_client.get(url, params=params)
        else:
            r = await client.get(url, params=params)

        if r.status_code == 400 and _is_no_route(r):
            return []
        r.raise_for_status()
        data: Dict[str, Any] = r.json()
    except httpx.HTTPError as e:
        raise DirectionsError(f"Failed to fetch routes: {e}") from e
    except ValueError as e:
        raise DirectionsError("OSRM returned a non-JSON response") from e

    if data.get("code") == "NoRoute":
        return []
    if data.get("code") not in (None, "Ok"):
        raise DirectionsError(f"OSRM error (code={data.get('code')}, message={data.get('message')})")

    routes = data.get("routes") or []
    return [_parse_route(i, raw) for i, raw in enumerate(routes)]


def _is_no_route(r: httpx.Response) -> bool:
    try:
        return r.json().get("code") == "NoRoute"
    except ValueError:
        return False
