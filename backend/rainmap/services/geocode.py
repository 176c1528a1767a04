from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ..config import HTTP_TIMEOUT_S, OPEN_METEO_GEOCODE_URL
from ..schemas.route import GeocodeResult, LatLng

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3

_COORDS_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*$")


class GeocodeError(RuntimeError):
    pass


def parse_coordinates(text: str) -> Optional[LatLng]:
    """
    "lat, lng" typed by hand. Returns None if the text is not a pair of
    numbers or is out of range.
    """
    m = _COORDS_RE.match(text or "")
    if not m:
        return None

    lat, lng = float(m.group(1)), float(m.group(2))
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return LatLng(lat=lat, lng=lng)


def _label(res: Dict[str, Any]) -> str:
    parts = [res.get("name"), res.get("admin1"), res.get("country")]
    seen: List[str] = []
    for p in parts:
        p = (p or "").strip()
        if p and p not in seen:
            seen.append(p)
    return ", ".join(seen)


async def geocode(
    query: str,
    *,
    count: int = 5,
    client: Optional[httpx.AsyncClient] = None,
    timeout_s: float = HTTP_TIMEOUT_S,
) -> List[GeocodeResult]:
    q = (query or "").strip()
    if not q:
        raise GeocodeError("Place name is empty")

    params = {
        "name": q,
        "count": int(count),
        "language": "en",
        "format": "json",
    }

    if client is None:
        async with httpx.AsyncClient(timeout=timeout_s) as own_client:
            r = await own_client.get(OPEN_METEO_GEOCODE_URL, params=params)
    else:
        r = await client.get(OPEN_METEO_GEOCODE_URL, params=params)
    r.raise_for_status()
    data = r.json()

    out: List[GeocodeResult] = []
    for res in data.get("results") or []:
        lat = res.get("latitude")
        lon = res.get("longitude")
        if lat is None or lon is None or not res.get("name"):
            continue
        out.append(GeocodeResult(label=_label(res), lat=float(lat), lng=float(lon)))

    return out


async def search_places(
    query: str,
    *,
    count: int = 5,
    client: Optional[httpx.AsyncClient] = None,
) -> List[GeocodeResult]:
    """
    Address search for the start/end inputs.

    Too-short queries and typed coordinates are not sent upstream. Any
    upstream failure is logged and gives an empty list.
    """
    q = (query or "").strip()
    if len(q) < MIN_QUERY_LENGTH or parse_coordinates(q) is not None:
        return []

    try:
        return await geocode(q, count=count, client=client)
    except (GeocodeError, httpx.HTTPError, ValueError) as e:
        logger.warning("Geocoding failed for %r: %r", q, e)
        return []
