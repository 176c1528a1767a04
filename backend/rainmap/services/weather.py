from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from ..config import FORECAST_CACHE_TTL_S, HTTP_TIMEOUT_S, OPEN_METEO_BASE_URL

logger = logging.getLogger(__name__)


CacheKey = Tuple[float, float]


class ForecastCache:
    """
    Rain probabilities keyed by coordinates rounded to 2 decimals (~1 km).

    Entries expire after ttl_s seconds. Concurrent misses for the same key
    just cause a redundant upstream call, so no locking is done.
    """

    def __init__(self, ttl_s: float = FORECAST_CACHE_TTL_S, clock: Callable[[], float] = time.monotonic):
        self.ttl_s = ttl_s
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, int]] = {}

    @staticmethod
    def key(lat: float, lng: float) -> CacheKey:
        return (round(lat, 2), round(lng, 2))

    def get(self, lat: float, lng: float) -> Optional[int]:
        entry = self._entries.get(self.key(lat, lng))
        if entry is None:
            return None

        stored_at, value = entry
        if self._expired(stored_at):
            self._entries.pop(self.key(lat, lng), None)
            return None
        return value

    def put(self, lat: float, lng: float, value: int) -> None:
        self.prune()
        self._entries[self.key(lat, lng)] = (self._clock(), value)

    def prune(self) -> None:
        """Drop every expired entry."""
        stale = [k for k, (stored_at, _) in self._entries.items() if self._expired(stored_at)]
        for k in stale:
            del self._entries[k]

    def _expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at >= self.ttl_s

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide cache shared by every route analysis.
forecast_cache = ForecastCache()


def _pick_rain_probability(hourly: Dict[str, Any], hour: int) -> int:
    """
    Worst of the current and next hour; missing values count as dry.
    """
    values = hourly.get("precipitation_probability") or []

    def at(i: int) -> int:
        try:
            v = values[i]
        except IndexError:
            return 0
        return int(v) if v is not None else 0

    return max(at(hour), at((hour + 1) % 24))


async def fetch_rain_probability(
    latitude: float,
    longitude: float,
    *,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Fetch the hourly precipitation probability from Open-Meteo for one point.

    Hours are in GMT (Open-Meteo's default), so the current UTC hour is
    used as the index into today's series. Raises on any upstream problem;
    get_rain_probability() is the forgiving wrapper.
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": "precipitation_probability",
        "forecast_days": 1,
    }

    if client is None:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_S) as own_client:
            response = await own_client.get(OPEN_METEO_BASE_URL, params=params)
    else:
        response = await client.get(OPEN_METEO_BASE_URL, params=params)

    response.raise_for_status()
    data = response.json()

    hourly = data.get("hourly") if isinstance(data, dict) else None
    if not isinstance(hourly, dict):
        raise ValueError("Unexpected response from Open-Meteo: 'hourly' block missing")

    hour = (now or datetime.now(timezone.utc)).hour
    probability = _pick_rain_probability(hourly, hour)
    return max(0, min(100, probability))


async def get_rain_probability(
    lat: float,
    lng: float,
    *,
    client: Optional[httpx.AsyncClient] = None,
    cache: Optional[ForecastCache] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Rain probability (0-100) for the next couple of hours at a point.

    Cached per rounded coordinate. Never raises: any failure is logged
    and reported as 0 (assume dry), and failures are not cached.
    """
    cache = forecast_cache if cache is None else cache

    cached = cache.get(lat, lng)
    if cached is not None:
        logger.debug("Forecast cache hit for %s", cache.key(lat, lng))
        return cached

    try:
        probability = await fetch_rain_probability(lat, lng, client=client, now=now)
    except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
        logger.warning("Weather fetch failed for [%.4f, %.4f]: %r", lat, lng, e)
        return 0

    cache.put(lat, lng, probability)
    return probability
