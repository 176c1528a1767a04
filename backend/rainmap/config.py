# backend/rainmap/config.py

from __future__ import annotations

import os

# ---------------------------------------------------------------------
# Env-driven settings
# ---------------------------------------------------------------------


def _env_str(name: str, default: str) -> str:
    raw = (os.getenv(name) or "").strip()
    return raw or default


def _env_float(name: str, default: float) -> float:
    """
    Positive float from the environment, falling back to the default
    when unset, empty or not a usable number.
    """
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        v = float(raw)
        return v if v > 0 else default
    except ValueError:
        return default


OPEN_METEO_BASE_URL = _env_str("OPEN_METEO_BASE_URL", "https://api.open-meteo.com/v1/forecast")
OPEN_METEO_GEOCODE_URL = _env_str(
    "OPEN_METEO_GEOCODE_URL", "https://geocoding-api.open-meteo.com/v1/search"
)
OSRM_BASE_URL = _env_str("OSRM_BASE_URL", "https://router.project-osrm.org/route/v1/driving")

HTTP_TIMEOUT_S = _env_float("HTTP_TIMEOUT_S", 10.0)
FORECAST_CACHE_TTL_S = _env_float("FORECAST_CACHE_TTL_S", 300.0)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_log_level(name: str, default: str) -> str:
    level = _env_str(name, default).upper()
    return level if level in _LOG_LEVELS else default


LOG_LEVEL = _env_log_level("LOG_LEVEL", "INFO")


# ---------------------------------------------------------------------
# Fixed policy constants (not tunable from env)
# ---------------------------------------------------------------------

EARTH_RADIUS_KM = 6371.0

SAMPLE_INTERVAL_KM = 5
MIN_SAMPLES = 3
MAX_SAMPLES = 15

AVERAGE_WEIGHT = 0.4
MAX_WEIGHT = 0.6

# Score given to a route with no weather data when ranking.
MISSING_SCORE = 100.0

# Coordinates are matched to path points within this many degrees.
COORD_MATCH_TOLERANCE = 0.0001

DEFAULT_ROUTE_COLOR = "#fbbf24"
