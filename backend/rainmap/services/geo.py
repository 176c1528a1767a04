from __future__ import annotations

from math import asin, cos, radians, sin, sqrt
from typing import List, Sequence

from ..config import EARTH_RADIUS_KM
from ..schemas.route import LatLng


def haversine_km(a: LatLng, b: LatLng) -> float:
    lat1, lon1 = radians(a.lat), radians(a.lng)
    lat2, lon2 = radians(b.lat), radians(b.lng)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, h)))


def cumulative_distances_km(path: Sequence[LatLng]) -> List[float]:
    """
    Distance travelled (km) at each point of the path, starting at 0.
    """
    out: List[float] = []
    total = 0.0
    for i, point in enumerate(path):
        if i > 0:
            total += haversine_km(path[i - 1], point)
        out.append(total)
    return out


def path_length_km(path: Sequence[LatLng]) -> float:
    if len(path) < 2:
        return 0.0
    return cumulative_distances_km(path)[-1]
