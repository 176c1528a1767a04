from __future__ import annotations

import logging
from math import ceil
from typing import List, Sequence

from ..config import MAX_SAMPLES, MIN_SAMPLES, SAMPLE_INTERVAL_KM
from ..schemas.route import LatLng
from .geo import haversine_km, path_length_km

logger = logging.getLogger(__name__)


def target_sample_count(total_distance_km: float) -> int:
    """
    One sample per SAMPLE_INTERVAL_KM of route, clamped to
    [MIN_SAMPLES, MAX_SAMPLES].
    """
    wanted = ceil(max(0.0, total_distance_km) / SAMPLE_INTERVAL_KM)
    return max(MIN_SAMPLES, min(MAX_SAMPLES, wanted))


def _evenly_spaced(path: Sequence[LatLng], count: int) -> List[LatLng]:
    last = len(path) - 1
    return [path[round(k * last / (count - 1))] for k in range(count)]


def select_sample_points(path: Sequence[LatLng], total_distance_km: float) -> List[LatLng]:
    """
    Pick a bounded, ordered subset of the path to look weather up for.

    Short or sparse paths are returned whole. Longer ones are walked by
    great-circle distance and a point is taken each time the walk crosses
    the next multiple of total_distance_km / (target - 1). The first and
    last path points are always included, and the result never has more
    than target points: the last slot is held back for the endpoint.
    """
    points = list(path)
    if not points:
        return []

    target = target_sample_count(total_distance_km)
    if len(points) <= target:
        return points

    # The routing distance drives spacing; fall back to the geometry itself
    # when the caller has nothing usable.
    distance_km = total_distance_km if total_distance_km > 0 else path_length_km(points)
    if distance_km <= 0:
        return _evenly_spaced(points, target)

    interval = distance_km / (target - 1)
    last_index = len(points) - 1

    samples = [points[0]]
    emitted_index = 0
    accumulated = 0.0
    next_threshold = interval

    for i in range(1, len(points)):
        accumulated += haversine_km(points[i - 1], points[i])
        if accumulated < next_threshold:
            continue

        while next_threshold <= accumulated:
            next_threshold += interval

        if len(samples) < target - 1 or i == last_index:
            samples.append(points[i])
            emitted_index = i

    if emitted_index != last_index:
        samples.append(points[last_index])

    return samples
