from __future__ import annotations

from typing import List, NamedTuple, Optional, Sequence, Tuple

from ..config import COORD_MATCH_TOLERANCE, DEFAULT_ROUTE_COLOR
from ..schemas.route import ColoredSegment, LatLng, Route, RouteWeather, WeatherPoint
from .geo import cumulative_distances_km


# (lower bound, band, colour); a probability strictly above the bound
# belongs to the band. Highest first.
RAIN_BANDS: Tuple[Tuple[float, str, str], ...] = (
    (90, "severe", "#7f1d1d"),
    (70, "heavy", "#dc2626"),
    (50, "unpleasant", "#f97316"),
    (30, "moderate", "#facc15"),
    (10, "low", "#84cc16"),
)
SAFE_BAND: Tuple[str, str] = ("safe", "#22c55e")


class SampleTag(NamedTuple):
    distance_km: float
    probability: float


def get_segment_band(probability: float) -> Tuple[str, str]:
    """(band, colour) for a rain probability."""
    for bound, band, color in RAIN_BANDS:
        if probability > bound:
            return band, color
    return SAFE_BAND


def get_segment_color(probability: float) -> str:
    return get_segment_band(probability)[1]


def _matches(sample: WeatherPoint, point: LatLng) -> bool:
    return (
        abs(sample.lat - point.lat) < COORD_MATCH_TOLERANCE
        and abs(sample.lng - point.lng) < COORD_MATCH_TOLERANCE
    )


def tag_sample_distances(
    path: Sequence[LatLng],
    samples: Sequence[WeatherPoint],
    distances: Optional[Sequence[float]] = None,
) -> List[SampleTag]:
    """
    First pass: find how far along the path each weather sample sits.

    Samples are expected in travel order and matched to path points by
    coordinates. Samples left unmatched at the end are pinned to the end
    of the path.
    """
    if not samples:
        return []

    distances = cumulative_distances_km(path) if distances is None else distances
    tags: List[SampleTag] = []
    sample_index = 0

    for point, dist in zip(path, distances):
        if sample_index >= len(samples):
            break
        sample = samples[sample_index]
        if _matches(sample, point):
            tags.append(SampleTag(dist, float(sample.rain_probability)))
            sample_index += 1

    if not tags:
        tags.append(SampleTag(0.0, float(samples[0].rain_probability)))

    end_km = distances[-1] if distances else 0.0
    for sample in samples[sample_index:]:
        tags.append(SampleTag(end_km, float(sample.rain_probability)))

    return tags


def interpolate_probabilities(distances: Sequence[float], tags: Sequence[SampleTag]) -> List[float]:
    """
    Second pass: rain probability at every path distance, linearly
    interpolated between the bracketing sample tags.
    """
    if not tags:
        return [0.0 for _ in distances]

    out: List[float] = []
    idx = 0

    for dist in distances:
        while idx < len(tags) - 1 and dist > tags[idx + 1].distance_km:
            idx += 1

        prev = tags[idx]
        nxt = tags[idx + 1] if idx + 1 < len(tags) else prev

        probability = prev.probability
        if nxt.distance_km > prev.distance_km:
            ratio = (dist - prev.distance_km) / (nxt.distance_km - prev.distance_km)
            ratio = max(0.0, min(1.0, ratio))
            probability = prev.probability + (nxt.probability - prev.probability) * ratio

        out.append(probability)

    return out


def build_colored_segments(path: Sequence[LatLng], samples: Sequence[WeatherPoint]) -> List[ColoredSegment]:
    """
    Split the path into maximal runs sharing one rain colour.

    Neighbouring segments share their boundary point, so joining them
    (dropping the repeated point) gives back the path. The boundary point
    takes the colour of the segment it opens.
    """
    if not path or not samples:
        return []

    distances = cumulative_distances_km(path)
    tags = tag_sample_distances(path, samples, distances)
    probabilities = interpolate_probabilities(distances, tags)

    segments: List[ColoredSegment] = []
    current: List[LatLng] = []
    current_band: Optional[Tuple[str, str]] = None

    for point, probability in zip(path, probabilities):
        band = get_segment_band(probability)
        if current_band is None:
            current_band = band

        if band != current_band:
            current.append(point)
            segments.append(ColoredSegment(positions=current, band=current_band[0], color=current_band[1]))
            current = [point]
            current_band = band
        else:
            current.append(point)

    # A lone trailing transition point is already the end of the last segment.
    if current and current_band is not None and (len(current) > 1 or not segments):
        segments.append(ColoredSegment(positions=current, band=current_band[0], color=current_band[1]))

    return segments


def fallback_segment(path: Sequence[LatLng]) -> List[ColoredSegment]:
    """The whole path in the default colour, used when there is no weather."""
    if not path:
        return []
    return [ColoredSegment(positions=list(path), band="default", color=DEFAULT_ROUTE_COLOR)]


def segments_for_route(route: Route, weather: Optional[RouteWeather]) -> Tuple[List[ColoredSegment], bool]:
    """
    Coloured segments for a route plus whether weather was used.
    """
    if weather is None or not weather.points:
        return fallback_segment(route.path), False
    return build_colored_segments(route.path, weather.points), True
