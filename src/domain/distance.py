"""
Distance, duration and speed from GPS samples (Haversine formula).

Assumption
----------
Trip distance is the *path length* over the sampled points: the sum of
consecutive great-circle hops.  Samples are used as received, with no
smoothing or outlier rejection, so noisy GPS inflates distance.  Road
distance for quotes comes from the routing provider instead
(``src.infrastructure.routing``).

Degenerate inputs (fewer than two points, zero duration) give defined
values rather than exceptions.  Points are expected in chronological
order; the caller sorts them.

Complexity: O(1) per pair, O(n) per point sequence.
"""

from __future__ import annotations

import math
from typing import Sequence

from .entities import Coordinates, GpsPoint

EARTH_RADIUS_KM = 6_371.0
KM_TO_MILES = 0.621371
DEFAULT_IDLE_THRESHOLD_METERS = 50.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def haversine_distance_km(p1: Coordinates | GpsPoint, p2: Coordinates | GpsPoint) -> float:
    return haversine_km(p1.lat, p1.lng, p2.lat, p2.lng)


def haversine_distance_miles(p1: Coordinates | GpsPoint, p2: Coordinates | GpsPoint) -> float:
    return haversine_distance_km(p1, p2) * KM_TO_MILES


def calculate_total_distance_km(points: Sequence[GpsPoint]) -> float:
    if len(points) < 2:
        return 0.0
    return sum(
        haversine_distance_km(prev, cur) for prev, cur in zip(points, points[1:])
    )


def calculate_total_distance_miles(points: Sequence[GpsPoint]) -> float:
    return calculate_total_distance_km(points) * KM_TO_MILES


def calculate_duration_minutes(points: Sequence[GpsPoint]) -> float:
    """Minutes from first to last sample; negative if the input is unsorted."""
    if len(points) < 2:
        return 0.0
    return (points[-1].timestamp_ms - points[0].timestamp_ms) / 60_000


def is_idle(
    points: Sequence[GpsPoint],
    threshold_meters: float = DEFAULT_IDLE_THRESHOLD_METERS,
) -> bool:
    if len(points) < 2:
        return True
    return calculate_total_distance_km(points) * 1000 < threshold_meters


def calculate_average_speed_km_h(points: Sequence[GpsPoint]) -> float:
    if len(points) < 2:
        return 0.0
    duration_hours = calculate_duration_minutes(points) / 60
    if duration_hours == 0:
        return 0.0
    return calculate_total_distance_km(points) / duration_hours
