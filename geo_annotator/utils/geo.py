"""Geospatial helpers."""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt
from typing import Sequence

from ..core.models import GeoPoint


EARTH_RADIUS_KM = 6371.0

# km per degree at the equator; squared for km² per degree².
KM_PER_DEGREE = 111.32


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two coordinates in kilometres."""

    phi1 = radians(lat1)
    phi2 = radians(lat2)
    delta_phi = radians(lat2 - lat1)
    delta_lambda = radians(lon2 - lon1)

    a = sin(delta_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(delta_lambda / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def path_length(points: Sequence[GeoPoint]) -> float:
    """Sum of haversine distances between consecutive points, in kilometres."""

    total = 0.0
    for start, end in zip(points, points[1:]):
        total += haversine_distance(start.lat, start.lng, end.lat, end.lng)
    return total


def shoelace_area(points: Sequence[GeoPoint]) -> float:
    """Approximate enclosed area in km² of the closed path through ``points``.

    Degrees are treated as a flat grid and scaled by the equatorial km/degree
    factor, so the result degrades away from the equator and for spans larger
    than a few hundred kilometres.
    """

    count = len(points)
    if count < 3:
        return 0.0

    area = 0.0
    for index in range(count):
        current = points[index]
        following = points[(index + 1) % count]
        area += current.lng * following.lat - following.lng * current.lat

    return abs(area * KM_PER_DEGREE * KM_PER_DEGREE * 0.5)
