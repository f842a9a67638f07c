"""
Great-circle distance helpers for duplicate detection and proximity search.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional

from toiletmap.db import ToiletRecord

EARTH_RADIUS_METERS = 6_371_000
DUPLICATE_THRESHOLD_METERS = 20.0


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Return the haversine distance in meters between two lat/lng points."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push a just past 1 for near-antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def distance_to(toilet: ToiletRecord, lat: float, lng: float) -> float:
    return haversine_meters(lat, lng, toilet.location.lat, toilet.location.lng)


def find_duplicate(
    toilets: Iterable[ToiletRecord],
    lat: float,
    lng: float,
    threshold_meters: float = DUPLICATE_THRESHOLD_METERS,
) -> Optional[ToiletRecord]:
    """
    Return the first listing within ``threshold_meters`` of the point, if any.
    """
    for toilet in toilets:
        if distance_to(toilet, lat, lng) <= threshold_meters:
            return toilet
    return None


def filter_by_radius(
    toilets: Iterable[ToiletRecord],
    lat: float,
    lng: float,
    radius_meters: float,
) -> list[tuple[ToiletRecord, float]]:
    """
    Keep listings within ``radius_meters`` of the point, nearest first.

    Returns ``(toilet, distance_meters)`` pairs.
    """
    within = []
    for toilet in toilets:
        distance = distance_to(toilet, lat, lng)
        if distance <= radius_meters:
            within.append((toilet, distance))
    within.sort(key=lambda pair: pair[1])
    return within
