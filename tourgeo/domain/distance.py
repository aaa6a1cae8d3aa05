"""
Distance calculation using the Haversine formula.

Assumption
----------
We use great-circle (Haversine) distance on a spherical Earth.  No road
graph is available here, so this is a straight-line estimate: it ignores
elevation and street topology.  Real road distances come from the
directions provider when one is configured (see ``routing.py``).

Complexity: O(1) per call, O(n) for a path of n points.
"""

from __future__ import annotations

import math
from typing import Sequence

from .entities import GeoPoint, MapRegion

EARTH_RADIUS_M = 6_371_000.0

# Fallback viewport when there is nothing to frame (Rostov-on-Don centre).
DEFAULT_REGION = MapRegion(
    latitude=47.2357, longitude=39.7125, latitude_delta=0.0922, longitude_delta=0.0421
)


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Return the great-circle distance in **meters** between two points."""
    lat1_r, lat2_r = math.radians(a.latitude), math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def path_length_m(points: Sequence[GeoPoint]) -> float:
    """Sum of hop distances along *points* in the given order."""
    return sum(haversine_m(p, q) for p, q in zip(points, points[1:]))


def bounding_region(
    points: Sequence[GeoPoint], padding: float = 1.2, min_delta: float = 0.01
) -> MapRegion:
    """
    Viewport that frames every point with a ``padding`` margin.

    Spans never shrink below ``min_delta`` degrees so a single point (or a
    tight cluster) still yields a usable zoom level.
    """
    if not points:
        return DEFAULT_REGION

    lats = [p.latitude for p in points]
    lngs = [p.longitude for p in points]
    min_lat, max_lat = min(lats), max(lats)
    min_lng, max_lng = min(lngs), max(lngs)

    return MapRegion(
        latitude=(min_lat + max_lat) / 2,
        longitude=(min_lng + max_lng) / 2,
        latitude_delta=max((max_lat - min_lat) * padding, min_delta),
        longitude_delta=max((max_lng - min_lng) * padding, min_delta),
    )
