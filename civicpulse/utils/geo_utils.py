"""
Geographic utility functions for distance and coordinate calculations.

This module contains pure mathematical functions with no dependencies on
providers or services.
"""

import math
from typing import Tuple

# Earth radius in meters
EARTH_RADIUS_M = 6371000


def calculate_distance_meters(
    lat1: float, lon1: float, lat2: float, lon2: float
) -> float:
    """
    Calculate the distance between two points using Haversine formula.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in meters
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2 - lon1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def bounding_box(
    latitude: float, longitude: float, radius_meters: float
) -> Tuple[float, float, float, float]:
    """
    Approximate box containing every point within ``radius_meters``.

    Used as a cheap index filter before the exact Haversine check.

    A box that crosses the antimeridian wraps around: ``min_lon`` is then
    greater than ``max_lon`` and matching longitudes are those ``>= min_lon``
    or ``<= max_lon``. A box that reaches a pole spans every longitude.

    Returns:
        (min_lat, max_lat, min_lon, max_lon) in degrees
    """
    lat_delta = math.degrees(radius_meters / EARTH_RADIUS_M)
    min_lat = max(-90.0, latitude - lat_delta)
    max_lat = min(90.0, latitude + lat_delta)

    cos_lat = math.cos(math.radians(latitude))
    if min_lat <= -90.0 or max_lat >= 90.0 or cos_lat < 1e-6:
        return min_lat, max_lat, -180.0, 180.0

    lon_delta = lat_delta / cos_lat
    if lon_delta >= 180.0:
        return min_lat, max_lat, -180.0, 180.0

    min_lon = longitude - lon_delta
    max_lon = longitude + lon_delta
    if min_lon < -180.0:
        min_lon += 360.0
    if max_lon > 180.0:
        max_lon -= 360.0
    return min_lat, max_lat, min_lon, max_lon
