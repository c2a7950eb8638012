"""Geographic helpers."""

import math

from ..core.models.domain import Coordinates

EARTH_RADIUS_KM = 6371


def haversine_distance(point1: Coordinates, point2: Coordinates) -> float:
    """Calculate haversine distance in km."""
    lat1 = math.radians(point1.latitude)
    lat2 = math.radians(point2.latitude)
    dlat = math.radians(point2.latitude - point1.latitude)
    dlon = math.radians(point2.longitude - point1.longitude)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def is_within_radius(center: Coordinates, point: Coordinates, radius_km: float) -> bool:
    return haversine_distance(center, point) <= radius_km
