"""
Geolocation utilities for attendance check-in.

Distances use the haversine great-circle formula on a spherical Earth.
"""
import math
from dataclasses import dataclass

# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class CampusLocation:
    """Fixed campus point plus the radius inside which check-in is allowed."""
    point: GeoPoint
    allowed_radius_meters: float = 500.0
    name: str = ""
    address: str = ""


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate the great-circle distance between two points on Earth.

    Args:
        a: First point in degrees
        b: Second point in degrees

    Returns:
        Distance between the two points in meters. Identical points give 0.0;
        NaN coordinates propagate as NaN.

    Example:
        >>> round(haversine_distance(GeoPoint(24.552041628310768, 46.684321294327596),
        ...                          GeoPoint(24.556541628310768, 46.684321294327596)))
        500
    """
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push h a hair past 1.0 for antipodal points
    if h > 1.0:
        h = 1.0
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c


def is_within_radius(point: GeoPoint, campus: CampusLocation) -> bool:
    """True if point lies inside (or exactly on) the campus geofence."""
    return haversine_distance(point, campus.point) <= campus.allowed_radius_meters


def meters_over_limit(distance_meters: float, radius_meters: float) -> int:
    """How far outside the geofence a distance is, rounded to the nearest meter (never negative)."""
    return max(0, int(round(distance_meters - radius_meters)))
