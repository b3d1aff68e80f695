"""Great-circle distance on a spherical Earth (haversine)."""

from math import radians, cos, sin, asin, sqrt
from juan_heart.models.referral import GeoPoint

EARTH_RADIUS_KM = 6371.0


def calculate_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometers between two WGS84 coordinates, unrounded."""
    phi1, phi2 = radians(lat1), radians(lat2)
    half_dlat = radians(lat2 - lat1) / 2
    half_dlng = radians(lng2 - lng1) / 2

    h = sin(half_dlat) ** 2 + cos(phi1) * cos(phi2) * sin(half_dlng) ** 2
    # Rounding can push h just past 1.0 for antipodal points
    return 2 * EARTH_RADIUS_KM * asin(sqrt(min(1.0, h)))


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    return calculate_distance_km(a.latitude, a.longitude, b.latitude, b.longitude)
