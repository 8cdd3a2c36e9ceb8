"""Spherical distance helpers."""

import math

EARTH_RADIUS_KM = 6371.0088


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def latitude_band(latitude: float, radius_km: float) -> tuple[float, float]:
    """Latitude range that contains every point within ``radius_km``.

    Longitude is not bounded: near the poles and the antimeridian a
    longitude box is wider than the circle, so it is left to the exact
    distance check.
    """
    delta = math.degrees(radius_km / EARTH_RADIUS_KM)
    return max(-90.0, latitude - delta), min(90.0, latitude + delta)
