"""Great-circle distances for measured paths.

Spherical Earth (R = 6,371 km), decimal degrees in, meters out. Hosts use
haversine_distance_m as their default distance_between; path_length_m sums a
whole polyline in one vectorised pass for the finished-path summary.
"""

from math import asin, atan2, cos, degrees, radians, sin

import numpy as np

EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static haversine helpers. Argument order is always (lat, lon)."""

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Great-circle distance in meters between two points."""
        return float(GeoCalculator._haversine(np.array([lat1, lat2]), np.array([lon1, lon2]))[0])

    @staticmethod
    def path_length_m(lats: list[float], lons: list[float]) -> float:
        """Sum of consecutive great-circle legs. Fewer than two points is 0."""
        assert len(lats) == len(lons), f"{len(lats)} latitudes vs {len(lons)} longitudes"
        if len(lats) < 2:
            return 0.0
        return float(GeoCalculator._haversine(np.asarray(lats, float), np.asarray(lons, float)).sum())

    @staticmethod
    def _haversine(lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
        # One leg per consecutive pair
        phi = np.radians(lats)
        dphi = np.diff(phi)
        dlam = np.radians(np.diff(lons))
        a = np.sin(dphi / 2) ** 2 + np.cos(phi[:-1]) * np.cos(phi[1:]) * np.sin(dlam / 2) ** 2
        return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    @staticmethod
    def destination(lat: float, lon: float, bearing_deg: float, distance_m: float) -> tuple[float, float]:
        """Point reached from (lat, lon) after distance_m along bearing_deg (clockwise from North).

        Returns:
            Tuple (lat, lon) in decimal degrees.
        """
        theta = radians(bearing_deg)
        phi1, lam1 = radians(lat), radians(lon)
        delta = distance_m / EARTH_RADIUS_M

        phi2 = asin(sin(phi1) * cos(delta) + cos(phi1) * sin(delta) * cos(theta))
        lam2 = lam1 + atan2(sin(theta) * sin(delta) * cos(phi1), cos(delta) - sin(phi1) * sin(phi2))
        return degrees(phi2), degrees(lam2)
