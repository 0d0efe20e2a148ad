"""Core foundation: geodesic math, distance formatting, projection and timing.

- GeoCalculator: Geodesic calculations (distances, destinations)
- format_distance: Two-tier meter/kilometer display strings
- IntervalClock: Cooperative interval scheduler for single-threaded hosts
- web_mercator: World-pixel projection helpers (import the module directly)
"""

from distance_measurer.core.distance_format import format_distance
from distance_measurer.core.geo_calculator import GeoCalculator
from distance_measurer.core.interval_clock import IntervalClock

__all__ = [
    "GeoCalculator",
    "format_distance",
    "IntervalClock",
]
