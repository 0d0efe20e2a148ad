"""Coordinate - the geometry atom of a measured path.

A Coordinate is an immutable (latitude, longitude) pair. Pixel is its
screen-space counterpart, relative to the top-left of the map container.
"""

from dataclasses import dataclass

import numpy as np

from distance_measurer.core.geo_calculator import GeoCalculator


@dataclass(frozen=True)
class Coordinate:
    """A geographic position in decimal degrees (WGS84).

    Attributes:
        lat: Latitude in decimal degrees, -90..90
        lon: Longitude in decimal degrees, -180..180

    Example:
        point = Coordinate(lat=22.522, lon=113.935)
    """

    lat: float
    lon: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if np.isnan(self.lat) or np.isnan(self.lon):
            raise ValueError(f"Coordinate cannot contain NaN: ({self.lat}, {self.lon})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Latitude out of range: {self.lat}")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude out of range: {self.lon}")

    @property
    def lon_lat(self) -> list[float]:
        """Return [lon, lat] - GeoJSON/Pydeck order."""
        return [self.lon, self.lat]

    def distance_to(self, other: "Coordinate") -> float:
        """Calculate haversine distance to another coordinate in meters."""
        return GeoCalculator.haversine_distance_m(
            lat1=self.lat,
            lon1=self.lon,
            lat2=other.lat,
            lon2=other.lon,
        )

    def __repr__(self) -> str:
        return f"Coordinate(lat={self.lat:.6f}, lon={self.lon:.6f})"


@dataclass(frozen=True)
class Pixel:
    """Container pixel offset (x to the right, y downward)."""

    x: float
    y: float
