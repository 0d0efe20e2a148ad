"""Web-Mercator world-pixel conversion for the in-process map host.

deck.gl renders a 512px world at zoom 0 that doubles with every zoom level.
These helpers convert between (lat, lon) and that world pixel space so the
host can answer pixel <-> coordinate queries for a given viewport.
"""

from math import atan, degrees, exp, log, pi, radians, tan

from distance_measurer.constants import MapConfig

# Web-Mercator is undefined at the poles; deck.gl clamps to this latitude
MAX_LATITUDE_DEG = 85.051129


def world_size_px(zoom: float) -> float:
    """Width (and height) of the world in pixels at a zoom level."""
    return MapConfig.TILE_SIZE_PX * 2**zoom


def lat_lon_to_world(lat: float, lon: float, zoom: float) -> tuple[float, float]:
    """Project (lat, lon) to world pixel coordinates (origin top-left)."""
    size = world_size_px(zoom)
    lat = max(-MAX_LATITUDE_DEG, min(MAX_LATITUDE_DEG, lat))
    x = (lon + 180.0) / 360.0 * size
    y = (1.0 - log(tan(pi / 4 + radians(lat) / 2)) / pi) / 2.0 * size
    return x, y


def world_to_lat_lon(x: float, y: float, zoom: float) -> tuple[float, float]:
    """Inverse of lat_lon_to_world."""
    size = world_size_px(zoom)
    lon = x / size * 360.0 - 180.0
    n = pi * (1.0 - 2.0 * y / size)
    lat = degrees(2.0 * atan(exp(n)) - pi / 2)
    return lat, lon
