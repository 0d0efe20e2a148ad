"""Data model classes for measured paths.

- Coordinate / Pixel: Geometry atoms (geographic and screen space)
- Signal / Connection / ConnectionGroup: Typed notification channels
- PathStore: Ordered coordinates, the single source of truth for a path
- PointMarker / Segment / DistanceLabel: Overlays derived from a PathStore
"""

from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.model.overlays import (
    DistanceLabel,
    OverlayAttachment,
    PointMarker,
    PositionableOverlay,
    Segment,
)
from distance_measurer.model.path_store import PathStore
from distance_measurer.model.signal import Connection, ConnectionGroup, Signal

__all__ = [
    "Coordinate",
    "Pixel",
    "Signal",
    "Connection",
    "ConnectionGroup",
    "PathStore",
    "PointMarker",
    "Segment",
    "DistanceLabel",
    "OverlayAttachment",
    "PositionableOverlay",
]
