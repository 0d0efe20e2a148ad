"""Host map adapter interface.

The measuring engine never talks to a concrete map widget. Everything it
needs from the host (pointer events, projection, distance, overlay
attachment, viewport panning and timers) goes through the MapHost protocol
defined here. DeckMapHost (deck_host.py) is the in-process implementation;
tests use a FakeMapHost with linear projection.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.model.signal import Signal


@dataclass(frozen=True)
class PointerEvent:
    """Pointer activity on the map surface or on an overlay.

    Attributes:
        coordinate: Geographic position under the pointer, None if the host
            could not resolve one (e.g. pointer outside the projected world)
        pixel: Container pixel offset of the pointer
    """

    coordinate: Coordinate | None
    pixel: Pixel


class SurfaceEvents:
    """Signals for raw pointer activity on the map surface.

    Every signal emits a single PointerEvent.
    """

    def __init__(self) -> None:
        self.clicked = Signal("clicked")
        self.double_clicked = Signal("double_clicked")
        self.right_clicked = Signal("right_clicked")
        self.mouse_moved = Signal("mouse_moved")
        self.mouse_entered = Signal("mouse_entered")
        self.mouse_left = Signal("mouse_left")
        self.mouse_down = Signal("mouse_down")
        self.mouse_up = Signal("mouse_up")

    def all_signals(self) -> list[Signal]:
        return [
            self.clicked,
            self.double_clicked,
            self.right_clicked,
            self.mouse_moved,
            self.mouse_entered,
            self.mouse_left,
            self.mouse_down,
            self.mouse_up,
        ]


class MapHost(Protocol):
    """Everything the engine consumes from the host map."""

    surface: SurfaceEvents

    def project_to_pixel(self, coord: Coordinate) -> Pixel | None:
        """Container pixel for a coordinate, None if projection is unavailable."""
        ...

    def pixel_to_coordinate(self, pixel: Pixel) -> Coordinate | None:
        """Coordinate under a container pixel, None if unavailable."""
        ...

    def distance_between(self, a: Coordinate, b: Coordinate) -> float:
        """Geodesic distance in meters."""
        ...

    def container_size(self) -> tuple[float, float]:
        """(width, height) of the map container in pixels."""
        ...

    def pan_by(self, dx: float, dy: float) -> None:
        """Shift the viewport by a pixel offset."""
        ...

    def set_options(self, **options: Any) -> None:
        """Host map options.

        Keys:
            draggable_cursor: CSS cursor name shown over the map
            draggable: Whether dragging the surface pans the viewport
            suppress_double_click_zoom: Skip the built-in zoom for the next
                double click only
        """
        ...

    def add_overlay(self, overlay: object) -> None: ...

    def remove_overlay(self, overlay: object) -> None: ...

    def set_interval(self, callback: Callable[[], None], period_ms: float) -> int: ...

    def clear_interval(self, handle: int) -> None: ...
