"""DeckMapHost - in-process map host backing a pydeck view.

Implements the MapHost protocol without a browser widget:
- Web-Mercator projection around a movable center (deck.gl's 512px world)
- Haversine distances through GeoCalculator
- A cooperative IntervalClock for timers (advance() drives it)
- The set of attached overlays, read back by MapRenderer

It also translates pointer input into the event sequence a browser map
would deliver (press/move/release/click, overlay hover, marker drag). The
Streamlit app feeds it deck.gl click coordinates; tests feed it pixels.

Pointer conventions:
- Pixels are container offsets, origin top-left, y down.
- A press on a draggable PointMarker is captured by the marker: the surface
  sees no mouse_down/mouse_up and no click for that gesture.
- A double click delivers one click followed by double_clicked. Unless
  suppressed for that gesture, the host then zooms in one level.
"""

import logging
from collections.abc import Callable
from typing import Any

import numpy as np

from distance_measurer.constants import MapConfig, MarkerConfig
from distance_measurer.core.geo_calculator import GeoCalculator
from distance_measurer.core.interval_clock import IntervalClock
from distance_measurer.core.web_mercator import MAX_LATITUDE_DEG, lat_lon_to_world, world_size_px, world_to_lat_lon
from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.model.overlays import DistanceLabel, PointMarker, Segment
from distance_measurer.ui.drag_insertion import DragPreviewMarker
from distance_measurer.ui.host import PointerEvent, SurfaceEvents

logger = logging.getLogger(__name__)

OPTION_KEYS = frozenset({"draggable_cursor", "draggable", "suppress_double_click_zoom"})


class DeckMapHost:
    """Viewport, overlays and pointer translation for a pydeck map.

    Example:
        host = DeckMapHost()
        tool = MeasureTool(host)
        tool.start_session()
        host.click_coordinate(Coordinate(lat=22.52, lon=113.93))
        deck = MapRenderer(host).render()
    """

    def __init__(
        self,
        center_lat: float = MapConfig.START_CENTER_LAT,
        center_lon: float = MapConfig.START_CENTER_LON,
        zoom: float = MapConfig.DEFAULT_ZOOM,
        width_px: float = MapConfig.DEFAULT_WIDTH_PX,
        height_px: float = MapConfig.DEFAULT_HEIGHT_PX,
    ) -> None:
        self.surface = SurfaceEvents()
        self.clock = IntervalClock()
        self.center = Coordinate(lat=center_lat, lon=center_lon)
        self.zoom = zoom
        self.width_px = width_px
        self.height_px = height_px
        self.options: dict[str, Any] = {
            "draggable_cursor": MapConfig.CURSOR_DEFAULT,
            "draggable": True,
            "suppress_double_click_zoom": False,
        }
        self._overlays: list[object] = []

        # Pointer interaction state
        self._hovered_segment: Segment | None = None
        self._pressed_marker: PointMarker | None = None
        self._marker_dragging = False

    # =========================================================================
    # MAPHOST PROTOCOL
    # =========================================================================

    def project_to_pixel(self, coord: Coordinate) -> Pixel:
        cx, cy = lat_lon_to_world(self.center.lat, self.center.lon, self.zoom)
        x, y = lat_lon_to_world(coord.lat, coord.lon, self.zoom)
        return Pixel(x - cx + self.width_px / 2, y - cy + self.height_px / 2)

    def pixel_to_coordinate(self, pixel: Pixel) -> Coordinate | None:
        cx, cy = lat_lon_to_world(self.center.lat, self.center.lon, self.zoom)
        wx = cx + pixel.x - self.width_px / 2
        wy = cy + pixel.y - self.height_px / 2
        if not 0 <= wy <= world_size_px(self.zoom):
            return None
        lat, lon = world_to_lat_lon(wx, wy, self.zoom)
        # Wrap longitude back into [-180, 180)
        lon = (lon + 180.0) % 360.0 - 180.0
        return Coordinate(lat=lat, lon=lon)

    def distance_between(self, a: Coordinate, b: Coordinate) -> float:
        return GeoCalculator.haversine_distance_m(a.lat, a.lon, b.lat, b.lon)

    def container_size(self) -> tuple[float, float]:
        return self.width_px, self.height_px

    def pan_by(self, dx: float, dy: float) -> None:
        """Move the viewport center by (dx, dy) pixels and redraw overlays."""
        center = self.pixel_to_coordinate(Pixel(self.width_px / 2 + dx, self.height_px / 2 + dy))
        if center is None:
            logger.debug(f"[PAN] pan_by({dx}, {dy}) would leave the world, ignored")
            return
        lat = max(-MAX_LATITUDE_DEG, min(MAX_LATITUDE_DEG, center.lat))
        self.center = Coordinate(lat=lat, lon=center.lon)
        self._redraw()

    def set_options(self, **options: Any) -> None:
        unknown = set(options) - OPTION_KEYS
        if unknown:
            raise ValueError(f"Unknown map options: {sorted(unknown)}")
        self.options.update(options)
        logger.debug(f"Map options updated: {options}")

    def add_overlay(self, overlay: object) -> None:
        if overlay not in self._overlays:
            self._overlays.append(overlay)

    def remove_overlay(self, overlay: object) -> None:
        if overlay in self._overlays:
            self._overlays.remove(overlay)
        if overlay is self._hovered_segment:
            self._hovered_segment = None

    def set_interval(self, callback: Callable[[], None], period_ms: float) -> int:
        return self.clock.set_interval(callback, period_ms)

    def clear_interval(self, handle: int) -> None:
        self.clock.clear_interval(handle)

    # =========================================================================
    # VIEWPORT
    # =========================================================================

    @property
    def overlays(self) -> list[object]:
        """Attached overlays in attach order."""
        return list(self._overlays)

    def advance(self, elapsed_ms: float) -> int:
        """Advance the interval clock. Returns the number of callbacks fired."""
        return self.clock.advance(elapsed_ms)

    def set_view(self, center: Coordinate | None = None, zoom: float | None = None) -> None:
        if center is not None:
            self.center = center
        if zoom is not None:
            self.zoom = max(MapConfig.MIN_ZOOM, min(MapConfig.MAX_ZOOM, zoom))
        self._redraw()

    def _redraw(self) -> None:
        for overlay in self._overlays:
            if isinstance(overlay, (DistanceLabel, DragPreviewMarker)):
                overlay.draw()

    # =========================================================================
    # POINTER INPUT
    # =========================================================================

    def event_at(self, pixel: Pixel) -> PointerEvent:
        return PointerEvent(coordinate=self.pixel_to_coordinate(pixel), pixel=pixel)

    def move_to(self, pixel: Pixel) -> None:
        event = self.event_at(pixel)
        marker = self._pressed_marker
        if marker is not None:
            if event.coordinate is None:
                return
            if not self._marker_dragging:
                self._marker_dragging = True
                marker.drag_started.emit()
            marker.set_position(event.coordinate)
            marker.dragging.emit()
            return
        self.surface.mouse_moved.emit(event)
        self._update_hover(event)

    def press(self, pixel: Pixel) -> None:
        marker = self._marker_at(pixel)
        if marker is not None:
            self._pressed_marker = marker
            self._marker_dragging = False
            return
        self.surface.mouse_down.emit(self.event_at(pixel))

    def release(self, pixel: Pixel) -> None:
        marker = self._pressed_marker
        if marker is not None:
            dragged = self._marker_dragging
            self._pressed_marker = None
            self._marker_dragging = False
            if dragged:
                marker.drag_ended.emit()
            return
        self.surface.mouse_up.emit(self.event_at(pixel))

    def click(self, pixel: Pixel) -> None:
        """Press and release in place, then deliver a surface click."""
        captured = self._marker_at(pixel) is not None
        self.press(pixel)
        self.release(pixel)
        if captured:
            return
        self.surface.clicked.emit(self.event_at(pixel))

    def click_coordinate(self, coord: Coordinate) -> None:
        self.click(self.project_to_pixel(coord))

    def double_click(self, pixel: Pixel) -> None:
        self.click(pixel)
        self.surface.double_clicked.emit(self.event_at(pixel))
        suppressed = self.options["suppress_double_click_zoom"]
        self.options["suppress_double_click_zoom"] = False
        if suppressed:
            return
        self.set_view(center=self.pixel_to_coordinate(pixel), zoom=self.zoom + 1)

    def right_click(self, pixel: Pixel) -> None:
        self.surface.right_clicked.emit(self.event_at(pixel))

    def drag(self, start: Pixel, end: Pixel, steps: int = 4) -> None:
        """Hover start, press, move to end in steps, release."""
        self.move_to(start)
        self.press(start)
        for i in range(1, steps + 1):
            t = i / steps
            self.move_to(Pixel(start.x + (end.x - start.x) * t, start.y + (end.y - start.y) * t))
        self.release(end)

    def leave(self, pixel: Pixel) -> None:
        """Pointer left the container at pixel (outside the container bounds)."""
        event = self.event_at(pixel)
        if self._hovered_segment is not None:
            self._hovered_segment.mouse_left.emit(event)
            self._hovered_segment = None
        self.surface.mouse_left.emit(event)

    def enter(self, pixel: Pixel) -> None:
        self.surface.mouse_entered.emit(self.event_at(pixel))

    # =========================================================================
    # HIT TESTING
    # =========================================================================

    def _update_hover(self, event: PointerEvent) -> None:
        target = self._segment_at(event.pixel)
        previous = self._hovered_segment
        if target is previous:
            if target is not None:
                target.mouse_moved.emit(event)
            return
        self._hovered_segment = target
        if previous is not None:
            previous.mouse_left.emit(event)
        if target is not None:
            target.mouse_entered.emit(event)

    def _marker_at(self, pixel: Pixel) -> PointMarker | None:
        reach = MarkerConfig.POINT_RADIUS_PX + MarkerConfig.MARKER_HIT_TOLERANCE_PX
        # Topmost (last attached) first
        for overlay in reversed(self._overlays):
            if not isinstance(overlay, PointMarker) or not overlay.draggable or overlay.position is None:
                continue
            p = self.project_to_pixel(overlay.position)
            if np.hypot(p.x - pixel.x, p.y - pixel.y) <= reach:
                return overlay
        return None

    def _segment_at(self, pixel: Pixel) -> Segment | None:
        for overlay in reversed(self._overlays):
            if not isinstance(overlay, Segment) or overlay.dashed or len(overlay.path) < 2:
                continue
            if self._distance_to_path_px(pixel, overlay.path) <= MarkerConfig.SEGMENT_HIT_TOLERANCE_PX:
                return overlay
        return None

    def _distance_to_path_px(self, pixel: Pixel, path: tuple[Coordinate, ...]) -> float:
        """Shortest pixel distance from pixel to a polyline."""
        pts = np.array([[p.x, p.y] for p in (self.project_to_pixel(c) for c in path)])
        target = np.array([pixel.x, pixel.y])
        a, b = pts[:-1], pts[1:]
        ab = b - a
        length_sq = np.einsum("ij,ij->i", ab, ab)
        along = np.einsum("ij,ij->i", target - a, ab)
        t = np.divide(along, length_sq, out=np.zeros_like(along), where=length_sq > 0)
        closest = a + np.clip(t, 0.0, 1.0)[:, None] * ab
        return float(np.min(np.linalg.norm(closest - target, axis=1)))
