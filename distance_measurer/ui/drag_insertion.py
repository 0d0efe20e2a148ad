"""Drag-to-insert: add a point in the middle of an existing segment.

Hovering a segment shows a floating DragPreviewMarker under the pointer
together with a label giving the distance "if inserted here". Pressing and
dragging the preview bends the hovered segment through the pointer (a purely
visual 3-vertex path, the PathStore is untouched). Releasing commits the new
point with a single ``insert_at(segment.index + 1, position)``, which the
SyncEngine reconciles into two proper segments.

Flow:
    segment hover -> DragInsertion.hover() -> preview marker + label
    mouse down    -> DragPreviewMarker.drag_started -> bend segment
    mouse move    -> DragPreviewMarker.dragged      -> re-bend, refresh label
    mouse up      -> DragPreviewMarker.drag_ended   -> PathStore.insert_at
"""

import logging
from typing import TYPE_CHECKING

from distance_measurer.constants import LabelConfig
from distance_measurer.core.distance_format import format_distance
from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.model.overlays import DistanceLabel, OverlayAttachment, Segment
from distance_measurer.model.signal import ConnectionGroup, Signal

if TYPE_CHECKING:
    from distance_measurer.ui.host import MapHost, PointerEvent
    from distance_measurer.ui.sync_engine import SyncEngine

logger = logging.getLogger(__name__)


class DragPreviewMarker:
    """Floating handle shown while a segment is hovered.

    While attached it listens to the host surface: mouse down with a visible
    handle starts a drag (and locks map panning), mouse moves drag it, mouse
    up ends it. Clearing the position hides the handle and cancels any drag.

    Signals:
        drag_started(), dragged(), drag_ended()
    """

    def __init__(self) -> None:
        self.position: Coordinate | None = None
        self.pixel: Pixel | None = None
        self.is_dragging = False
        self.just_dropped = False  # Until the next mouse down
        self.attachment = OverlayAttachment(self, on_attached=self.construct, on_detached=self.destroy)
        self._listeners: ConnectionGroup | None = None
        self.drag_started = Signal("drag_started")
        self.dragged = Signal("dragged")
        self.drag_ended = Signal("drag_ended")

    @property
    def attached(self) -> bool:
        return self.attachment.attached

    @property
    def visible(self) -> bool:
        return self.attached and self.pixel is not None

    def set_map(self, host: "MapHost | None") -> None:
        self.attachment.set_map(host)

    def construct(self) -> None:
        host = self.attachment.host
        assert host is not None
        self._listeners = ConnectionGroup()
        self._listeners.add(host.surface.mouse_down.connect(self._on_mouse_down))
        self._listeners.add(host.surface.mouse_moved.connect(self._on_mouse_move))
        self._listeners.add(host.surface.mouse_up.connect(self._on_mouse_up))
        self.draw()

    def draw(self) -> None:
        host = self.attachment.host
        if host is None:
            return
        if self.position is None:
            self.pixel = None
            self.is_dragging = False
            return
        pixel = host.project_to_pixel(self.position)
        if pixel is None:
            logger.debug("Drag preview: projection unavailable, skipping draw")
            return
        self.pixel = pixel

    def destroy(self) -> None:
        if self._listeners is not None:
            self._listeners.release()
            self._listeners = None
        self.pixel = None
        self.is_dragging = False

    def set_position(self, position: Coordinate | None) -> None:
        self.position = position
        self.draw()

    def _on_mouse_down(self, event: "PointerEvent") -> None:
        host = self.attachment.host
        self.just_dropped = False
        if self.position is None or host is None:
            return
        self.is_dragging = True
        host.set_options(draggable=False)
        self.drag_started.emit()

    def _on_mouse_move(self, event: "PointerEvent") -> None:
        if not self.is_dragging or event.coordinate is None:
            return
        self.set_position(event.coordinate)
        self.dragged.emit()

    def _on_mouse_up(self, event: "PointerEvent") -> None:
        host = self.attachment.host
        if not self.is_dragging or host is None:
            return
        self.is_dragging = False
        self.just_dropped = True
        host.set_options(draggable=True)
        self.drag_ended.emit()


class DragInsertion:
    """Hover preview and drag-commit of a new mid-segment point.

    Args:
        engine: SyncEngine owning the segments and the PathStore
    """

    def __init__(self, engine: "SyncEngine") -> None:
        self._engine = engine
        self.marker = DragPreviewMarker()
        self.label = DistanceLabel(closable=False, offset=LabelConfig.CURSOR_LABEL_OFFSET)
        self.hover_index = -1
        self._label_segment_index = -1
        self._bent_segment: Segment | None = None
        self._original_ends: tuple[Coordinate, Coordinate] | None = None
        self._connections = ConnectionGroup()
        self._connections.add(self.marker.drag_started.connect(self._on_drag_start))
        self._connections.add(self.marker.dragged.connect(self._on_drag))
        self._connections.add(self.marker.drag_ended.connect(self._on_drag_end))

    @property
    def is_dragging(self) -> bool:
        return self.marker.is_dragging

    def attach(self, host: "MapHost") -> None:
        self.marker.set_map(host)
        self.label.set_map(host)

    def dispose(self) -> None:
        self._connections.release()
        self.marker.set_map(None)
        self.label.set_map(None)

    # =========================================================================
    # HOVER
    # =========================================================================

    def hover(self, segment: Segment, event: "PointerEvent") -> None:
        """Pointer entered or moved over a segment: show the insert preview."""
        if self._engine.is_editing() or event.coordinate is None:
            return
        self.marker.set_position(event.coordinate)
        self.hover_index = segment.index
        self.update_label(event.coordinate, segment_index=segment.index)

    def leave(self, segment: Segment, event: "PointerEvent") -> None:
        """Pointer left a segment: hide the insert preview."""
        if self._engine.is_editing():
            return
        self._hide()

    def update_label(self, coord: Coordinate, segment_index: int | None = None, dragging: bool = False) -> None:
        """Distance from the start to coord when inserted after point segment_index."""
        if segment_index is not None:
            self._label_segment_index = segment_index
        index = self._label_segment_index
        if not 0 <= index < len(self._engine.labels):
            return

        anchor = self._engine.labels[index].position
        assert anchor is not None
        distance = self._engine.distance_to_point(index) + self._engine.host.distance_between(anchor, coord)
        text = format_distance(distance, LabelConfig.PRECISION)
        self.label.set_position(coord)
        self.label.set_content(text, None if dragging else LabelConfig.DRAG_HINT)

    def consume_click(self) -> bool:
        """True once after a drag ended (the host reports a click after mouse up)."""
        dropped = self.marker.just_dropped
        self.marker.just_dropped = False
        return dropped

    # =========================================================================
    # DRAG
    # =========================================================================

    def _on_drag_start(self) -> None:
        segments = self._engine.segments
        if not 0 <= self.hover_index < len(segments):
            return
        segment = segments[self.hover_index]
        if segment.start is None or segment.end is None:
            return
        self._bent_segment = segment
        self._original_ends = (segment.start, segment.end)
        self._bend(self.marker.position)
        logger.debug(f"[DRAG] Insert drag started on segment {segment.index}")

    def _on_drag(self) -> None:
        if self._original_ends is None or self.marker.position is None:
            return
        self._bend(self.marker.position)
        self.update_label(self.marker.position, dragging=True)

    def _on_drag_end(self) -> None:
        segment = self._bent_segment
        position = self.marker.position
        self._bent_segment = None
        self._original_ends = None
        self._hide()
        if segment is None or position is None:
            return
        insert_index = segment.index + 1
        logger.info(f"[DRAG] Inserting point at index {insert_index}")
        self._engine.path.insert_at(insert_index, position)

    def _bend(self, position: Coordinate | None) -> None:
        assert self._bent_segment is not None and self._original_ends is not None
        start, end = self._original_ends
        if position is None:
            return
        self._bent_segment.set_path([start, position, end])

    def _hide(self) -> None:
        self.marker.set_position(None)
        self.hover_index = -1
        self.label.set_position(None)
