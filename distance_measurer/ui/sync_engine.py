"""SyncEngine - keeps map overlays consistent with a PathStore.

The engine owns three index-aligned collections derived from the path:

    markers[i]   PointMarker at path[i]
    labels[i]    DistanceLabel following markers[i] (cumulative distance text)
    segments[i]  Segment from path[i] to path[i + 1]

so that at every quiet point ``len(markers) == len(labels) == len(path)``
and ``len(segments) == max(0, len(path) - 1)``.

Reconciliation is incremental. Each PathStore ``inserted``/``removed``
notification splices exactly the affected overlays, rewrites the derived
``index`` fields and recomputes the label texts and the dashed cursor line.
Nothing is rebuilt from scratch.

Editing paths that re-enter the same machinery:
- Dragging a point marker (after the session ended) bends its two incident
  segments live, then commits with ``insert_at(i, new)`` + ``remove_at(i + 1)``.
- Dragging the hover preview of a segment (DragInsertion) commits with
  ``insert_at(segment.index + 1, new)``.
- Pressing a label's delete button commits ``remove_at(label.index)``.

A path left without any segment is not kept: removing down to a single
point clears the store entirely.
"""

import logging
from typing import TYPE_CHECKING

from distance_measurer.constants import LabelConfig
from distance_measurer.core.distance_format import format_distance
from distance_measurer.model.coordinate import Coordinate
from distance_measurer.model.overlays import DistanceLabel, PointMarker, Segment
from distance_measurer.model.path_store import PathStore
from distance_measurer.model.signal import ConnectionGroup
from distance_measurer.ui.drag_insertion import DragInsertion

if TYPE_CHECKING:
    from distance_measurer.ui.host import MapHost

logger = logging.getLogger(__name__)


class SyncEngine:
    """Reconciles markers, segments and labels with a PathStore.

    Args:
        path: The PathStore to mirror (the engine subscribes to it)
        host: Map host the overlays are attached to

    Example:
        path = PathStore()
        engine = SyncEngine(path=path, host=host)
        path.push(Coordinate(lat=22.52, lon=113.93))
        path.push(Coordinate(lat=22.53, lon=113.94))
        engine.labels[1].content  # "1.5公里"
    """

    def __init__(self, path: PathStore, host: "MapHost") -> None:
        self.path = path
        self.host = host
        self.markers: list[PointMarker] = []
        self.segments: list[Segment] = []
        self.labels: list[DistanceLabel] = []
        self.is_end = False
        self.cursor_position: Coordinate | None = None
        self.dragged_marker_index = -1
        self._marker_far_ends: tuple[Coordinate | None, Coordinate | None] = (None, None)

        # Listener groups per overlay, released when the overlay is torn down
        self._overlay_listeners: dict[int, ConnectionGroup] = {}

        self._store_listeners = ConnectionGroup()
        self._store_listeners.add(path.inserted.connect(self.on_inserted))
        self._store_listeners.add(path.removed.connect(self.on_removed))

        self.cursor_line = Segment(dashed=True)
        self.cursor_line.set_map(host)

        self.drag = DragInsertion(engine=self)
        self.drag.attach(host)

        self.start_label: DistanceLabel | None = DistanceLabel(
            closable=False, offset=LabelConfig.CURSOR_LABEL_OFFSET
        )
        self.start_label.set_map(host)
        self.start_label.set_content(LabelConfig.CLICK_TO_START)

        self.move_label: DistanceLabel | None = DistanceLabel(
            closable=False, offset=LabelConfig.CURSOR_LABEL_OFFSET
        )
        self.move_label.set_map(host)

    # =========================================================================
    # STRUCTURAL RECONCILIATION
    # =========================================================================

    def on_inserted(self, index: int, coord: Coordinate) -> None:
        """Splice overlays for a point inserted at index."""
        marker = self._create_point()
        self.markers.insert(index, marker)
        marker.set_position(coord)

        label = self._create_label(marker)
        self.labels.insert(index, label)

        # Segment ending at the new point: re-path the one spanning the gap,
        # or create it when appending
        if index > 0:
            before = self.segments[index - 1] if index - 1 < len(self.segments) else None
            if before is None:
                before = self._create_line()
                self.segments.insert(index - 1, before)
            before.set_path([self.path.get_at(index - 1), coord])

        # Segment leaving the new point toward its successor is always new
        if index + 1 < len(self.markers):
            after = self._create_line()
            after.set_path([coord, self.path.get_at(index + 1)])
            self.segments.insert(index, after)

        self._check_alignment()
        self._reindex()
        self.update_label_content()
        self.update_cursor_line()
        logger.debug(f"[SYNC] Inserted point {index}: {len(self.markers)} points, {len(self.segments)} segments")

    def on_removed(self, index: int, coord: Coordinate) -> None:
        """Tear down overlays for the point removed at index."""
        assert 0 <= index < len(self.markers), f"No marker at removed index {index}"
        self._remove_point(self.markers.pop(index))
        self._remove_label(self.labels.pop(index))

        # At most one incident segment goes: the outgoing one, or the
        # incoming one when the last point was removed
        if index < len(self.segments):
            self._remove_line(self.segments.pop(index))
        elif 0 <= index - 1 < len(self.segments):
            self._remove_line(self.segments.pop(index - 1))

        if self.segments:
            # Removed an interior point: the surviving incoming segment now spans the gap
            if 0 < index < len(self.path):
                self.segments[index - 1].set_path([self.path.get_at(index - 1), self.path.get_at(index)])
            self._check_alignment()
            self._reindex()
            self.update_label_content()
        else:
            # No segment left, nothing worth showing
            self.path.clear()

        self.update_cursor_line()
        logger.debug(f"[SYNC] Removed point {index}: {len(self.markers)} points, {len(self.segments)} segments")

    def _check_alignment(self) -> None:
        n = len(self.path)
        assert len(self.markers) == n and len(self.labels) == n, "Markers/labels out of sync with path"
        assert len(self.segments) == max(0, n - 1), "Segments out of sync with path"

    def _reindex(self) -> None:
        for i, marker in enumerate(self.markers):
            marker.index = i
        for i, label in enumerate(self.labels):
            label.index = i
        for i, segment in enumerate(self.segments):
            segment.index = i

    # =========================================================================
    # DISTANCE TEXT
    # =========================================================================

    def distance_to_point(self, index: int) -> float:
        """Cumulative distance in meters from the start to label index."""
        distance = 0.0
        for i in range(1, index + 1):
            previous = self.labels[i - 1].position
            current = self.labels[i].position
            assert previous is not None and current is not None
            distance += self.host.distance_between(previous, current)
        return distance

    def update_label_content(self) -> None:
        """Recompute every label: start text, running distances, end styling."""
        n = len(self.labels)
        distance = 0.0
        for i, label in enumerate(self.labels):
            if i == 0:
                label.set_content(LabelConfig.START_TEXT)
                label.set_is_end(False)
                continue
            previous = self.labels[i - 1].position
            assert previous is not None and label.position is not None
            distance += self.host.distance_between(previous, label.position)
            label.set_content(format_distance(distance, LabelConfig.PRECISION))
            label.set_is_end(self.is_end and i == n - 1)

    def update_move_label(self, coord: Coordinate) -> None:
        """Live "current distance" including the prospective segment to the cursor."""
        if self.move_label is None or not self.labels:
            return
        last = self.labels[-1].position
        assert last is not None
        distance = self.distance_to_point(len(self.labels) - 1) + self.host.distance_between(last, coord)
        self.move_label.set_position(coord)
        self.move_label.set_content(
            f"{LabelConfig.CURRENT_PREFIX}{format_distance(distance, LabelConfig.PRECISION)}",
            LabelConfig.MOVE_HINT,
        )

    # =========================================================================
    # CURSOR PREVIEW
    # =========================================================================

    def set_cursor_position(self, coord: Coordinate | None) -> None:
        if self.start_label is not None:
            self.start_label.set_position(coord)
        self.cursor_position = coord
        self.update_cursor_line()

    def update_cursor_line(self) -> None:
        last = self.path.last
        if not self.is_end and last is not None and self.cursor_position is not None:
            self.cursor_line.set_path([last, self.cursor_position])
        else:
            self.cursor_line.set_path([])

    def hide_cursor_line(self) -> None:
        self.cursor_line.set_map(None)

    def show_cursor_line(self) -> None:
        self.cursor_line.set_map(self.host)

    def hide_start_label(self) -> None:
        if self.start_label is not None:
            self.start_label.set_map(None)

    def show_start_label(self) -> None:
        """Back to the "click to start" hint once every point is gone mid-session."""
        if self.start_label is not None:
            self.start_label.set_position(self.cursor_position)
            self.start_label.set_map(self.host)
        if self.move_label is not None:
            self.move_label.set_position(None)
            self.move_label.set_content(None)

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    def end(self) -> None:
        """Freeze the path: end styling, editable markers, no cursor preview."""
        self.is_end = True
        self.cursor_position = None
        for marker in self.markers:
            marker.clickable = True
            marker.draggable = True
        if self.move_label is not None:
            self.move_label.set_map(None)
            self.move_label = None
        if self.start_label is not None:
            self.start_label.set_map(None)
            self.start_label = None
        self.update_label_content()
        self.update_cursor_line()

        if not self.segments and len(self.path) > 0:
            # A lone point never extended into a path vanishes
            logger.info("[SYNC] Session ended without segments, removing lone point")
            self.path.clear()

    def is_editing(self) -> bool:
        return self.drag.is_dragging or self.dragged_marker_index >= 0

    def consume_click(self) -> bool:
        """True if a surface click belongs to a drag gesture and must not add a point."""
        swallowed = self.drag.consume_click()
        return swallowed or self.is_editing()

    def clear(self) -> None:
        self.path.clear()

    def dispose(self) -> None:
        """Clear the path and release every overlay and listener."""
        self.clear()
        self._store_listeners.release()
        self.cursor_line.set_map(None)
        self.drag.dispose()
        self.hide_start_label()
        self.start_label = None
        if self.move_label is not None:
            self.move_label.set_map(None)
            self.move_label = None
        logger.debug("[SYNC] Disposed")

    # =========================================================================
    # OVERLAY FACTORIES
    # =========================================================================

    def _listeners_for(self, overlay: object) -> ConnectionGroup:
        group = self._overlay_listeners.get(id(overlay))
        if group is None:
            group = self._overlay_listeners[id(overlay)] = ConnectionGroup()
        return group

    def _release_listeners(self, overlay: object) -> None:
        group = self._overlay_listeners.pop(id(overlay), None)
        if group is not None:
            group.release()

    def _create_point(self) -> PointMarker:
        marker = PointMarker()
        marker.clickable = self.is_end
        marker.draggable = self.is_end
        listeners = self._listeners_for(marker)
        listeners.add(marker.drag_started.connect(lambda: self._on_marker_drag_start(marker)))
        listeners.add(marker.dragging.connect(lambda: self._on_marker_dragging(marker)))
        listeners.add(marker.drag_ended.connect(lambda: self._on_marker_drag_end(marker)))
        marker.set_map(self.host)
        return marker

    def _create_label(self, marker: PointMarker) -> DistanceLabel:
        label = DistanceLabel()
        listeners = self._listeners_for(label)
        listeners.add(label.delete_requested.connect(lambda: self.path.remove_at(label.index)))
        listeners.add(label.clear_requested.connect(self.clear))
        # Label follows its marker's position
        listeners.add(marker.position_changed.connect(label.set_position))
        label.set_map(self.host)
        label.set_position(marker.position)
        return label

    def _create_line(self) -> Segment:
        line = Segment()
        listeners = self._listeners_for(line)
        listeners.add(line.mouse_moved.connect(lambda event: self.drag.hover(line, event)))
        listeners.add(line.mouse_entered.connect(lambda event: self.drag.hover(line, event)))
        listeners.add(line.mouse_left.connect(lambda event: self.drag.leave(line, event)))
        line.set_map(self.host)
        return line

    def _remove_point(self, marker: PointMarker) -> None:
        self._release_listeners(marker)
        marker.set_map(None)
        marker.set_position(None)

    def _remove_label(self, label: DistanceLabel) -> None:
        self._release_listeners(label)
        label.set_map(None)
        label.position = None
        label.set_content(None)

    def _remove_line(self, line: Segment) -> None:
        self._release_listeners(line)
        line.set_map(None)
        line.set_path([])

    # =========================================================================
    # POINT MARKER DRAG (repositioning an existing point)
    # =========================================================================

    def _on_marker_drag_start(self, marker: PointMarker) -> None:
        index = self.dragged_marker_index = marker.index
        self.drag.marker.set_position(None)
        before = self.segments[index - 1] if index > 0 else None
        after = self.segments[index] if index < len(self.segments) else None
        self._marker_far_ends = (before.start if before else None, after.end if after else None)
        logger.debug(f"[SYNC] Marker {index} drag started")

    def _on_marker_dragging(self, marker: PointMarker) -> None:
        index = self.dragged_marker_index = marker.index
        position = marker.position
        if position is None:
            return
        far_before, far_after = self._marker_far_ends
        if index > 0:
            before = self.segments[index - 1]
            before.set_path([far_before or before.start, position])
        if index < len(self.segments):
            after = self.segments[index]
            after.set_path([position, far_after or after.end])
        self.update_label_content()

    def _on_marker_drag_end(self, marker: PointMarker) -> None:
        self.dragged_marker_index = -1
        self._marker_far_ends = (None, None)
        position = marker.position
        index = marker.index
        if position is None:
            return
        logger.info(f"[SYNC] Committing dragged point {index}")
        self.path.insert_at(index, position)
        self.path.remove_at(index + 1)
