"""Map overlays derived from a measured path.

Four overlay kinds are drawn for a path:
- PointMarker: one per path point (draggable once the session has ended)
- Segment: one per adjacent pair of points, also used for the dashed cursor line
- DistanceLabel: one per path point, showing cumulative distance text
- DragPreviewMarker (ui/drag_insertion.py): floating handle for mid-segment inserts

Overlays never draw themselves. They hold display state and report it to the
host they are attached to; the host renders whatever is attached. Attachment
is handled by composition (OverlayAttachment) rather than a shared base class.

The ``index`` field on markers, segments and labels is derived state: the
SyncEngine rewrites it after every structural change. Nothing else sets it.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from distance_measurer.constants import LabelConfig
from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.model.signal import Signal

if TYPE_CHECKING:
    from distance_measurer.ui.host import MapHost

logger = logging.getLogger(__name__)


class PositionableOverlay(Protocol):
    """Capability shared by overlays that place a custom element at a coordinate.

    construct() runs when attached, destroy() when detached, and every
    position change redraws through draw().
    """

    position: Coordinate | None
    pixel: Pixel | None

    def construct(self) -> None: ...

    def draw(self) -> None: ...

    def destroy(self) -> None: ...

    def set_position(self, position: Coordinate | None) -> None: ...


class OverlayAttachment:
    """Attach/detach bookkeeping for one overlay.

    Args:
        overlay: The overlay registered with the host
        on_attached: Called after the host accepted the overlay
        on_detached: Called after the host released the overlay
    """

    def __init__(
        self,
        overlay: object,
        on_attached: Callable[[], None] | None = None,
        on_detached: Callable[[], None] | None = None,
    ) -> None:
        self._overlay = overlay
        self._on_attached = on_attached
        self._on_detached = on_detached
        self.host: MapHost | None = None

    @property
    def attached(self) -> bool:
        return self.host is not None

    def set_map(self, host: "MapHost | None") -> None:
        if host is self.host:
            return
        if self.host is not None:
            previous = self.host
            self.host = None
            previous.remove_overlay(self._overlay)
            if self._on_detached:
                self._on_detached()
        if host is not None:
            self.host = host
            host.add_overlay(self._overlay)
            if self._on_attached:
                self._on_attached()


class PointMarker:
    """Marker for one path point.

    Signals:
        position_changed(position): after set_position changed the position
        drag_started(), dragging(), drag_ended(): emitted by the host while
            the user drags a draggable marker
    """

    def __init__(self) -> None:
        self.index = -1
        self.position: Coordinate | None = None
        self.clickable = False
        self.draggable = False
        self.attachment = OverlayAttachment(self)
        self.position_changed = Signal("position_changed")
        self.drag_started = Signal("drag_started")
        self.dragging = Signal("dragging")
        self.drag_ended = Signal("drag_ended")

    @property
    def attached(self) -> bool:
        return self.attachment.attached

    def set_map(self, host: "MapHost | None") -> None:
        self.attachment.set_map(host)

    def set_position(self, position: Coordinate | None) -> None:
        if position == self.position:
            return
        self.position = position
        self.position_changed.emit(position)

    def __repr__(self) -> str:
        return f"PointMarker(index={self.index}, position={self.position})"


class Segment:
    """Polyline between path points (or from the last point to the cursor).

    Signals:
        mouse_moved(event), mouse_entered(event), mouse_left(event): pointer
            activity over the line, emitted by the host
    """

    def __init__(self, dashed: bool = False) -> None:
        self.index = -1
        self.path: tuple[Coordinate, ...] = ()
        self.dashed = dashed
        self.attachment = OverlayAttachment(self)
        self.mouse_moved = Signal("mouse_moved")
        self.mouse_entered = Signal("mouse_entered")
        self.mouse_left = Signal("mouse_left")

    @property
    def attached(self) -> bool:
        return self.attachment.attached

    def set_map(self, host: "MapHost | None") -> None:
        self.attachment.set_map(host)

    def set_path(self, path: list[Coordinate] | tuple[Coordinate, ...]) -> None:
        self.path = tuple(path)

    @property
    def start(self) -> Coordinate | None:
        return self.path[0] if self.path else None

    @property
    def end(self) -> Coordinate | None:
        return self.path[-1] if self.path else None

    def __repr__(self) -> str:
        return f"Segment(index={self.index}, vertices={len(self.path)}, dashed={self.dashed})"


class DistanceLabel:
    """Text label anchored at a coordinate.

    Used for per-point cumulative distances (closable, with a delete button
    and, on the end label, a clear button) and for the cursor-following
    start/move/drag hints (not closable).

    Signals:
        delete_requested(): the user pressed the delete button
        clear_requested(): the user pressed the clear button
    """

    def __init__(
        self,
        closable: bool = True,
        offset: tuple[float, float] = LabelConfig.DISTANCE_LABEL_OFFSET,
    ) -> None:
        self.index = -1
        self.closable = closable
        self.offset = offset
        self.position: Coordinate | None = None
        self.pixel: Pixel | None = None
        self.content: str | None = None
        self.hint: str | None = None
        self.is_end = False
        self.clear_button_visible = False
        self.attachment = OverlayAttachment(self, on_attached=self.construct, on_detached=self.destroy)
        self.delete_requested = Signal("delete_requested")
        self.clear_requested = Signal("clear_requested")

    @property
    def attached(self) -> bool:
        return self.attachment.attached

    @property
    def visible(self) -> bool:
        return self.attached and self.pixel is not None

    def set_map(self, host: "MapHost | None") -> None:
        self.attachment.set_map(host)

    def construct(self) -> None:
        self.draw()

    def draw(self) -> None:
        host = self.attachment.host
        if host is None:
            return
        if self.position is None:
            self.pixel = None
            return
        anchor = host.project_to_pixel(self.position)
        if anchor is None:
            # Host cannot project yet; the next position change redraws
            logger.debug(f"Label {self.index}: projection unavailable, skipping draw")
            return
        self.pixel = Pixel(anchor.x + self.offset[0], anchor.y + self.offset[1])

    def destroy(self) -> None:
        self.pixel = None

    def set_position(self, position: Coordinate | None) -> None:
        self.position = position
        self.draw()

    def set_content(self, content: str | None, hint: str | None = None) -> None:
        self.content = content
        self.hint = hint

    def set_is_end(self, is_end: bool) -> None:
        self.is_end = is_end
        self.clear_button_visible = self.closable and is_end

    def request_delete(self) -> None:
        if self.closable and self.visible:
            self.delete_requested.emit()

    def request_clear(self) -> None:
        if self.clear_button_visible and self.visible:
            self.clear_requested.emit()

    def __repr__(self) -> str:
        return f"DistanceLabel(index={self.index}, content={self.content!r}, is_end={self.is_end})"
