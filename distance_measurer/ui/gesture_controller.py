"""Gesture controller for a measuring session.

Turns raw pointer events on the map surface into path edit commands and
cursor notifications, and pans the viewport while the pointer rests past a
container edge.

Uses python-statemachine for the session lifecycle:

States:
    IDLE: Session started, waiting for the first click
    PLACING: First point placed
    EXTENDING: Two or more points, cursor preview active
    ENDED: Terminal, every surface listener released

Transitions:
    IDLE -> PLACING: place_first (click)
    PLACING/EXTENDING -> EXTENDING: extend (click)
    PLACING/EXTENDING -> IDLE: restart (every point deleted mid-session)
    IDLE/PLACING/EXTENDING -> ENDED: finish (right click, double click, end_session)

Cursor moves and pointer enter/leave are not state changes; they are
forwarded as notifications while the session is not ended.

Edge auto-pan
-------------
When the pointer leaves the container while EXTENDING, its exit pixel is
classified against the container's aspect ratio (classify_edge). Left/right
is tested first, top/bottom second and wins when both match. Points on a
diagonal, or the exact center, classify as no direction and do not pan.
A classified exit starts one interval panning PanConfig.STEP_PX every
PanConfig.INTERVAL_MS until the pointer re-enters or the session ends.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from distance_measurer.constants import MapConfig, PanConfig
from distance_measurer.model.coordinate import Pixel
from distance_measurer.model.signal import ConnectionGroup, Signal

if TYPE_CHECKING:
    from distance_measurer.ui.host import MapHost, PointerEvent

logger = logging.getLogger(__name__)


class PanDirection(Enum):
    """Viewport pan direction with its unit pixel offset."""

    LEFT = (-1, 0)
    RIGHT = (1, 0)
    TOP = (0, -1)
    BOTTOM = (0, 1)

    def offset(self, step_px: float) -> tuple[float, float]:
        dx, dy = self.value
        return dx * step_px, dy * step_px


def _ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator with IEEE semantics for a zero denominator."""
    if denominator == 0:
        return math.inf if numerator > 0 else math.nan
    return numerator / denominator


def classify_edge(pixel: Pixel, width: float, height: float) -> PanDirection | None:
    """Classify the container edge nearest to an exit pixel.

    Args:
        pixel: Pointer position relative to the container's top-left corner
        width: Container width in pixels
        height: Container height in pixels

    Returns:
        Direction to pan, or None when the pixel is on a diagonal or the center.
    """
    if width <= 0 or height <= 0:
        return None

    cx, cy = width / 2, height / 2
    alpha = height / width
    direction = None

    if cx > pixel.x:
        if _ratio(abs(cy - pixel.y), cx - pixel.x) < alpha:
            direction = PanDirection.LEFT
    elif _ratio(abs(cy - pixel.y), pixel.x - cx) < alpha:
        direction = PanDirection.RIGHT

    if cy > pixel.y:
        if _ratio(cy - pixel.y, abs(cx - pixel.x)) > alpha:
            direction = PanDirection.TOP
    elif _ratio(pixel.y - cy, abs(cx - pixel.x)) > alpha:
        direction = PanDirection.BOTTOM

    return direction


@dataclass
class GestureContext:
    """Model for GestureStateMachine.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None
    clicks: int = 0
    end_reason: str | None = None


class GestureStateMachine(StateMachine):
    """Lifecycle of one measuring session. See module docstring."""

    idle = State("Idle", initial=True)
    placing = State("Placing")
    extending = State("Extending")
    ended = State("Ended", final=True)

    place_first = idle.to(placing)
    extend = placing.to(extending) | extending.to(extending)
    restart = placing.to(idle) | extending.to(idle)
    finish = idle.to(ended) | placing.to(ended) | extending.to(ended)

    def __init__(self, context: GestureContext | None = None) -> None:
        super().__init__(model=context or GestureContext())

    @property
    def context(self) -> GestureContext:
        return self.model

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_placing(self) -> bool:
        return self.placing.is_active

    @property
    def is_extending(self) -> bool:
        return self.extending.is_active

    @property
    def is_ended(self) -> bool:
        return self.ended.is_active

    def before_place_first(self) -> None:
        self.context.clicks += 1

    def before_extend(self) -> None:
        self.context.clicks += 1

    def before_finish(self, reason: str = "end_session") -> None:
        self.context.end_reason = reason

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[GESTURE] {source.name} --({event})--> {target.name}")

    def get_state_name(self) -> str:
        return self.current_state.name


class GestureController:
    """Owns the surface listeners and the auto-pan interval of one session.

    Signals:
        point_added(coord): a click committed a new point
        cursor_moved(coord): the pointer moved over the map
        pointer_left(): the pointer left the map surface
        pointer_entered(): the pointer came back onto the map surface
        ended(): the session reached ENDED (fired once)

    Args:
        host: Map host providing surface events, options and timers
        click_filter: Returns True for clicks that belong to another gesture
            (e.g. the end of a drag) and must not add a point
        point_count: Number of points currently in the path. Picks the click
            transition so the state follows deletions made during the session
    """

    def __init__(
        self,
        host: "MapHost",
        click_filter: Callable[[], bool] | None = None,
        point_count: Callable[[], int] | None = None,
    ) -> None:
        self.host = host
        self.machine = GestureStateMachine()
        self._click_filter = click_filter
        self._point_count = point_count
        self._listeners = ConnectionGroup()
        self._pan_handle: int | None = None
        self.pan_direction: PanDirection | None = None
        self._started = False
        self._ending = False

        self.point_added = Signal("point_added")
        self.cursor_moved = Signal("cursor_moved")
        self.pointer_left = Signal("pointer_left")
        self.pointer_entered = Signal("pointer_entered")
        self.ended = Signal("ended")

    @property
    def is_panning(self) -> bool:
        return self._pan_handle is not None

    def start(self) -> None:
        """Register surface listeners and switch to the drawing cursor."""
        assert not self._started, "GestureController already started"
        self._started = True
        surface = self.host.surface
        self.host.set_options(draggable_cursor=MapConfig.CURSOR_DRAWING)
        self._listeners.add(surface.clicked.connect(self._on_click))
        self._listeners.add(surface.mouse_moved.connect(self._on_mouse_move))
        self._listeners.add(surface.right_clicked.connect(self._on_right_click))
        self._listeners.add(surface.double_clicked.connect(self._on_double_click))
        self._listeners.add(surface.mouse_left.connect(self._on_mouse_leave))
        self._listeners.add(surface.mouse_entered.connect(self._on_mouse_enter))
        logger.debug(f"[GESTURE] Started with {len(self._listeners)} surface listeners")

    def end(self, reason: str = "end_session") -> None:
        """Tear down the session. Calling again after the first time does nothing."""
        if self._ending or self.machine.is_ended:
            return
        self._ending = True
        released = self._listeners.release()
        self._cancel_pan()
        self.host.set_options(draggable_cursor=MapConfig.CURSOR_DEFAULT)
        self.try_transition("finish", reason=reason)
        logger.info(f"[GESTURE] Ended ({reason}), released {released} listeners")
        self.ended.emit()

    def reset(self) -> None:
        """Return to IDLE after the path was emptied while drawing."""
        if not (self.machine.is_placing or self.machine.is_extending):
            return
        self._cancel_pan()
        self.try_transition("restart")

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Malformed gesture sequences degrade to a logged no-op.
        """
        try:
            self.machine.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.machine.get_state_name()}")
            return False

    # =========================================================================
    # SURFACE HANDLERS
    # =========================================================================

    def _on_click(self, event: "PointerEvent") -> None:
        if event.coordinate is None:
            return
        if self._click_filter is not None and self._click_filter():
            logger.debug("[GESTURE] Click belongs to a drag gesture, ignored")
            return
        if self._point_count is not None:
            transition = "place_first" if self._point_count() == 0 else "extend"
        else:
            transition = "place_first" if self.machine.is_idle else "extend"
        if self.try_transition(transition):
            self.point_added.emit(event.coordinate)

    def _on_mouse_move(self, event: "PointerEvent") -> None:
        if event.coordinate is None:
            return
        self.cursor_moved.emit(event.coordinate)

    def _on_right_click(self, event: "PointerEvent") -> None:
        self.end(reason="right_click")

    def _on_double_click(self, event: "PointerEvent") -> None:
        self.host.set_options(suppress_double_click_zoom=True)
        self.end(reason="double_click")

    def _on_mouse_leave(self, event: "PointerEvent") -> None:
        self.pointer_left.emit()
        if not self.machine.is_extending:
            return
        width, height = self.host.container_size()
        self._auto_pan(classify_edge(event.pixel, width, height))

    def _on_mouse_enter(self, event: "PointerEvent") -> None:
        self._cancel_pan()
        self.pointer_entered.emit()

    # =========================================================================
    # AUTO-PAN
    # =========================================================================

    def _auto_pan(self, direction: PanDirection | None) -> None:
        self._cancel_pan()
        if direction is None:
            return
        dx, dy = direction.offset(PanConfig.STEP_PX)
        self.pan_direction = direction
        self._pan_handle = self.host.set_interval(lambda: self.host.pan_by(dx, dy), PanConfig.INTERVAL_MS)
        logger.debug(f"[PAN] Auto-pan {direction.name} started")

    def _cancel_pan(self) -> None:
        if self._pan_handle is None:
            return
        self.host.clear_interval(self._pan_handle)
        logger.debug(f"[PAN] Auto-pan {self.pan_direction.name if self.pan_direction else ''} stopped")
        self._pan_handle = None
        self.pan_direction = None
