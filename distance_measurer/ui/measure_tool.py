"""MeasureTool - public entry point for measuring paths on a map.

Wires one PathStore, one SyncEngine and one GestureController per session.
A finished session's engine is retained (its path stays on the map, still
editable) until clear_all_completed_paths() disposes it.
"""

import logging
from collections.abc import Callable

from distance_measurer.constants import MapConfig
from distance_measurer.model.coordinate import Coordinate
from distance_measurer.model.path_store import PathStore
from distance_measurer.model.signal import ConnectionGroup
from distance_measurer.ui.gesture_controller import GestureController
from distance_measurer.ui.host import MapHost
from distance_measurer.ui.sync_engine import SyncEngine

logger = logging.getLogger(__name__)


class MeasureTool:
    """Start, end and clear measuring sessions on a host map.

    Example:
        tool = MeasureTool(host)
        tool.start_session(on_ended=lambda: print("done"))
        # ...user clicks, right-clicks...
        tool.clear_all_completed_paths()
    """

    def __init__(self, host: MapHost) -> None:
        self.host = host
        self.path: PathStore | None = None
        self.engine: SyncEngine | None = None
        self.controller: GestureController | None = None
        self._listeners: ConnectionGroup | None = None
        self._on_ended: Callable[[], None] | None = None
        self._completed: list[SyncEngine] = []

    @property
    def is_active(self) -> bool:
        return self.controller is not None

    @property
    def completed_engines(self) -> list[SyncEngine]:
        return list(self._completed)

    def start_session(self, on_ended: Callable[[], None] | None = None) -> None:
        """Begin a new measuring session.

        Does nothing while a session is already active, except that a
        session holding a single point is ended first and replaced.
        """
        if self.is_active and self.path is not None and len(self.path) == 1:
            logger.info("[SESSION] Replacing single-point session")
            self.end_session()
        if self.is_active:
            return

        self._on_ended = on_ended
        path = PathStore()
        engine = SyncEngine(path=path, host=self.host)
        controller = GestureController(
            self.host, click_filter=engine.consume_click, point_count=lambda: len(path)
        )

        listeners = ConnectionGroup()
        listeners.add(controller.point_added.connect(self._on_point_added))
        listeners.add(controller.cursor_moved.connect(self._on_cursor_moved))
        listeners.add(controller.pointer_left.connect(engine.hide_cursor_line))
        listeners.add(controller.pointer_entered.connect(engine.show_cursor_line))
        listeners.add(controller.ended.connect(self._on_controller_ended))
        listeners.add(path.removed.connect(self._on_point_removed))

        self.path, self.engine, self.controller, self._listeners = path, engine, controller, listeners
        controller.start()
        logger.info("[SESSION] Started")

    def end_session(self) -> None:
        """Force the active session to end. Without one, only resets the cursor."""
        self.host.set_options(draggable_cursor=MapConfig.CURSOR_DEFAULT)
        if self.controller is None:
            return
        # Controller emits ended, which finalizes below
        self.controller.end()

    def clear_all_completed_paths(self) -> None:
        """Remove every finished path and its overlays from the map."""
        count = len(self._completed)
        while self._completed:
            self._completed.pop().dispose()
        logger.info(f"[SESSION] Cleared {count} completed paths")

    # =========================================================================
    # CONTROLLER LISTENERS
    # =========================================================================

    def _on_point_added(self, coord: Coordinate) -> None:
        assert self.path is not None and self.engine is not None
        self.path.push(coord)
        self.engine.hide_start_label()

    def _on_point_removed(self, index: int, coord: Coordinate) -> None:
        # Deleting every point mid-session goes back to waiting for the first click
        if self.controller is None or self.engine is None or self.path is None or len(self.path) > 0:
            return
        machine = self.controller.machine
        if machine.is_placing or machine.is_extending:
            self.controller.reset()
            self.engine.show_start_label()
            logger.info("[SESSION] Path emptied, waiting for first point")

    def _on_cursor_moved(self, coord: Coordinate) -> None:
        assert self.engine is not None
        self.engine.set_cursor_position(coord)
        self.engine.update_move_label(coord)

    def _on_controller_ended(self) -> None:
        engine, listeners = self.engine, self._listeners
        assert engine is not None and listeners is not None
        engine.end()
        self._completed.append(engine)
        listeners.release()
        point_count = len(engine.path)
        self.path = self.engine = self.controller = self._listeners = None
        logger.info(f"[SESSION] Ended with {point_count} points")
        if self._on_ended is not None:
            self._on_ended()
