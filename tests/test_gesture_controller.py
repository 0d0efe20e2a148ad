"""Tests for GestureController, its state machine and edge auto-pan."""

import pytest
from conftest import FakeMapHost, at
from statemachine.exceptions import TransitionNotAllowed

from distance_measurer.constants import MapConfig, PanConfig
from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.ui.gesture_controller import (
    GestureContext,
    GestureController,
    GestureStateMachine,
    PanDirection,
    classify_edge,
)
from distance_measurer.ui.host import PointerEvent

LEFT_EDGE = Pixel(0, 600)


@pytest.fixture
def controller(host: FakeMapHost) -> GestureController:
    controller = GestureController(host)
    controller.start()
    return controller


@pytest.fixture
def extending_controller(controller: GestureController, host: FakeMapHost) -> GestureController:
    host.click(at(0))
    host.click(at(100))
    assert controller.machine.is_extending
    return controller


class TestGestureStateMachine:
    """Session lifecycle transitions."""

    def test_initial_state_is_idle(self) -> None:
        sm = GestureStateMachine()
        assert sm.is_idle
        assert sm.get_state_name() == "Idle"

    def test_click_sequence(self) -> None:
        sm = GestureStateMachine()
        sm.place_first()
        assert sm.is_placing
        sm.extend()
        assert sm.is_extending
        sm.extend()
        assert sm.is_extending
        assert sm.context.clicks == 3

    @pytest.mark.parametrize("clicks", [0, 1, 2])
    def test_finish_from_any_active_state(self, clicks: int) -> None:
        sm = GestureStateMachine()
        if clicks >= 1:
            sm.place_first()
        if clicks >= 2:
            sm.extend()
        sm.send("finish", reason="right_click")
        assert sm.is_ended
        assert sm.context.end_reason == "right_click"

    def test_cannot_extend_from_idle(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            GestureStateMachine().extend()

    def test_ended_is_terminal(self) -> None:
        sm = GestureStateMachine()
        sm.finish()
        with pytest.raises(TransitionNotAllowed):
            sm.place_first()

    @pytest.mark.parametrize("clicks", [1, 2])
    def test_restart_returns_to_idle(self, clicks: int) -> None:
        sm = GestureStateMachine()
        sm.place_first()
        if clicks == 2:
            sm.extend()
        sm.restart()
        assert sm.is_idle
        sm.place_first()
        assert sm.is_placing

    def test_cannot_restart_from_idle(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            GestureStateMachine().restart()

    def test_context_state_field_tracks_machine(self) -> None:
        context = GestureContext()
        sm = GestureStateMachine(context)
        sm.place_first()
        assert context.state == "placing"


class TestClassifyEdge:
    """Exit-pixel classification against a 2000x1200 container."""

    @pytest.mark.parametrize(
        "pixel, expected",
        [
            (Pixel(0, 600), PanDirection.LEFT),
            (Pixel(2000, 600), PanDirection.RIGHT),
            (Pixel(1000, 0), PanDirection.TOP),
            (Pixel(1000, 1200), PanDirection.BOTTOM),
            (Pixel(0, 100), PanDirection.LEFT),
            (Pixel(100, 0), PanDirection.TOP),
            (Pixel(1000, 300), PanDirection.TOP),
            (Pixel(1000, 900), PanDirection.BOTTOM),
        ],
    )
    def test_edges(self, pixel: Pixel, expected: PanDirection) -> None:
        assert classify_edge(pixel, 2000, 1200) == expected

    @pytest.mark.parametrize("pixel", [Pixel(1000, 600), Pixel(0, 0), Pixel(2000, 1200)])
    def test_center_and_diagonals_do_not_pan(self, pixel: Pixel) -> None:
        assert classify_edge(pixel, 2000, 1200) is None

    def test_empty_container(self) -> None:
        assert classify_edge(Pixel(0, 0), 0, 0) is None

    def test_offsets(self) -> None:
        assert PanDirection.LEFT.offset(5) == (-5, 0)
        assert PanDirection.BOTTOM.offset(5) == (0, 5)


class TestGestureController:
    """Surface events in, notifications out."""

    def test_start_registers_listeners_and_cursor(self, controller: GestureController, host: FakeMapHost) -> None:
        assert host.listener_total() == 6
        assert host.options["draggable_cursor"] == MapConfig.CURSOR_DRAWING

    def test_clicks_add_points(self, controller: GestureController, host: FakeMapHost) -> None:
        added: list[Coordinate] = []
        controller.point_added.connect(added.append)
        host.click(at(0))
        assert controller.machine.is_placing
        host.click(at(100))
        host.click(at(200))
        assert added == [at(0), at(100), at(200)]
        assert controller.machine.is_extending

    def test_click_filter_suppresses(self, host: FakeMapHost) -> None:
        controller = GestureController(host, click_filter=lambda: True)
        controller.start()
        added: list[Coordinate] = []
        controller.point_added.connect(added.append)
        host.click(at(0))
        assert added == []
        assert controller.machine.is_idle

    def test_click_without_coordinate_ignored(self, controller: GestureController, host: FakeMapHost) -> None:
        added: list[Coordinate] = []
        controller.point_added.connect(added.append)
        host.surface.clicked.emit(PointerEvent(coordinate=None, pixel=Pixel(0, 0)))
        assert added == []

    def test_move_forwards_cursor(self, controller: GestureController, host: FakeMapHost) -> None:
        moved: list[Coordinate] = []
        controller.cursor_moved.connect(moved.append)
        host.move(at(50))
        assert moved == [at(50)]

    def test_right_click_ends(self, extending_controller: GestureController, host: FakeMapHost) -> None:
        ended: list[int] = []
        extending_controller.ended.connect(lambda: ended.append(1))
        host.right_click(at(300))
        assert ended == [1]
        assert extending_controller.machine.is_ended
        assert extending_controller.machine.context.end_reason == "right_click"
        assert host.listener_total() == 0
        assert host.options["draggable_cursor"] == MapConfig.CURSOR_DEFAULT

    def test_double_click_ends_and_suppresses_zoom(
        self, extending_controller: GestureController, host: FakeMapHost
    ) -> None:
        host.double_click(at(100))
        assert extending_controller.machine.is_ended
        assert extending_controller.machine.context.end_reason == "double_click"
        assert {"suppress_double_click_zoom": True} in host.option_calls

    def test_end_is_idempotent(self, controller: GestureController, host: FakeMapHost) -> None:
        ended: list[int] = []
        controller.ended.connect(lambda: ended.append(1))
        controller.end()
        controller.end()
        assert ended == [1]

    def test_no_points_after_end(self, controller: GestureController, host: FakeMapHost) -> None:
        added: list[Coordinate] = []
        controller.point_added.connect(added.append)
        controller.end()
        host.click(at(0))
        assert added == []

    def test_click_transition_follows_point_count(self, host: FakeMapHost) -> None:
        points: list[Coordinate] = []
        controller = GestureController(host, point_count=lambda: len(points))
        controller.start()
        controller.point_added.connect(points.append)
        host.click(at(0))
        host.click(at(100))
        assert controller.machine.is_extending

        points.clear()
        controller.reset()
        assert controller.machine.is_idle
        host.click(at(200))
        assert controller.machine.is_placing

    def test_reset_stops_auto_pan(self, extending_controller: GestureController, host: FakeMapHost) -> None:
        host.leave_at(LEFT_EDGE)
        extending_controller.reset()
        assert not extending_controller.is_panning
        assert host.clock.active_count == 0

    def test_reset_ignored_when_idle_or_ended(self, controller: GestureController) -> None:
        controller.reset()
        assert controller.machine.is_idle
        controller.end()
        controller.reset()
        assert controller.machine.is_ended

    def test_pointer_leave_and_enter_notify(self, controller: GestureController, host: FakeMapHost) -> None:
        events: list[str] = []
        controller.pointer_left.connect(lambda: events.append("left"))
        controller.pointer_entered.connect(lambda: events.append("entered"))
        host.leave_at(LEFT_EDGE)
        host.enter_at(LEFT_EDGE)
        assert events == ["left", "entered"]


class TestAutoPan:
    """Viewport panning while the pointer rests past an edge."""

    def test_left_edge_pans_left_until_reentry(
        self, extending_controller: GestureController, host: FakeMapHost
    ) -> None:
        host.leave_at(LEFT_EDGE)
        assert host.clock.active_count == 1
        assert extending_controller.pan_direction is PanDirection.LEFT

        host.clock.advance(PanConfig.INTERVAL_MS * 3)
        assert host.pan_calls == [(-PanConfig.STEP_PX, 0)] * 3

        host.enter_at(LEFT_EDGE)
        assert host.clock.active_count == 0
        host.clock.advance(PanConfig.INTERVAL_MS * 10)
        assert len(host.pan_calls) == 3
        assert not extending_controller.is_panning

    def test_new_exit_replaces_running_pan(self, extending_controller: GestureController, host: FakeMapHost) -> None:
        host.leave_at(LEFT_EDGE)
        host.leave_at(Pixel(1000, 1200))
        assert host.clock.active_count == 1
        host.clock.advance(PanConfig.INTERVAL_MS)
        assert host.pan_calls == [(0, PanConfig.STEP_PX)]

    def test_no_pan_before_extending(self, controller: GestureController, host: FakeMapHost) -> None:
        host.click(at(0))
        host.leave_at(LEFT_EDGE)
        assert host.clock.active_count == 0

    def test_no_pan_on_diagonal_exit(self, extending_controller: GestureController, host: FakeMapHost) -> None:
        host.leave_at(Pixel(0, 0))
        assert host.clock.active_count == 0

    def test_end_cancels_pan(self, extending_controller: GestureController, host: FakeMapHost) -> None:
        host.leave_at(LEFT_EDGE)
        extending_controller.end()
        assert host.clock.active_count == 0
        host.clock.advance(PanConfig.INTERVAL_MS * 5)
        assert host.pan_calls == []
