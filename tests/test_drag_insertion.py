"""Tests for drag-to-insert on segments."""

from conftest import FakeMapHost, assert_aligned, at, segment_paths

from distance_measurer.constants import LabelConfig
from distance_measurer.ui.sync_engine import SyncEngine

P0, P1, P2 = at(0), at(600), at(600, 800)


def hover(engine: SyncEngine, host: FakeMapHost, segment_index: int, east_m: float, north_m: float = 0.0) -> None:
    engine.segments[segment_index].mouse_entered.emit(host.event(at(east_m, north_m)))


class TestHoverPreview:
    """Preview handle and "if inserted here" label."""

    def test_hover_shows_preview(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 0, 300)
        drag = three_point_engine.drag
        assert drag.marker.position == at(300)
        assert drag.marker.visible
        assert drag.hover_index == 0
        assert drag.label.content == "300.0米"
        assert drag.label.hint == LabelConfig.DRAG_HINT

    def test_hover_distance_includes_preceding_segments(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 1, 600, 400)
        assert three_point_engine.drag.label.content == "1公里"

    def test_leave_hides_preview(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 0, 300)
        segment = three_point_engine.segments[0]
        segment.mouse_left.emit(host.event(at(300, 50)))
        drag = three_point_engine.drag
        assert drag.marker.position is None and not drag.marker.visible
        assert drag.hover_index == -1
        assert drag.label.position is None

    def test_hover_ignored_while_marker_dragged(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        three_point_engine.dragged_marker_index = 1
        hover(three_point_engine, host, 0, 300)
        assert three_point_engine.drag.marker.position is None


class TestDragCommit:
    """Pressing and dragging the preview inserts one point on release."""

    def test_drag_bends_then_inserts(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        engine = three_point_engine
        hover(engine, host, 0, 300)
        host.mouse_down(at(300))
        assert engine.drag.is_dragging
        assert host.options["draggable"] is False
        assert engine.segments[0].path == (P0, at(300), P1)

        target = at(300, 200)
        host.move(target)
        assert engine.segments[0].path == (P0, target, P1)
        assert engine.path.to_list() == [P0, P1, P2]
        assert engine.drag.label.content == "360.6米"
        assert engine.drag.label.hint is None

        host.mouse_up(target)
        assert engine.path.to_list() == [P0, target, P1, P2]
        assert segment_paths(engine) == [(P0, target), (target, P1), (P1, P2)]
        assert host.options["draggable"] is True
        assert not engine.drag.marker.visible
        assert_aligned(engine)

    def test_click_after_drop_is_consumed_once(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 0, 300)
        host.mouse_down(at(300))
        host.mouse_up(at(300))
        assert three_point_engine.consume_click()
        assert not three_point_engine.consume_click()

    def test_next_press_clears_pending_drop(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 0, 300)
        host.mouse_down(at(300))
        host.mouse_up(at(300))
        host.mouse_down(at(900))
        assert not three_point_engine.consume_click()

    def test_mouse_up_without_drag_does_not_insert(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 0, 300)
        host.mouse_up(at(300))
        assert len(three_point_engine.path) == 3

    def test_press_without_hover_does_not_drag(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        host.mouse_down(at(300))
        assert not three_point_engine.drag.is_dragging
        host.mouse_up(at(300))
        assert len(three_point_engine.path) == 3

    def test_segment_events_ignored_during_drag(self, three_point_engine: SyncEngine, host: FakeMapHost) -> None:
        hover(three_point_engine, host, 0, 300)
        host.mouse_down(at(300))
        three_point_engine.segments[1].mouse_left.emit(host.event(at(600, 100)))
        assert three_point_engine.drag.is_dragging
        assert three_point_engine.drag.marker.position == at(300)
