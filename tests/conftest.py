"""Shared pytest fixtures for distance_measurer tests.

Provides FakeMapHost and coordinate helpers for all tests.

COORDINATE SYSTEM:
    Tests use coordinates near the equator (lat~0) and prime meridian (lon~0)
    with a flat projection: 1 degree = 111,320 meters in both directions and
    one container pixel per meter. Distances are plain Euclidean meters, so
    expected label texts can be computed by hand without GeoCalculator
    (which would be testing with tested code).
"""

from collections.abc import Callable
from math import hypot
from typing import Any

import pytest

from distance_measurer.core.interval_clock import IntervalClock
from distance_measurer.model.coordinate import Coordinate, Pixel
from distance_measurer.model.path_store import PathStore
from distance_measurer.ui.host import PointerEvent, SurfaceEvents
from distance_measurer.ui.measure_tool import MeasureTool
from distance_measurer.ui.sync_engine import SyncEngine

METERS_PER_DEGREE = 111_320.0
CONTAINER_WIDTH_PX = 2000.0
CONTAINER_HEIGHT_PX = 1200.0


def at(east_m: float, north_m: float = 0.0) -> Coordinate:
    """Coordinate east_m meters east and north_m meters north of (0, 0)."""
    return Coordinate(lat=north_m / METERS_PER_DEGREE, lon=east_m / METERS_PER_DEGREE)


# =============================================================================
# FAKE MAP HOST
# =============================================================================


class FakeMapHost:
    """MapHost with linear projection, recorded side effects and a manual clock.

    Container pixel (W/2, H/2) is coordinate (0, 0); x grows east, y grows
    south, one pixel per meter.

    Recorded:
        pan_calls: every pan_by(dx, dy)
        option_calls: every set_options(**options) keyword dict
        options: merged current options
    """

    def __init__(self, width: float = CONTAINER_WIDTH_PX, height: float = CONTAINER_HEIGHT_PX) -> None:
        self.surface = SurfaceEvents()
        self.clock = IntervalClock()
        self.width = width
        self.height = height
        self.projection_available = True
        self.overlays: list[object] = []
        self.pan_calls: list[tuple[float, float]] = []
        self.option_calls: list[dict[str, Any]] = []
        self.options: dict[str, Any] = {}

    # --- MapHost protocol ---

    def project_to_pixel(self, coord: Coordinate) -> Pixel | None:
        if not self.projection_available:
            return None
        return Pixel(
            coord.lon * METERS_PER_DEGREE + self.width / 2,
            -coord.lat * METERS_PER_DEGREE + self.height / 2,
        )

    def pixel_to_coordinate(self, pixel: Pixel) -> Coordinate | None:
        return at(pixel.x - self.width / 2, self.height / 2 - pixel.y)

    def distance_between(self, a: Coordinate, b: Coordinate) -> float:
        return hypot(b.lat - a.lat, b.lon - a.lon) * METERS_PER_DEGREE

    def container_size(self) -> tuple[float, float]:
        return self.width, self.height

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_calls.append((dx, dy))

    def set_options(self, **options: Any) -> None:
        self.option_calls.append(options)
        self.options.update(options)

    def add_overlay(self, overlay: object) -> None:
        self.overlays.append(overlay)

    def remove_overlay(self, overlay: object) -> None:
        self.overlays.remove(overlay)

    def set_interval(self, callback: Callable[[], None], period_ms: float) -> int:
        return self.clock.set_interval(callback, period_ms)

    def clear_interval(self, handle: int) -> None:
        self.clock.clear_interval(handle)

    # --- Input helpers ---

    def event(self, coord: Coordinate) -> PointerEvent:
        pixel = self.project_to_pixel(coord) or Pixel(0.0, 0.0)
        return PointerEvent(coordinate=coord, pixel=pixel)

    def click(self, coord: Coordinate) -> None:
        self.surface.clicked.emit(self.event(coord))

    def move(self, coord: Coordinate) -> None:
        self.surface.mouse_moved.emit(self.event(coord))

    def right_click(self, coord: Coordinate) -> None:
        self.surface.right_clicked.emit(self.event(coord))

    def double_click(self, coord: Coordinate) -> None:
        self.surface.double_clicked.emit(self.event(coord))

    def leave_at(self, pixel: Pixel) -> None:
        self.surface.mouse_left.emit(PointerEvent(coordinate=self.pixel_to_coordinate(pixel), pixel=pixel))

    def enter_at(self, pixel: Pixel) -> None:
        self.surface.mouse_entered.emit(PointerEvent(coordinate=self.pixel_to_coordinate(pixel), pixel=pixel))

    def mouse_down(self, coord: Coordinate) -> None:
        self.surface.mouse_down.emit(self.event(coord))

    def mouse_up(self, coord: Coordinate) -> None:
        self.surface.mouse_up.emit(self.event(coord))

    def overlays_of(self, kind: type) -> list[Any]:
        return [o for o in self.overlays if isinstance(o, kind)]

    def listener_total(self) -> int:
        return sum(signal.listener_count for signal in self.surface.all_signals())


def segment_paths(engine: SyncEngine) -> list[tuple[Coordinate, ...]]:
    return [segment.path for segment in engine.segments]


def label_texts(engine: SyncEngine) -> list[str | None]:
    return [label.content for label in engine.labels]


def assert_aligned(engine: SyncEngine) -> None:
    """Index-alignment invariant between the store and every overlay collection."""
    n = len(engine.path)
    assert len(engine.markers) == n
    assert len(engine.labels) == n
    assert len(engine.segments) == max(0, n - 1)
    for i in range(n):
        assert engine.markers[i].index == i
        assert engine.labels[i].index == i
        assert engine.markers[i].position == engine.path[i]
        assert engine.labels[i].position == engine.path[i]
    for i, segment in enumerate(engine.segments):
        assert segment.index == i
        assert segment.path == (engine.path[i], engine.path[i + 1])


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def host() -> FakeMapHost:
    """Fake host, 2000x1200 container centered on (0, 0)."""
    return FakeMapHost()


@pytest.fixture
def path() -> PathStore:
    return PathStore()


@pytest.fixture
def engine(path: PathStore, host: FakeMapHost) -> SyncEngine:
    """SyncEngine wired to an empty store on the fake host."""
    return SyncEngine(path=path, host=host)


@pytest.fixture
def three_point_engine(engine: SyncEngine) -> SyncEngine:
    """Path 0m -> 600m east -> 600m east + 800m north (total 1400m)."""
    engine.path.push(at(0))
    engine.path.push(at(600))
    engine.path.push(at(600, 800))
    return engine


@pytest.fixture
def tool(host: FakeMapHost) -> MeasureTool:
    return MeasureTool(host=host)
