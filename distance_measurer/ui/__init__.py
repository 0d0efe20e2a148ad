"""Measuring engine and its map host.

Engine Components:
- gesture_controller.py: GestureController + GestureStateMachine (4 states)
- sync_engine.py: SyncEngine, overlays kept in step with a PathStore
- drag_insertion.py: Mid-segment insert by dragging a preview handle
- measure_tool.py: MeasureTool facade (start/end/clear sessions)

Host:
- host.py: MapHost protocol, SurfaceEvents, PointerEvent
- deck_host.py: DeckMapHost, in-process host with Web-Mercator projection
- map_renderer.py: Pydeck layers for everything attached to a DeckMapHost
- pydeck_click_handler.py: Click capture through streamlit-deckgl
"""

from distance_measurer.ui.deck_host import DeckMapHost
from distance_measurer.ui.drag_insertion import DragInsertion, DragPreviewMarker
from distance_measurer.ui.gesture_controller import (
    GestureContext,
    GestureController,
    GestureStateMachine,
    PanDirection,
    classify_edge,
)
from distance_measurer.ui.host import MapHost, PointerEvent, SurfaceEvents
from distance_measurer.ui.map_renderer import MapRenderer
from distance_measurer.ui.measure_tool import MeasureTool
from distance_measurer.ui.sync_engine import SyncEngine

__all__ = [
    "DeckMapHost",
    "DragInsertion",
    "DragPreviewMarker",
    "GestureContext",
    "GestureController",
    "GestureStateMachine",
    "PanDirection",
    "classify_edge",
    "MapHost",
    "PointerEvent",
    "SurfaceEvents",
    "MapRenderer",
    "MeasureTool",
    "SyncEngine",
]
