"""MapRenderer - Pydeck rendering of everything attached to a DeckMapHost.

Overlays hold display state only; this module turns the host's attached
overlays into deck.gl layers:
- Segments as solid lines, the cursor preview as a fainter line (PathLayer)
- Point markers and the drag preview handle (ScatterplotLayer)
- Distance labels and cursor hints (TextLayer)

Pydeck conventions:
- [lon, lat] coordinate order (GeoJSON standard)
- Colors as RGBA lists [R, G, B, A] (0-255)
- Data prepared as list[dict]; every record carries a "type" tag
"""

import logging
from dataclasses import dataclass, field

import pydeck as pdk

from distance_measurer.constants import LayerConfig, MapConfig, MarkerConfig, StyleConfig
from distance_measurer.model.overlays import DistanceLabel, PointMarker, Segment
from distance_measurer.ui.deck_host import DeckMapHost
from distance_measurer.ui.drag_insertion import DragPreviewMarker

logger = logging.getLogger(__name__)


@dataclass
class LayerCollection:
    """Pydeck layers in z-order (back to front): lines -> points -> labels."""

    lines: list[pdk.Layer] = field(default_factory=list)
    points: list[pdk.Layer] = field(default_factory=list)
    labels: list[pdk.Layer] = field(default_factory=list)

    def get_ordered_layers(self) -> list[pdk.Layer]:
        return self.lines + self.points + self.labels


class MapRenderer:
    """Renders a DeckMapHost's overlays as a pydeck Deck.

    Example:
        renderer = MapRenderer(host=host)
        deck = renderer.render()
        st_deckgl(deck, key="map", events=["click"])
    """

    def __init__(self, host: DeckMapHost) -> None:
        self.host = host
        # Labels of the last render, in pick order of the "labels" layer
        self.rendered_labels: list[DistanceLabel] = []

    def label_for_click(self, object_index: int | None) -> DistanceLabel | None:
        """Map a picked "labels" record back to its DistanceLabel."""
        if object_index is None or not 0 <= object_index < len(self.rendered_labels):
            return None
        return self.rendered_labels[object_index]

    def get_view_state(self) -> pdk.ViewState:
        return pdk.ViewState(
            latitude=self.host.center.lat,
            longitude=self.host.center.lon,
            zoom=self.host.zoom,
            pitch=0,
            bearing=0,
        )

    def render(self) -> pdk.Deck:
        layers = LayerCollection()
        overlays = self.host.overlays

        segments = [o for o in overlays if isinstance(o, Segment)]
        layers.lines.extend(self._create_segment_layers(segments))

        markers = [o for o in overlays if isinstance(o, PointMarker)]
        previews = [o for o in overlays if isinstance(o, DragPreviewMarker)]
        layers.points.extend(self._create_point_layers(markers, previews))

        labels = [o for o in overlays if isinstance(o, DistanceLabel)]
        layers.labels.extend(self._create_label_layers(labels))

        logger.debug(
            f"[RENDER] {len(segments)} lines, {len(markers)} points, {len(labels)} labels "
            f"at zoom {self.host.zoom}"
        )
        return pdk.Deck(
            map_provider=MapConfig.MAP_PROVIDER,
            map_style=MapConfig.MAP_STYLE,
            initial_view_state=self.get_view_state(),
            layers=layers.get_ordered_layers(),
            tooltip={"text": "{name}"},
            parameters={"pickingRadius": MapConfig.PICKING_RADIUS_PX},
        )

    # =========================================================================
    # LINES
    # =========================================================================

    def _create_segment_layers(self, segments: list[Segment]) -> list[pdk.Layer]:
        segment_data = []
        cursor_data = []
        for segment in segments:
            if len(segment.path) < 2:
                continue
            record = {
                "type": LayerConfig.TYPE_CURSOR_LINE if segment.dashed else LayerConfig.TYPE_SEGMENT,
                "index": segment.index,
                "path": [c.lon_lat for c in segment.path],
                "name": "Cursor preview" if segment.dashed else f"Segment {segment.index + 1}",
            }
            (cursor_data if segment.dashed else segment_data).append(record)

        layers = []
        if segment_data:
            layers.append(
                pdk.Layer(
                    "PathLayer",
                    segment_data,
                    get_path="path",
                    get_color=StyleConfig.LINE_COLOR_RGBA,
                    get_width=MarkerConfig.SEGMENT_WIDTH_PX,
                    width_units="pixels",
                    cap_rounded=True,
                    joint_rounded=True,
                    pickable=True,
                    id="segments",
                )
            )
        if cursor_data:
            layers.append(
                pdk.Layer(
                    "PathLayer",
                    cursor_data,
                    get_path="path",
                    get_color=StyleConfig.CURSOR_LINE_COLOR_RGBA,
                    get_width=MarkerConfig.CURSOR_LINE_WIDTH_PX,
                    width_units="pixels",
                    pickable=False,
                    id="cursor_line",
                )
            )
        return layers

    # =========================================================================
    # POINTS
    # =========================================================================

    def _create_point_layers(
        self,
        markers: list[PointMarker],
        previews: list[DragPreviewMarker],
    ) -> list[pdk.Layer]:
        point_data = [
            {
                "type": LayerConfig.TYPE_POINT,
                "index": marker.index,
                "position": marker.position.lon_lat,
                "name": f"Point {marker.index + 1}",
            }
            for marker in markers
            if marker.position is not None
        ]
        preview_data = [
            {
                "type": LayerConfig.TYPE_DRAG_PREVIEW,
                "position": preview.position.lon_lat,
                "name": "Drag to add a point",
            }
            for preview in previews
            if preview.visible and preview.position is not None
        ]

        layers = []
        if point_data:
            layers.append(
                pdk.Layer(
                    "ScatterplotLayer",
                    point_data,
                    get_position="position",
                    get_radius=MarkerConfig.POINT_RADIUS_PX,
                    radius_units="pixels",
                    get_fill_color=StyleConfig.POINT_FILL_RGBA,
                    get_line_color=StyleConfig.POINT_BORDER_RGBA,
                    stroked=True,
                    line_width_min_pixels=2,
                    pickable=True,
                    auto_highlight=True,
                    id="points",
                )
            )
        if preview_data:
            layers.append(
                pdk.Layer(
                    "ScatterplotLayer",
                    preview_data,
                    get_position="position",
                    get_radius=MarkerConfig.DRAG_PREVIEW_RADIUS_PX,
                    radius_units="pixels",
                    get_fill_color=StyleConfig.DRAG_PREVIEW_FILL_RGBA,
                    get_line_color=StyleConfig.POINT_BORDER_RGBA,
                    stroked=True,
                    line_width_min_pixels=1,
                    pickable=False,
                    id="drag_preview",
                )
            )
        return layers

    # =========================================================================
    # LABELS
    # =========================================================================

    def _create_label_layers(self, labels: list[DistanceLabel]) -> list[pdk.Layer]:
        text_data = []
        hint_data = []
        self.rendered_labels = []
        for label in labels:
            if not label.visible or label.position is None or not label.content:
                continue
            self.rendered_labels.append(label)
            color = StyleConfig.END_LABEL_TEXT_RGBA if label.is_end else StyleConfig.LABEL_TEXT_RGBA
            text_data.append(
                {
                    "type": LayerConfig.TYPE_LABEL,
                    "index": len(self.rendered_labels) - 1,
                    "position": label.position.lon_lat,
                    "text": label.content,
                    "offset": list(label.offset),
                    "color": color,
                    "name": label.content,
                }
            )
            if label.hint:
                hint_data.append(
                    {
                        "position": label.position.lon_lat,
                        "text": label.hint,
                        # Hint sits one line below the content
                        "offset": [label.offset[0], label.offset[1] + LayerConfig.LABEL_FONT_SIZE + 4],
                    }
                )

        layers = []
        if text_data:
            layers.append(
                pdk.Layer(
                    "TextLayer",
                    text_data,
                    get_position="position",
                    get_text="text",
                    get_pixel_offset="offset",
                    get_color="color",
                    get_size=LayerConfig.LABEL_FONT_SIZE,
                    get_text_anchor='"start"',
                    get_alignment_baseline='"center"',
                    character_set="auto",
                    pickable=True,
                    id="labels",
                )
            )
        if hint_data:
            layers.append(
                pdk.Layer(
                    "TextLayer",
                    hint_data,
                    get_position="position",
                    get_text="text",
                    get_pixel_offset="offset",
                    get_color=StyleConfig.HINT_TEXT_RGBA,
                    get_size=LayerConfig.HINT_FONT_SIZE,
                    get_text_anchor='"start"',
                    get_alignment_baseline='"center"',
                    character_set="auto",
                    id="hints",
                )
            )
        return layers
