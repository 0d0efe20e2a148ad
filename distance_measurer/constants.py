"""Configuration constants for the Distance Measurer.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    MapConfig: Default map view parameters
    PanConfig: Edge auto-pan step and interval
    LabelConfig: Label texts, offsets and display precision
    UnitConfig: Two-tier distance unit labels
    MarkerConfig: Point/drag marker sizes and hit tolerances
    LayerConfig: Pydeck layer object tags and font sizes
    StyleConfig: Visual colors and styling
"""


class AppConfig:
    """UI application settings."""

    TITLE = "Distance Measurer - Measure Paths on the Map"
    ICON = "📏"
    LAYOUT = "wide"


class MapConfig:
    """Default map view parameters."""

    # Initial center: Tencent Binhai building, Shenzhen
    START_CENTER_LAT = 22.522
    START_CENTER_LON = 113.935
    DEFAULT_ZOOM = 14

    # Container size used by the in-process host (pixels)
    DEFAULT_WIDTH_PX = 1000
    DEFAULT_HEIGHT_PX = 640

    # deck.gl world size at zoom 0 (512px tiles)
    TILE_SIZE_PX = 512

    # Cursor affordances pushed to the host
    CURSOR_DRAWING = "crosshair"
    CURSOR_DEFAULT = "default"

    # Basemap (carto styles need no access token)
    MAP_PROVIDER = "carto"
    MAP_STYLE = "light"
    PICKING_RADIUS_PX = 6

    # Zoom bounds for the built-in double-click zoom
    MIN_ZOOM = 1
    MAX_ZOOM = 20

    assert MIN_ZOOM <= DEFAULT_ZOOM <= MAX_ZOOM


class PanConfig:
    """Edge auto-pan while the pointer rests outside the container edge."""

    STEP_PX = 5  # Pixels per tick
    INTERVAL_MS = 50  # Tick period


class UnitConfig:
    """Unit labels for the two-tier distance format."""

    METERS = "米"
    KILOMETERS = "公里"
    KILOMETER_THRESHOLD_M = 1000
    KILOMETER_ROUNDING_M = 100  # Round to nearest 100m before switching units

    assert KILOMETER_THRESHOLD_M % KILOMETER_ROUNDING_M == 0


class LabelConfig:
    """Label texts, offsets and display precision."""

    START_TEXT = "起点"
    CLICK_TO_START = "单击选择起点"
    CURRENT_PREFIX = "当前"
    MOVE_HINT = "单击左键继续，双击或右键结束"
    DRAG_HINT = "拖拽添加一个新点"

    # Decimal places for every rendered distance
    PRECISION = 1

    # Pixel offsets from anchor position
    DISTANCE_LABEL_OFFSET = (8, -10)
    CURSOR_LABEL_OFFSET = (5, 10)


class MarkerConfig:
    """Point marker and drag preview sizes (pixels)."""

    POINT_RADIUS_PX = 5
    DRAG_PREVIEW_RADIUS_PX = 6
    SEGMENT_WIDTH_PX = 3
    CURSOR_LINE_WIDTH_PX = 3

    # Pointer hit tolerance of the in-process host
    MARKER_HIT_TOLERANCE_PX = 4
    SEGMENT_HIT_TOLERANCE_PX = 6


class LayerConfig:
    """Object type tags carried by pydeck layer data."""

    TYPE_SEGMENT = "segment"
    TYPE_CURSOR_LINE = "cursor_line"
    TYPE_POINT = "point"
    TYPE_DRAG_PREVIEW = "drag_preview"
    TYPE_LABEL = "label"
    LABEL_FONT_SIZE = 13
    HINT_FONT_SIZE = 11


class StyleConfig:
    """Visual colors and styling (RGBA lists for pydeck)."""

    LINE_COLOR_RGBA = [0xFD, 0x5D, 0x5D, 204]  # 0.8 alpha
    CURSOR_LINE_COLOR_RGBA = [0xFD, 0x5D, 0x5D, 140]
    POINT_FILL_RGBA = [255, 255, 255, 255]
    POINT_BORDER_RGBA = [0xFD, 0x5D, 0x5D, 255]
    DRAG_PREVIEW_FILL_RGBA = [255, 255, 255, 200]
    LABEL_TEXT_RGBA = [51, 51, 51, 255]
    END_LABEL_TEXT_RGBA = [0xFD, 0x3D, 0x3D, 255]
    HINT_TEXT_RGBA = [120, 120, 120, 255]

    assert all(len(c) == 4 for c in (LINE_COLOR_RGBA, CURSOR_LINE_COLOR_RGBA, POINT_FILL_RGBA))
