"""Distance Measurer - measure paths on an interactive map.

Click to place points, finish to freeze the path with its total distance,
clear to remove finished paths. The measuring engine runs against an
in-process DeckMapHost; clicks arrive through streamlit-deckgl.

Run: streamlit run distance_measurer/app.py
"""

import logging
import traceback

import streamlit as st

from distance_measurer.constants import AppConfig, LabelConfig, MapConfig
from distance_measurer.core import GeoCalculator, format_distance
from distance_measurer.ui import DeckMapHost, MapRenderer, MeasureTool
from distance_measurer.ui.pydeck_click_handler import PydeckClickResult, render_pydeck_map
from distance_measurer.ui.sync_engine import SyncEngine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Create the host, tool and renderer once per browser session."""
    if "host" not in st.session_state:
        st.session_state.host = DeckMapHost()

    if "tool" not in st.session_state:
        st.session_state.tool = MeasureTool(host=st.session_state.host)

    if "map_renderer" not in st.session_state:
        st.session_state.map_renderer = MapRenderer(host=st.session_state.host)

    if "map_version" not in st.session_state:
        st.session_state.map_version = 0


def reset_ui_state() -> None:
    """Recover from an error: fresh host and tool, finished paths are dropped."""
    logger.info("Resetting UI state due to error recovery")
    host = DeckMapHost()
    st.session_state.host = host
    st.session_state.tool = MeasureTool(host=host)
    st.session_state.map_renderer = MapRenderer(host=host)
    st.session_state.map_version = st.session_state.get("map_version", 0) + 1
    logger.info("UI state reset complete")


def _on_session_ended() -> None:
    st.session_state.ended_notice = True


# =============================================================================
# CONTROLS
# =============================================================================


def _path_summary(engine: SyncEngine) -> str:
    if not engine.labels:
        return "(empty)"
    return " → ".join(label.content or "" for label in engine.labels)


def _path_length_m(engine: SyncEngine) -> float:
    points = engine.path.to_list()
    return GeoCalculator.path_length_m([p.lat for p in points], [p.lon for p in points])


def render_control_panel(tool: MeasureTool) -> None:
    st.subheader("Measure")

    if not tool.is_active:
        if st.button("📏 Start measuring", type="primary", use_container_width=True):
            tool.start_session(on_ended=_on_session_ended)
            st.rerun()
    else:
        engine = tool.engine
        assert engine is not None
        point_count = len(engine.labels)
        st.caption(f"Drawing: {point_count} points")
        if point_count:
            st.write(_path_summary(engine))

        if st.button("✅ Finish", type="primary", use_container_width=True):
            tool.end_session()
            st.rerun()
        if point_count and st.button("↩️ Remove last point", use_container_width=True):
            engine.labels[-1].request_delete()
            st.rerun()

    completed = [engine for engine in tool.completed_engines if engine.labels]
    if completed:
        st.divider()
        st.subheader("Finished paths")
        for i, engine in enumerate(completed):
            st.write(f"**{i + 1}.** {_path_summary(engine)}")
            st.caption(f"Total: {format_distance(_path_length_m(engine), LabelConfig.PRECISION)}")
        if st.button("🗑️ Clear finished paths", use_container_width=True):
            tool.clear_all_completed_paths()
            st.rerun()


# =============================================================================
# MAP RENDERING
# =============================================================================


def _render_map() -> None:
    try:
        _render_map_inner()
    except Exception as e:
        # Log full traceback for debugging
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[RENDER] Map error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [RENDER] Something went wrong: {error_msg}")
        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _render_map_inner() -> None:
    host: DeckMapHost = st.session_state.host
    renderer: MapRenderer = st.session_state.map_renderer
    map_version = st.session_state.get("map_version", 0)

    deck = renderer.render()
    click = render_pydeck_map(deck=deck, key=f"measure_map_{map_version}", height=MapConfig.DEFAULT_HEIGHT_PX)
    if click.coordinate is None:
        return

    apply_map_click(host, renderer, click)
    st.rerun()


def apply_map_click(host: DeckMapHost, renderer: MapRenderer, click: PydeckClickResult) -> None:
    """Route one map click: a distance label press edits its path, anything else is a pointer click.

    Pressing the end label clears its path; pressing any other distance
    label deletes its point. Cursor hint labels are not buttons, so clicks
    on them reach the map.
    """
    assert click.coordinate is not None
    label = renderer.label_for_click(click.object_index) if click.is_label_click else None
    if label is not None and label.closable:
        if label.clear_button_visible:
            logger.info(f"[RENDER] Clear pressed on label {label.index}")
            label.request_clear()
        else:
            logger.info(f"[RENDER] Delete pressed on label {label.index}")
            label.request_delete()
        return

    logger.info(f"[RENDER] Map click at {click.coordinate}")
    # Move first so the cursor preview and live label follow the click
    pixel = host.project_to_pixel(click.coordinate)
    host.move_to(pixel)
    host.click(pixel)


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[UI] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")
        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui() -> None:
    tool: MeasureTool = st.session_state.tool

    if st.session_state.pop("ended_notice", False):
        st.toast("Measurement finished")

    col_map, col_ctrl = st.columns([3, 1])
    with col_map:
        _render_map()
    with col_ctrl:
        render_control_panel(tool)


if __name__ == "__main__":
    main()
