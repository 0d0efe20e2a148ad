"""Pydeck click capture using streamlit-deckgl.

st.pydeck_chart only reports picked objects; st_deckgl returns the full
deck.gl onClick event, including the coordinate of clicks on empty map,
which is what a measuring click is.
"""

import logging
from dataclasses import dataclass
from typing import Any

import pydeck as pdk
import streamlit as st
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from distance_measurer.constants import LayerConfig
from distance_measurer.model.coordinate import Coordinate

logger = logging.getLogger(__name__)


@dataclass
class PydeckClickResult:
    """One new click on the map.

    Attributes:
        coordinate: Clicked position, None when no new click happened
        object_type: "type" tag of the picked layer record, if any
        object_index: "index" of the picked layer record, if any
    """

    coordinate: Coordinate | None
    object_type: str | None = None
    object_index: int | None = None

    @property
    def is_label_click(self) -> bool:
        return self.object_type == LayerConfig.TYPE_LABEL and self.object_index is not None

    @staticmethod
    def empty() -> "PydeckClickResult":
        return PydeckClickResult(coordinate=None)


def render_pydeck_map(deck: pdk.Deck, key: str, height: int) -> PydeckClickResult:
    """Render the deck and return the click that triggered this rerun, if new.

    Args:
        deck: Configured pydeck.Deck object
        key: Unique key for this component instance
        height: Height in pixels
    """
    last_click_key = f"_deckgl_last_click_{key}"
    if last_click_key not in st.session_state:
        st.session_state[last_click_key] = None

    # MUST pass events=['click'] to enable click detection
    event = st_deckgl(deck, key=key, height=height, events=["click"])
    if not event:
        return PydeckClickResult.empty()

    # st_deckgl spreads picked object properties into the event dict
    logger.debug(f"st_deckgl event keys: {list(event.keys()) if isinstance(event, dict) else type(event)}")
    raw = event.get("coordinate")
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        return PydeckClickResult.empty()

    # deck.gl reports [lon, lat]
    lon, lat = float(raw[0]), float(raw[1])
    object_type = event.get("type") if event.get("type") != "click" else None
    object_index = event.get("index")

    # The component returns its last event on every rerun
    click_id = _get_click_id(lat=lat, lon=lon, object_type=object_type, object_index=object_index)
    if click_id == st.session_state.get(last_click_key):
        return PydeckClickResult.empty()
    st.session_state[last_click_key] = click_id

    try:
        coordinate = Coordinate(lat=lat, lon=lon)
    except ValueError:
        logger.warning(f"Ignoring click outside valid range: lat={lat}, lon={lon}")
        return PydeckClickResult.empty()

    logger.debug(f"Click detected: {coordinate}, object={object_type}")
    return PydeckClickResult(
        coordinate=coordinate,
        object_type=object_type,
        object_index=int(object_index) if isinstance(object_index, (int, float)) else None,
    )


def _get_click_id(lat: float, lon: float, object_type: Any, object_index: Any) -> str:
    """Generate unique ID for click deduplication."""
    # Round coordinates for dedup tolerance
    parts = [f"coord_{lon:.6f}_{lat:.6f}"]
    if object_type:
        parts.append(f"{object_type}_{object_index}")
    return "_".join(parts)
