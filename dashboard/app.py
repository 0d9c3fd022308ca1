"""Streamlit page hosting a single Route widget."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import pandas as pd
import streamlit as st
from streamlit_folium import st_folium

from dashboard.map_renderer import MapContainer
from dashboard.state import (
    _ensure_session_object,
    _get_query_params,
    _set_query_params,
)
from dashboard.widget import RouteWidget
from wmroute import settings
from wmroute.api import ZabbixApi, get_api_client
from wmroute.fields import WidgetFields
from wmroute.items import ItemNotFound, resolve_item
from wmroute.route import NO_DATA_MESSAGE
from wmroute.time_period import DEFAULT_FROM, DEFAULT_TO, TimePeriod, TimeWindow, resolve_window
from wmroute.view import widget_info, widget_name

logger = logging.getLogger(__name__)

WIDGET_STATE_KEY = "route_widget"
CONTAINER_STATE_KEY = "route_widget_container"
FIELDS_STATE_KEY = "route_widget_fields"
DASHBOARD_PERIOD_STATE_KEY = "route_dashboard_period"

MAP_CLEARED_MESSAGE = "Map cleared. It is redrawn on the next change."

DASHBOARD_PERIODS = {
    "Last 1 hour": "now-1h",
    "Today so far": "now/d",
    "Last 7 days": "now-7d",
    "Last 30 days": "now-30d",
}


def _dashboard_window() -> TimeWindow:
    """Shared dashboard time selector consumed by widgets that follow it."""

    start = st.session_state.get(DASHBOARD_PERIOD_STATE_KEY, DEFAULT_FROM)
    return resolve_window(TimePeriod(start=start, end=DEFAULT_TO))


def _first_param(params: Dict[str, list], key: str) -> str:
    values = params.get(key) or []
    return values[0] if values else ""


def _render_sidebar() -> Optional[WidgetFields]:
    """Render the configuration form and return validated fields."""

    params = _get_query_params()
    sidebar = st.sidebar
    sidebar.header("Route widget")

    label = sidebar.selectbox("Dashboard time period", list(DASHBOARD_PERIODS))
    st.session_state[DASHBOARD_PERIOD_STATE_KEY] = DASHBOARD_PERIODS[label]

    itemid = sidebar.text_input("Item ID", value=_first_param(params, "itemid"))
    name = sidebar.text_input("Name", placeholder="default")
    follow = sidebar.checkbox("Follow dashboard time period", value=True)
    values: Dict[str, Any] = {"itemid": itemid, "name": name}
    if not follow:
        values["time_period"] = {
            "from": sidebar.text_input("From", value=DEFAULT_FROM, placeholder="YYYY-MM-DD hh:mm:ss"),
            "to": sidebar.text_input("To", value=DEFAULT_TO, placeholder="YYYY-MM-DD hh:mm:ss"),
        }
    values["override_hostid"] = sidebar.text_input(
        "Override host ID", value=_first_param(params, "override_hostid")
    )

    if not itemid.strip():
        sidebar.info("Select an item to display its route.")
        return None

    try:
        fields = WidgetFields.from_mapping(values)
    except ValueError as exc:
        sidebar.error(str(exc))
        return None

    query = {"itemid": fields.itemid}
    if fields.override_hostid:
        query["override_hostid"] = fields.override_hostid
    _set_query_params(**query)
    return fields


def _render_header(api: ZabbixApi, fields: WidgetFields) -> None:
    try:
        item = resolve_item(api, fields.itemid, fields.override_hostid)
    except ItemNotFound:
        item = None

    info = widget_info(fields)
    hint = info[0]["hint"] if info else None
    st.subheader(widget_name(api, fields, item), help=hint)


def _drive_widget(widget: RouteWidget, height: int, clear_requested: bool) -> Optional[Dict[str, Any]]:
    """Forward page events to ``widget``; ``None`` when the map was just cleared."""

    if widget.container.height != height:
        widget.container.height = height
        widget.on_resize()

    if clear_requested:
        logger.debug("Clearing the route widget on request")
        widget.on_clear()
        return None
    return asyncio.run(widget.on_update())


def render_route_widget(api: Optional[ZabbixApi] = None) -> None:
    """Render the Route widget page."""

    fields = _render_sidebar()
    height = st.sidebar.slider("Map height", min_value=200, max_value=900, value=400, step=50)
    clear_requested = st.sidebar.button("Clear map")

    if fields is None:
        return
    st.session_state[FIELDS_STATE_KEY] = fields

    try:
        client = get_api_client(api)
    except RuntimeError as exc:
        st.error(str(exc))
        return

    container = _ensure_session_object(
        CONTAINER_STATE_KEY, lambda: MapContainer(key="route_map", height=height)
    )
    widget: RouteWidget = _ensure_session_object(
        WIDGET_STATE_KEY,
        lambda: RouteWidget(
            client,
            lambda: st.session_state[FIELDS_STATE_KEY],
            container,
            dashboard_time_period=_dashboard_window,
        ),
    )

    _render_header(client, fields)
    payload = _drive_widget(widget, height, clear_requested)

    if payload is None:
        st.info(MAP_CLEARED_MESSAGE)
        payload = {}
    elif "error" in payload:
        st.info(payload["error"])
    elif not payload.get("points"):
        st.info(NO_DATA_MESSAGE, icon="🔍")
    else:
        width, map_height = widget.renderer.size or (container.width, container.height)
        st_folium(
            widget.renderer.map,
            width=width,
            height=map_height,
            key=container.key,
            returned_objects=[],
        )
        widget.renderer.mark_rendered()

    if settings.DEBUG_MODE:
        with st.expander("Debug"):
            st.write(f"Displayed item: {widget.displayed.itemid}")
            st.dataframe(pd.DataFrame(payload.get("points", []), columns=["lat", "lng"]))


__all__ = ["render_route_widget"]
