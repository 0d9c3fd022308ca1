"""Smoke tests for the Streamlit dashboard package."""
from __future__ import annotations

import importlib


def test_dashboard_app_module_importable() -> None:
    module = importlib.import_module("dashboard.app")
    assert hasattr(module, "render_route_widget")
    assert "Today so far" in module.DASHBOARD_PERIODS


def test_streamlit_entrypoint_exposed() -> None:
    module = importlib.import_module("dashboard.app")
    render = getattr(module, "render_route_widget", None)
    assert callable(render)


def test_displayed_state_matching() -> None:
    from dashboard.state import DisplayedState
    from wmroute.time_period import TimeWindow

    state = DisplayedState()
    assert not state.matches("100", TimeWindow(0, 10))

    state.record("100", TimeWindow(0, 10), ["layer"])
    assert state.matches("100", TimeWindow(0, 10))
    assert not state.matches("100", TimeWindow(0, 11))

    state.reset()
    assert state.is_empty
    assert state.layers == ()


def _page_widget(api):
    from dashboard.map_renderer import MapContainer
    from dashboard.widget import RouteWidget
    from wmroute.fields import WidgetFields

    fields = WidgetFields(itemid="100")
    return RouteWidget(api, lambda: fields, MapContainer(key="page_map"), settle_delay=0)


def test_clear_request_skips_update(fake_api_factory, items) -> None:
    from dashboard.app import _drive_widget

    api = fake_api_factory(items=items, history={"100": [(0, '{"lat": 1, "lng": 2}')]})
    widget = _page_widget(api)
    widget.renderer.ensure_map_created(widget.container)

    assert _drive_widget(widget, 400, clear_requested=True) is None
    assert not widget.renderer.has_map
    assert api.calls == []


def test_height_change_resizes_then_updates(fake_api_factory, items) -> None:
    from dashboard.app import _drive_widget

    widget = _page_widget(fake_api_factory(items=items))
    widget.renderer.ensure_map_created(widget.container)

    payload = _drive_widget(widget, 600, clear_requested=False)

    assert widget.container.height == 600
    assert payload == {}
