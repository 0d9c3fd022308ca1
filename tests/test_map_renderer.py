from __future__ import annotations

import folium
import pytest

from dashboard.map_renderer import MapContainer, MapRenderer
from wmroute import settings
from wmroute.route import Coordinate

ROUTE = [Coordinate(51.50, -0.09), Coordinate(51.51, -0.10)]


def _children(fmap: folium.Map, kind: type) -> list:
    return [child for child in fmap._children.values() if isinstance(child, kind)]


@pytest.fixture()
def renderer():
    return MapRenderer()


@pytest.fixture()
def container():
    return MapContainer(key="test_map", width=300, height=200)


def test_ensure_map_created_is_idempotent(renderer, container):
    first = renderer.ensure_map_created(container)
    second = renderer.ensure_map_created(container)

    assert first is second
    tiles = _children(first, folium.TileLayer)
    assert len(tiles) == 1
    assert tiles[0].tiles == settings.TILE_URL


def test_set_route_adds_polyline_and_finish_marker(renderer, container):
    fmap = renderer.ensure_map_created(container)

    renderer.set_route(ROUTE)

    polylines = _children(fmap, folium.PolyLine)
    markers = _children(fmap, folium.Marker)
    assert len(polylines) == 1
    assert polylines[0].locations == [[51.50, -0.09], [51.51, -0.10]]
    assert len(markers) == 1
    assert list(markers[0].location) == [51.51, -0.10]


def test_set_route_twice_does_not_accumulate_layers(renderer, container):
    fmap = renderer.ensure_map_created(container)

    renderer.set_route(ROUTE)
    renderer.set_route([Coordinate(40.0, 1.0), Coordinate(40.1, 1.1), Coordinate(40.2, 1.2)])

    assert len(_children(fmap, folium.PolyLine)) == 1
    markers = _children(fmap, folium.Marker)
    assert len(markers) == 1
    assert list(markers[0].location) == [40.2, 1.2]


def test_empty_routes_leave_no_layers(renderer, container):
    fmap = renderer.ensure_map_created(container)
    renderer.set_route(ROUTE)

    renderer.set_route([])
    renderer.set_route([])

    assert renderer.layers == ()
    assert _children(fmap, folium.PolyLine) == []
    assert _children(fmap, folium.Marker) == []


def test_set_route_keeps_unrelated_layers(renderer, container):
    fmap = renderer.ensure_map_created(container)
    unrelated = folium.Marker([0.0, 0.0]).add_to(fmap)

    renderer.set_route(ROUTE)
    renderer.set_route([])

    assert _children(fmap, folium.Marker) == [unrelated]


def test_clear_returns_to_initial_state(renderer, container):
    first = renderer.ensure_map_created(container)
    renderer.set_route(ROUTE)

    renderer.clear()

    assert not renderer.has_map
    assert renderer.layers == ()
    assert renderer.ensure_map_created(container) is not first


def test_invalidate_size_reads_container_dimensions(renderer, container):
    renderer.invalidate_size()
    assert renderer.size is None

    renderer.ensure_map_created(container)
    container.height = 500
    assert renderer.size == (300, 200)

    renderer.invalidate_size()
    assert renderer.size == (300, 500)


def test_when_ready_fires_after_render(renderer, container):
    fired = []
    renderer.ensure_map_created(container)
    renderer.set_route(ROUTE)
    renderer.when_ready(lambda: fired.append("first"))
    assert fired == []

    html = renderer.render_html()

    assert "tile.openstreetmap.org" in html
    assert "route-finish-marker" in html
    assert fired == ["first"]
    renderer.when_ready(lambda: fired.append("second"))
    assert fired == ["first", "second"]


def test_clear_releases_pending_ready_callbacks(renderer, container):
    fired = []
    renderer.ensure_map_created(container)
    renderer.when_ready(lambda: fired.append(True))

    renderer.clear()

    assert fired == [True]
