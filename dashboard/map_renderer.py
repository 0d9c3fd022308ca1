"""Folium map that displays a single route with a finish marker."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import folium
from folium.map import FitBounds

from wmroute import settings
from wmroute.route import Coordinate

logger = logging.getLogger(__name__)

ROUTE_COLOUR = "blue"
FIT_PADDING = (20, 20)
MARKER_SIZE = (46, 61)
MARKER_ANCHOR = (22, 44)

# Teardrop glyph used as the finish marker of the route.
FINISH_ICON_SVG = (
    '<svg width="46" height="61" viewBox="0 0 24 32" xmlns="http://www.w3.org/2000/svg">'
    '<path fill="#B44" fill-rule="evenodd" clip-rule="evenodd" '
    'd="M12 24C12.972 24 18 15.7794 18 12.3C18 8.82061 15.3137 6 12 6C8.68629 6 6 '
    "8.82061 6 12.3C6 15.7794 11.028 24 12 24ZM12.0001 15.0755C13.4203 15.0755 14.5716 "
    "13.8565 14.5716 12.3528C14.5716 10.8491 13.4203 9.63011 12.0001 9.63011C10.58 "
    "9.63011 9.42871 10.8491 9.42871 12.3528C9.42871 13.8565 10.58 15.0755 12.0001 "
    '15.0755Z"/></svg>'
)


@dataclass
class MapContainer:
    """The host element the map is drawn into; dimensions in pixels."""

    key: str
    width: int = 640
    height: int = 400


class MapRenderer:
    """Owns one folium map and the route layers added to it.

    The layers added by :meth:`set_route` are tracked explicitly so a refresh
    removes exactly those and nothing else attached to the map.
    """

    def __init__(self, *, tile_url: Optional[str] = None) -> None:
        self.tile_url = tile_url or settings.TILE_URL
        self._map: Optional[folium.Map] = None
        self._container: Optional[MapContainer] = None
        self._layers: List[folium.Element] = []
        self._size: Optional[Tuple[int, int]] = None
        self._rendered = False
        self._ready_callbacks: List[Callable[[], None]] = []

    @property
    def map(self) -> Optional[folium.Map]:
        return self._map

    @property
    def has_map(self) -> bool:
        return self._map is not None

    @property
    def layers(self) -> Tuple[folium.Element, ...]:
        return tuple(self._layers)

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        """Last known ``(width, height)`` of the container."""

        return self._size

    def ensure_map_created(self, container: MapContainer) -> folium.Map:
        """Create the map bound to ``container`` unless one already exists."""

        if self._map is not None:
            return self._map

        fmap = folium.Map(tiles=None, control_scale=True)
        folium.TileLayer(
            tiles=self.tile_url,
            attr=settings.TILE_ATTRIBUTION,
            name="OpenStreetMap",
        ).add_to(fmap)

        self._map = fmap
        self._container = container
        self._size = (container.width, container.height)
        self._rendered = False
        logger.debug("Created map for container %s", container.key)
        return fmap

    def _remove_layers(self) -> None:
        """Drop tracked layers from folium's private ``_children`` by name."""

        if self._map is not None:
            for layer in self._layers:
                self._map._children.pop(layer.get_name(), None)
        self._layers = []

    def set_route(self, points: Sequence[Coordinate]) -> None:
        """Replace the displayed route with ``points``."""

        self._remove_layers()
        if not points:
            return
        if self._map is None:
            raise RuntimeError("The map must be created before a route is set")

        locations = [point.as_latlng() for point in points]

        polyline = folium.PolyLine(locations, color=ROUTE_COLOUR)
        polyline.add_to(self._map)

        marker = folium.Marker(
            locations[-1],
            icon=folium.DivIcon(
                html=FINISH_ICON_SVG,
                icon_size=MARKER_SIZE,
                icon_anchor=MARKER_ANCHOR,
                class_name="route-finish-marker",
            ),
        )
        marker.add_to(self._map)

        lats = [lat for lat, _ in locations]
        lngs = [lng for _, lng in locations]
        fit = FitBounds(
            [[min(lats), min(lngs)], [max(lats), max(lngs)]],
            padding=FIT_PADDING,
        )
        self._map.add_child(fit)

        self._layers.extend([polyline, marker, fit])

    def clear(self) -> None:
        """Destroy the map and forget every handle to it.

        Pending readiness callbacks are released since there is nothing left
        to paint.
        """

        callbacks, self._ready_callbacks = self._ready_callbacks, []
        self._layers = []
        self._map = None
        self._container = None
        self._size = None
        self._rendered = False
        for callback in callbacks:
            callback()

    def invalidate_size(self) -> None:
        """Re-read the container dimensions after the host resized it."""

        if self._map is None or self._container is None:
            return
        self._size = (self._container.width, self._container.height)
        logger.debug("Map %s resized to %sx%s", self._container.key, *self._size)

    def when_ready(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the map has been painted."""

        if self._rendered:
            callback()
        else:
            self._ready_callbacks.append(callback)

    def mark_rendered(self) -> None:
        """Signal that the host has painted the map."""

        if self._map is None:
            return
        self._rendered = True
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            callback()

    def render_html(self) -> str:
        """Return the standalone HTML document of the map."""

        if self._map is None:
            raise RuntimeError("No map to render")
        html = self._map.get_root().render()
        self.mark_rendered()
        return html


__all__ = [
    "FINISH_ICON_SVG",
    "MapContainer",
    "MapRenderer",
]
