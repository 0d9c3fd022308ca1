"""Dashboard package hosting the Route widget."""

from .map_renderer import MapContainer, MapRenderer
from .widget import RouteWidget, WidgetLifecycle

__all__ = ["MapContainer", "MapRenderer", "RouteWidget", "WidgetLifecycle"]
