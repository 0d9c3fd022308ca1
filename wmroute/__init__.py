"""Core of the Route widget: API access, item resolution and route fetching."""

from .api import ApiError, ZabbixApi, get_api_client
from .fields import WidgetFields
from .items import Item, ItemNotFound, resolve_item
from .route import Coordinate, RouteResult, fetch_route, parse_location
from .time_period import TimePeriod, TimeWindow, resolve_window

__all__ = [
    "ApiError",
    "Coordinate",
    "Item",
    "ItemNotFound",
    "RouteResult",
    "TimePeriod",
    "TimeWindow",
    "WidgetFields",
    "ZabbixApi",
    "fetch_route",
    "get_api_client",
    "parse_location",
    "resolve_item",
    "resolve_window",
]
