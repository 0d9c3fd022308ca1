"""Fetch and validate the way-points of a location item."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from wmroute.api import ITEM_VALUE_TYPE_STR, ApiError, ZabbixApi
from wmroute.time_period import TimeWindow

logger = logging.getLogger(__name__)

NO_PERMISSIONS_MESSAGE = "No permissions to referred object or it does not exist!"
INVALID_LOCATION_MESSAGE = "Invalid location data!"
NO_DATA_MESSAGE = "No data found"
UPDATE_FAILED_MESSAGE = "Cannot load the route."


class LocationDataError(ValueError):
    """A history value does not decode to a ``{lat, lng}`` record."""


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    def as_latlng(self) -> List[float]:
        return [self.lat, self.lng]


@dataclass
class RouteResult:
    """Either the decoded ``points`` of a route or an ``error`` message."""

    points: List[Coordinate] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _coerce_number(value: Any) -> float:
    if isinstance(value, bool):
        raise LocationDataError(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise LocationDataError(f"Not a number: {value!r}") from exc
    else:
        raise LocationDataError(f"Not a number: {value!r}")
    if not math.isfinite(number):
        raise LocationDataError(f"Not a finite number: {value!r}")
    return number


def parse_location(value: str) -> Coordinate:
    """Decode a serialised history value into a :class:`Coordinate`."""

    try:
        location = json.loads(value)
    except (TypeError, ValueError) as exc:
        raise LocationDataError(f"Not JSON: {value!r}") from exc

    if not isinstance(location, dict) or "lat" not in location or "lng" not in location:
        raise LocationDataError(f"Missing lat/lng: {value!r}")

    return Coordinate(
        lat=_coerce_number(location["lat"]),
        lng=_coerce_number(location["lng"]),
    )


def fetch_route(api: ZabbixApi, itemid: str, window: TimeWindow) -> RouteResult:
    """Return the way-points of ``itemid`` recorded within ``window``.

    The fetch is all-or-nothing: the first value that fails to decode discards
    the whole route.
    """

    try:
        rows = api.history_get(
            [itemid],
            value_type=ITEM_VALUE_TYPE_STR,
            time_from=window.from_ts,
            time_till=window.to_ts,
            output=["value"],
            sortfield="clock",
            sortorder="ASC",
        )
    except ApiError as exc:
        logger.warning("History query for item %s failed: %s", itemid, exc)
        return RouteResult(error=NO_PERMISSIONS_MESSAGE)

    points: List[Coordinate] = []
    for row in rows:
        try:
            points.append(parse_location(row.get("value")))
        except LocationDataError as exc:
            logger.warning("Discarding route of item %s: %s", itemid, exc)
            return RouteResult(error=INVALID_LOCATION_MESSAGE)

    logger.debug("Fetched %d way-point(s) for item %s", len(points), itemid)
    return RouteResult(points=points)


__all__ = [
    "Coordinate",
    "INVALID_LOCATION_MESSAGE",
    "LocationDataError",
    "NO_DATA_MESSAGE",
    "NO_PERMISSIONS_MESSAGE",
    "RouteResult",
    "UPDATE_FAILED_MESSAGE",
    "fetch_route",
    "parse_location",
]
