"""Presentation data for the Route widget: payload, name and header info."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from wmroute.api import ApiError, ZabbixApi
from wmroute.fields import DEFAULT_NAME, WidgetFields
from wmroute.items import Item
from wmroute.route import RouteResult
from wmroute.time_period import describe_time_period

logger = logging.getLogger(__name__)

NAME_DELIMITER = ": "
TIME_PERIOD_ICON = "time-period"


def route_payload(result: RouteResult) -> Dict[str, Any]:
    """Return ``{points}``, ``{error}`` or ``{}`` for an empty route."""

    if result.error is not None:
        return {"error": result.error}
    if not result.points:
        return {}
    return {"points": [point.as_dict() for point in result.points]}


def widget_name(
    api: ZabbixApi,
    fields: WidgetFields,
    item: Optional[Item],
    *,
    is_template_dashboard: bool = False,
) -> str:
    """Return the widget header, prefixed with the host name where known."""

    if fields.name:
        return fields.name

    if is_template_dashboard and not fields.override_hostid:
        return DEFAULT_NAME

    name = item.name if item is not None and item.name else DEFAULT_NAME
    if is_template_dashboard:
        return name

    try:
        if fields.override_hostid:
            hosts = api.host_get(output=["name"], hostids=[fields.override_hostid])
        elif item is not None:
            hosts = api.host_get(output=["name"], itemids=[item.itemid])
        else:
            hosts = []
    except ApiError as exc:
        logger.warning("Host lookup for the widget name failed: %s", exc)
        hosts = []

    if hosts:
        name = f"{hosts[0]['name']}{NAME_DELIMITER}{name}"
    return name


def widget_info(fields: WidgetFields) -> List[Dict[str, str]]:
    """Header icons: a time period hint when a custom period is in effect."""

    period = fields.time_period
    if not period.is_custom:
        return []
    return [
        {
            "icon": TIME_PERIOD_ICON,
            "hint": describe_time_period(period.start, period.end),
        }
    ]


__all__ = [
    "NAME_DELIMITER",
    "TIME_PERIOD_ICON",
    "route_payload",
    "widget_info",
    "widget_name",
]
