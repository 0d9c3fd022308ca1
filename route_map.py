"""Render the route of a location item to a standalone HTML map.

The map is written only once the widget reports it is ready, the same point
at which a dashboard would be printed.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Dict, Optional

from dashboard.map_renderer import MapContainer
from dashboard.widget import RouteWidget
from wmroute.api import ZabbixApi, get_api_client
from wmroute.fields import WidgetFields
from wmroute.route import NO_DATA_MESSAGE
from wmroute.settings import configure_logging
from wmroute.time_period import DEFAULT_FROM, DEFAULT_TO

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a Folium map of an item's route")
    parser.add_argument("--item", required=True, help="ID of the location item")
    parser.add_argument("--from", dest="time_from", default=DEFAULT_FROM, help="Start of the period")
    parser.add_argument("--to", dest="time_to", default=DEFAULT_TO, help="End of the period")
    parser.add_argument("--override-host", help="Match the item by key on this host")
    parser.add_argument("--out", default="route_map.html", help="Output HTML map path")
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser.parse_args(argv)


async def render_route(
    api: ZabbixApi,
    fields: WidgetFields,
    *,
    settle_delay: Optional[float] = None,
) -> tuple[Dict[str, Any], Optional[str]]:
    """Run one widget update and return the payload and the map HTML, if any."""

    widget = RouteWidget(
        api,
        lambda: fields,
        MapContainer(key="route_map"),
        settle_delay=settle_delay,
    )
    payload = await widget.on_update()
    if not widget.renderer.has_map:
        await widget.promise_ready()
        return payload, None

    ready = asyncio.ensure_future(widget.promise_ready())
    html = widget.renderer.render_html()
    await ready
    return payload, html


def main(argv: Sequence[str] | None = None, *, api: Optional[ZabbixApi] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    fields = WidgetFields.from_mapping(
        {
            "itemid": args.item,
            "time_period": {"from": args.time_from, "to": args.time_to},
            "override_hostid": args.override_host,
        }
    )

    logger.debug("Rendering route of item %s", fields.itemid)
    payload, html = asyncio.run(render_route(get_api_client(api), fields))

    if "error" in payload:
        print(payload["error"])
        return 1
    if html is None:
        print(NO_DATA_MESSAGE)
        return 1

    Path(args.out).write_text(html, encoding="utf-8")
    print(f"Map with {len(payload['points'])} way-point(s) saved to {args.out}")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
