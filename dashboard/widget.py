"""Lifecycle controller of the Route widget."""
from __future__ import annotations

import asyncio
import itertools
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from dashboard.map_renderer import MapContainer, MapRenderer
from dashboard.state import DisplayedState
from wmroute import settings
from wmroute.api import ZabbixApi
from wmroute.fields import WidgetFields
from wmroute.items import ItemNotFound, resolve_item
from wmroute.route import NO_PERMISSIONS_MESSAGE, UPDATE_FAILED_MESSAGE, RouteResult, fetch_route
from wmroute.time_period import TimeWindow, resolve_window
from wmroute.view import route_payload

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]


class WidgetLifecycle(Protocol):
    """Hooks the dashboard calls on every widget."""

    async def on_update(self) -> Payload: ...

    def on_resize(self) -> None: ...

    def on_clear(self) -> None: ...

    async def promise_ready(self) -> None: ...


class RouteWidget:
    """Keeps a :class:`MapRenderer` in sync with the configured item's route.

    Every update takes a sequence number when it starts. A finished update is
    applied only if no later update has completed already, whether that one
    rendered or was suppressed, so a slow fetch can never overwrite a newer
    route.

    Network calls run on worker threads via :func:`asyncio.to_thread`, so
    overlapping updates share ``api`` across threads. State of the widget
    itself is only touched on the event loop thread.
    """

    def __init__(
        self,
        api: ZabbixApi,
        get_fields: Callable[[], WidgetFields],
        container: MapContainer,
        *,
        renderer: Optional[MapRenderer] = None,
        dashboard_time_period: Optional[Callable[[], TimeWindow]] = None,
        is_template_dashboard: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
        settle_delay: Optional[float] = None,
    ) -> None:
        self.api = api
        self.get_fields = get_fields
        self.container = container
        self.renderer = renderer or MapRenderer()
        self.dashboard_time_period = dashboard_time_period
        self.is_template_dashboard = is_template_dashboard
        self.clock = clock
        self.settle_delay = settings.READY_SETTLE_DELAY if settle_delay is None else settle_delay

        self.displayed = DisplayedState()
        self.payload: Payload = {}
        self._sequence = itertools.count(1)
        self._applied = 0
        self._in_flight = 0
        self._settled: Optional[asyncio.Event] = None
        # (configured itemid, override host) -> itemid it resolved to
        self._resolved: Optional[Tuple[Tuple[str, Optional[str]], str]] = None

    async def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        return await asyncio.to_thread(func, *args)

    def _current_window(self, fields: WidgetFields) -> TimeWindow:
        now = self.clock() if self.clock is not None else None
        return resolve_window(
            fields.time_period,
            now=now,
            dashboard=self.dashboard_time_period,
        )

    async def _resolve_itemid(self, fields: WidgetFields) -> str:
        override = None if self.is_template_dashboard else fields.override_hostid
        key = (fields.itemid, override or None)
        if self._resolved is not None and self._resolved[0] == key:
            return self._resolved[1]
        item = await self._call(resolve_item, self.api, fields.itemid, override)
        self._resolved = (key, item.itemid)
        return item.itemid

    async def on_update(self) -> Payload:
        """Refresh the route; returns the render payload now in effect."""

        seq = next(self._sequence)
        if self._in_flight == 0:
            self._settled = asyncio.Event()
        self._in_flight += 1
        try:
            return await self._update(seq)
        except Exception:
            logger.exception("Route update %d failed", seq)
            return self._apply(seq, None, None, RouteResult(error=UPDATE_FAILED_MESSAGE))
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and self._settled is not None:
                self._settled.set()

    async def _update(self, seq: int) -> Payload:
        fields = self.get_fields()
        window = self._current_window(fields)

        try:
            itemid = await self._resolve_itemid(fields)
        except ItemNotFound as exc:
            logger.info("Route item could not be resolved: %s", exc)
            return self._apply(seq, None, window, RouteResult(error=NO_PERMISSIONS_MESSAGE))

        if self.displayed.matches(itemid, window):
            logger.debug("Route of item %s is already displayed", itemid)
            self._applied = max(self._applied, seq)
            return self.payload

        result = await self._call(fetch_route, self.api, itemid, window)
        return self._apply(seq, itemid, window, result)

    def _apply(
        self,
        seq: int,
        itemid: Optional[str],
        window: Optional[TimeWindow],
        result: RouteResult,
    ) -> Payload:
        if seq <= self._applied:
            logger.debug("Discarding stale update %d (already applied %d)", seq, self._applied)
            return self.payload
        self._applied = seq

        if not result.ok or not result.points:
            self.renderer.clear()
            self.displayed.reset()
            if not result.ok:
                self._resolved = None
        else:
            self.renderer.ensure_map_created(self.container)
            self.renderer.set_route(result.points)
            self.displayed.record(itemid, window, self.renderer.layers)

        self.payload = route_payload(result)
        return self.payload

    def on_resize(self) -> None:
        self.renderer.invalidate_size()

    def on_clear(self) -> None:
        self.renderer.clear()
        self.displayed.reset()
        self._resolved = None
        self.payload = {}

    async def promise_ready(self) -> None:
        """Resolve once the widget is fully rendered, e.g. for printing."""

        if self._settled is not None:
            await self._settled.wait()

        if not self.renderer.has_map:
            return

        loop = asyncio.get_running_loop()
        painted: asyncio.Future = loop.create_future()

        def _on_ready() -> None:
            if not painted.done():
                painted.set_result(None)

        self.renderer.when_ready(_on_ready)
        await painted
        await asyncio.sleep(self.settle_delay)


__all__ = ["Payload", "RouteWidget", "WidgetLifecycle"]
