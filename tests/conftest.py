from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from wmroute.api import ApiError


class FakeApi:
    """In-memory stand-in for the monitoring API used by the widget.

    ``history`` maps item IDs to ``(clock, value)`` samples, ``items`` lists
    item records with ``itemid``, ``hostid``, ``key_`` and ``name`` and
    ``hosts`` maps host IDs to names. Methods named in ``fail`` raise
    :class:`ApiError`; a history query for an item in ``gates`` blocks until
    its event is set.
    """

    def __init__(
        self,
        *,
        history: Optional[Dict[str, List[Tuple[int, str]]]] = None,
        items: Iterable[Dict[str, str]] = (),
        hosts: Optional[Dict[str, str]] = None,
        fail: Iterable[str] = (),
        gates: Optional[Dict[str, threading.Event]] = None,
    ) -> None:
        self.history = history or {}
        self.items = list(items)
        self.hosts = hosts or {}
        self.fail = set(fail)
        self.gates = gates or {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def _check(self, method: str) -> None:
        if method in self.fail:
            raise ApiError("No permissions to referred object or it does not exist!", code=-32500)

    def history_get(self, itemids, **kwargs):
        self.calls.append(("history.get", {"itemids": list(itemids), **kwargs}))
        self._check("history.get")
        itemid = itemids[0]
        gate = self.gates.get(itemid)
        if gate is not None:
            gate.wait(5)
        time_from = kwargs.get("time_from")
        time_till = kwargs.get("time_till")
        samples = [
            (clock, value)
            for clock, value in self.history.get(itemid, [])
            if (time_from is None or clock >= time_from) and (time_till is None or clock <= time_till)
        ]
        samples.sort(key=lambda sample: sample[0])
        return [{"value": value} for _clock, value in samples]

    def item_get(self, **params):
        self.calls.append(("item.get", params))
        self._check("item.get")
        result = self.items
        if "itemids" in params:
            result = [item for item in result if item["itemid"] in params["itemids"]]
        if "hostids" in params:
            result = [item for item in result if item["hostid"] in params["hostids"]]
        for key, value in (params.get("filter") or {}).items():
            result = [item for item in result if item.get(key) == value]
        return [dict(item) for item in result]

    def host_get(self, **params):
        self.calls.append(("host.get", params))
        self._check("host.get")
        if "hostids" in params:
            hostids = params["hostids"]
        else:
            hostids = [item["hostid"] for item in self.items if item["itemid"] in params.get("itemids", [])]
        return [{"name": self.hosts[hostid]} for hostid in hostids if hostid in self.hosts]

    def count(self, method: str) -> int:
        return sum(1 for name, _params in self.calls if name == method)


@pytest.fixture()
def fake_api_factory():
    return FakeApi


@pytest.fixture()
def items():
    return [
        {"itemid": "100", "hostid": "1", "key_": "vehicle.location", "name": "Location"},
        {"itemid": "200", "hostid": "2", "key_": "vehicle.location", "name": "Location"},
        {"itemid": "300", "hostid": "2", "key_": "vehicle.battery", "name": "Battery"},
    ]


@pytest.fixture()
def hosts():
    return {"1": "Truck A", "2": "Truck B"}
