"""JSON-RPC client for the monitoring platform API."""
from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

import requests

from wmroute import settings

logger = logging.getLogger(__name__)

ITEM_VALUE_TYPE_STR = 1

_API_CLIENT: Optional["ZabbixApi"] = None


class ApiError(RuntimeError):
    """Raised when an API call fails at the transport or JSON-RPC level."""

    def __init__(self, message: str, *, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data

    def __str__(self) -> str:
        text = super().__str__()
        if self.data:
            text = f"{text} {self.data}"
        if self.code is not None:
            text = f"[{self.code}] {text}"
        return text


class ZabbixApi:
    """Minimal ``api_jsonrpc.php`` client covering the calls the widget needs.

    Calls may come from several worker threads at once. Request ids are drawn
    under a lock; the shared ``requests.Session`` is only used for its
    connection pool and carries no per-call state.
    """

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        base = url.rstrip("/")
        if not base.endswith("api_jsonrpc.php"):
            base = f"{base}/api_jsonrpc.php"
        self.url = base
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)
        self._ids_lock = threading.Lock()

    def call(self, method: str, params: Any) -> Any:
        """Invoke ``method`` and return the ``result`` member of the response."""

        with self._ids_lock:
            request_id = next(self._ids)
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": request_id,
        }
        headers = {"Content-Type": "application/json-rpc"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.session.post(
                self.url, json=payload, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            logger.warning("API call %s failed: %s", method, exc)
            raise ApiError(f"Request to {method} failed: {exc}") from exc
        except ValueError as exc:
            raise ApiError(f"Malformed response to {method}") from exc

        if not isinstance(body, dict):
            raise ApiError(f"Malformed response to {method}")

        error = body.get("error")
        if error:
            logger.warning("API call %s returned an error: %s", method, error)
            raise ApiError(
                str(error.get("message") or "API error"),
                code=error.get("code"),
                data=error.get("data"),
            )
        return body.get("result")

    def history_get(
        self,
        itemids: Sequence[str],
        *,
        value_type: int = ITEM_VALUE_TYPE_STR,
        time_from: Optional[int] = None,
        time_till: Optional[int] = None,
        output: Sequence[str] = ("value",),
        sortfield: str = "clock",
        sortorder: str = "ASC",
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "history": value_type,
            "itemids": list(itemids),
            "output": list(output),
            "sortfield": sortfield,
            "sortorder": sortorder,
        }
        if time_from is not None:
            params["time_from"] = time_from
        if time_till is not None:
            params["time_till"] = time_till
        return self.call("history.get", params) or []

    def item_get(self, **params: Any) -> List[Dict[str, Any]]:
        return self.call("item.get", params) or []

    def host_get(self, **params: Any) -> List[Dict[str, Any]]:
        return self.call("host.get", params) or []


def get_api_client(client: Optional[ZabbixApi] = None) -> ZabbixApi:
    """Return an API client, building one from the environment if needed."""

    if client is not None:
        return client

    global _API_CLIENT
    if _API_CLIENT is None:
        if not settings.ZABBIX_API_TOKEN:
            raise RuntimeError(
                "Set ZABBIX_API_TOKEN env var (export ZABBIX_API_TOKEN=YOUR_TOKEN)"
            )
        _API_CLIENT = ZabbixApi(
            settings.ZABBIX_URL,
            settings.ZABBIX_API_TOKEN,
            timeout=settings.ZABBIX_TIMEOUT,
        )
    return _API_CLIENT


__all__ = [
    "ITEM_VALUE_TYPE_STR",
    "ApiError",
    "ZabbixApi",
    "get_api_client",
]
