"""Resolve the item a Route widget should display."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from wmroute.api import ApiError, ZabbixApi

logger = logging.getLogger(__name__)


class ItemNotFound(LookupError):
    """The item, or its counterpart on the override host, is not accessible."""


@dataclass(frozen=True)
class Item:
    itemid: str
    name: str = ""


def resolve_item(
    api: ZabbixApi,
    itemid: str,
    override_hostid: Optional[str] = None,
) -> Item:
    """Return the item to query, matched by key on ``override_hostid`` if given.

    Without an override host the configured item itself is looked up. With one,
    the configured item's key is read first and the item with the same key on
    the override host is returned instead.
    """

    options = {"output": ["itemid", "name"]}

    try:
        if override_hostid:
            src_items = api.item_get(output=["key_"], itemids=[itemid])
            if not src_items:
                raise ItemNotFound(f"Item {itemid} not found")
            options["hostids"] = [override_hostid]
            options["filter"] = {"key_": src_items[0]["key_"]}
        else:
            options["itemids"] = [itemid]

        items = api.item_get(**options)
    except ApiError as exc:
        logger.warning("Item lookup for %s failed: %s", itemid, exc)
        raise ItemNotFound(str(exc)) from exc

    if not items:
        if override_hostid:
            raise ItemNotFound(f"No item matching {itemid} on host {override_hostid}")
        raise ItemNotFound(f"Item {itemid} not found")

    item = items[0]
    return Item(itemid=str(item["itemid"]), name=str(item.get("name") or ""))


__all__ = ["Item", "ItemNotFound", "resolve_item"]
