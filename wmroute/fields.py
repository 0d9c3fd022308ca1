"""Configuration fields of the Route widget."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

from wmroute.time_period import DEFAULT_FROM, DEFAULT_TO, TimePeriod

DEFAULT_NAME = "Route"


@dataclass(frozen=True)
class WidgetFields:
    """Validated widget configuration.

    ``itemid`` holds exactly one string-typed item. ``override_hostid`` is only
    honoured on global dashboards; template dashboards ignore it.
    """

    itemid: str
    time_period: TimePeriod = field(default_factory=TimePeriod.dashboard)
    override_hostid: Optional[str] = None
    name: str = ""

    def __post_init__(self) -> None:
        if not str(self.itemid or "").strip():
            raise ValueError("Item is required")
        self.time_period.validate()

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "WidgetFields":
        """Build the fields from form-like values.

        ``itemid`` and ``override_hostid`` may be given as one-element lists, the
        way multiselect fields submit them. ``time_period`` is either a mapping
        with ``from``/``to`` keys or omitted to follow the dashboard.
        """

        itemid = _single_id(values.get("itemid"), "itemid")
        if itemid is None:
            raise ValueError("Item is required")

        raw_period = values.get("time_period")
        if isinstance(raw_period, Mapping) and ("from" in raw_period or "to" in raw_period):
            period = TimePeriod(
                start=str(raw_period.get("from") or DEFAULT_FROM),
                end=str(raw_period.get("to") or DEFAULT_TO),
            )
        else:
            period = TimePeriod.dashboard()

        return cls(
            itemid=itemid,
            time_period=period,
            override_hostid=_single_id(values.get("override_hostid"), "override_hostid"),
            name=str(values.get("name") or ""),
        )


def _single_id(value: Union[None, str, int, Sequence[Any]], label: str) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (str, int)):
        return str(value)
    ids = [str(v) for v in value if v not in (None, "")]
    if not ids:
        return None
    if len(ids) > 1:
        raise ValueError(f"Only a single value is allowed for {label}")
    return ids[0]


__all__ = ["DEFAULT_NAME", "WidgetFields"]
