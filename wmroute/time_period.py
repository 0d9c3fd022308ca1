"""Time period parsing for the widget's history window.

Periods are written in the dashboard's relative syntax: ``now``, offsets such
as ``now-1h`` or ``now-2d+3h`` and an optional rounding suffix (``now/d``,
``now-1w/w``). Absolute timestamps use ``YYYY-MM-DD hh:mm:ss``. A period bound
used as ``from`` rounds down to the start of its unit, one used as ``to``
rounds up to the last second of the unit.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import pandas as pd

from wmroute import settings

logger = logging.getLogger(__name__)

DASHBOARD_REFERENCE = "DASHBOARD._timeperiod"
DEFAULT_FROM = "now/d"
DEFAULT_TO = "now"

_RELATIVE_RE = re.compile(r"^now(?P<offsets>(?:[+-]\d+[smhdwMy])*)(?:/(?P<unit>[mhdwMy]))?$")
_OFFSET_RE = re.compile(r"([+-])(\d+)([smhdwMy])")
_ABSOLUTE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")

_OFFSET_KWARGS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
    "M": "months",
    "y": "years",
}

_UNIT_NAMES = {
    "s": "second",
    "m": "minute",
    "h": "hour",
    "d": "day",
    "w": "week",
    "M": "month",
    "y": "year",
}

_NAMED_PERIODS = {
    ("now/d", "now/d"): "Today",
    ("now/d", "now"): "Today so far",
    ("now/w", "now/w"): "This week",
    ("now/w", "now"): "This week so far",
    ("now/M", "now/M"): "This month",
    ("now/M", "now"): "This month so far",
    ("now/y", "now/y"): "This year",
    ("now/y", "now"): "This year so far",
    ("now-1d/d", "now-1d/d"): "Yesterday",
    ("now-1w/w", "now-1w/w"): "Previous week",
    ("now-1M/M", "now-1M/M"): "Previous month",
    ("now-1y/y", "now-1y/y"): "Previous year",
}


@dataclass(frozen=True)
class TimeWindow:
    """Closed ``[from_ts, to_ts]`` interval in unix seconds."""

    from_ts: int
    to_ts: int

    def __post_init__(self) -> None:
        if self.from_ts > self.to_ts:
            raise ValueError(
                f"Time window starts after it ends: {self.from_ts} > {self.to_ts}"
            )


@dataclass(frozen=True)
class TimePeriod:
    """Configured time period: either a dashboard reference or explicit bounds."""

    start: str = DEFAULT_FROM
    end: str = DEFAULT_TO
    reference: Optional[str] = None

    @classmethod
    def dashboard(cls) -> "TimePeriod":
        return cls(reference=DASHBOARD_REFERENCE)

    @property
    def follows_dashboard(self) -> bool:
        return self.reference is not None

    @property
    def is_custom(self) -> bool:
        return self.reference is None

    def validate(self) -> None:
        """Raise ``ValueError`` if either bound cannot be parsed."""

        if self.follows_dashboard:
            return
        now = pd.Timestamp("2000-01-01", tz="UTC")
        parse_bound(self.start, now=now, is_end=False)
        parse_bound(self.end, now=now, is_end=True)


def _start_of(ts: pd.Timestamp, unit: str) -> pd.Timestamp:
    ts = ts.replace(second=0, microsecond=0, nanosecond=0)
    if unit == "m":
        return ts
    ts = ts.replace(minute=0)
    if unit == "h":
        return ts
    ts = ts.normalize()
    if unit == "d":
        return ts
    if unit == "w":
        return ts - pd.DateOffset(days=ts.weekday())
    if unit == "M":
        return ts.replace(day=1)
    return ts.replace(month=1, day=1)


def _end_of(ts: pd.Timestamp, unit: str) -> pd.Timestamp:
    start = _start_of(ts, unit)
    return start + pd.DateOffset(**{_OFFSET_KWARGS[unit]: 1}) - pd.Timedelta(seconds=1)


def _as_timestamp(now: Optional[datetime], tz: str) -> pd.Timestamp:
    if now is None:
        return pd.Timestamp.now(tz=tz)
    ts = pd.Timestamp(now)
    if ts.tzinfo is None:
        return ts.tz_localize(tz)
    return ts.tz_convert(tz)


def parse_bound(
    value: str,
    *,
    now: pd.Timestamp,
    is_end: bool,
) -> pd.Timestamp:
    """Return the timestamp ``value`` denotes relative to ``now``."""

    text = (value or "").strip()
    match = _RELATIVE_RE.match(text)
    if match:
        ts = now
        for sign, amount, unit in _OFFSET_RE.findall(match.group("offsets") or ""):
            offset = pd.DateOffset(**{_OFFSET_KWARGS[unit]: int(amount)})
            ts = ts + offset if sign == "+" else ts - offset
        unit = match.group("unit")
        if unit:
            ts = _end_of(ts, unit) if is_end else _start_of(ts, unit)
        return ts

    for fmt in _ABSOLUTE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return pd.Timestamp(parsed).tz_localize(now.tzinfo)

    raise ValueError(f"Invalid time period bound: {value!r}")


def resolve_window(
    period: TimePeriod,
    *,
    now: Optional[datetime] = None,
    tz: Optional[str] = None,
    dashboard: Optional[Callable[[], TimeWindow]] = None,
) -> TimeWindow:
    """Resolve ``period`` to a concrete :class:`TimeWindow`."""

    if period.follows_dashboard:
        if dashboard is not None:
            return dashboard()
        logger.debug("No dashboard time selector available, using the default period")
        period = TimePeriod()

    current = _as_timestamp(now, tz or settings.DEFAULT_TIMEZONE)
    start = parse_bound(period.start, now=current, is_end=False)
    end = parse_bound(period.end, now=current, is_end=True)
    return TimeWindow(int(start.timestamp()), int(end.timestamp()))


def describe_time_period(start: str, end: str) -> str:
    """Return a human readable hint for a configured period."""

    named = _NAMED_PERIODS.get((start, end))
    if named:
        return named

    if end == "now":
        match = re.fullmatch(r"now-(\d+)([smhdwMy])", start)
        if match:
            amount = int(match.group(1))
            unit = _UNIT_NAMES[match.group(2)]
            return f"Last {amount} {unit}{'' if amount == 1 else 's'}"

    return f"{start} - {end}"


__all__ = [
    "DASHBOARD_REFERENCE",
    "DEFAULT_FROM",
    "DEFAULT_TO",
    "TimePeriod",
    "TimeWindow",
    "describe_time_period",
    "parse_bound",
    "resolve_window",
]
