"""State and session helpers for the Route widget page."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import streamlit as st

from wmroute.time_period import TimeWindow

T = TypeVar("T")

__all__ = [
    "DisplayedState",
    "_ensure_session_object",
    "_get_query_params",
    "_set_query_params",
]


@dataclass
class DisplayedState:
    """What the widget currently shows on its map."""

    itemid: Optional[str] = None
    window: Optional[TimeWindow] = None
    layers: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return self.itemid is None

    def matches(self, itemid: str, window: TimeWindow) -> bool:
        return not self.is_empty and self.itemid == itemid and self.window == window

    def record(self, itemid: Optional[str], window: TimeWindow, layers: Sequence[Any]) -> None:
        self.itemid = itemid
        self.window = window
        self.layers = tuple(layers)

    def reset(self) -> None:
        self.itemid = None
        self.window = None
        self.layers = ()


def _set_query_params(**params: str) -> None:
    """Set Streamlit query parameters using the stable API when available."""

    query_params = getattr(st, "query_params", None)
    if query_params is not None:
        query_params.from_dict(params)
        return

    # Fallback for older Streamlit versions.
    st.experimental_set_query_params(**params)


def _get_query_params() -> Dict[str, List[str]]:
    """Return query parameters as a dictionary of lists."""

    query_params = getattr(st, "query_params", None)
    if query_params is not None:
        return {key: query_params.get_all(key) for key in query_params.keys()}
    return st.experimental_get_query_params()


def _ensure_session_object(key: str, factory: Callable[[], T]) -> T:
    """Return ``st.session_state[key]``, creating it with ``factory`` once."""

    if key not in st.session_state:
        st.session_state[key] = factory()
    return st.session_state[key]
