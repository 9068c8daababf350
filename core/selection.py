from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Literal, Optional, Union

from core.config import DEFAULT_HIGHLIGHTS

logger = logging.getLogger(__name__)

SelectionListener = Callable[[Optional[str]], None]


class HighlightStyle(str, Enum):
    DEFAULT = "default"
    SELECTED = "selected"
    NONE = "none"


class SelectionCoordinator:
    """Owns the selected state for one dashboard session.

    ``toggle`` is the only mutation path: toggling the current value clears it,
    toggling anything else selects it. Listeners are told about every change.
    """

    def __init__(self) -> None:
        self._selected: Optional[str] = None
        self._listeners: List[SelectionListener] = []

    def current(self) -> Optional[str]:
        return self._selected

    def toggle(self, candidate: Optional[str]) -> Optional[str]:
        previous = self._selected
        self._selected = None if candidate == previous else candidate
        if self._selected != previous:
            logger.debug("selection changed: %r -> %r", previous, self._selected)
            for listener in list(self._listeners):
                listener(self._selected)
        return self._selected

    def clear(self) -> Optional[str]:
        if self._selected is None:
            return None
        return self.toggle(self._selected)

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe


def compute_highlight(entity_key: Optional[str], selection: Optional[str]) -> HighlightStyle:
    if selection is None:
        return HighlightStyle.DEFAULT if entity_key in DEFAULT_HIGHLIGHTS else HighlightStyle.NONE
    return HighlightStyle.SELECTED if entity_key == selection else HighlightStyle.NONE


def is_in_focus(entity_key: Optional[str], selection: Optional[str]) -> bool:
    return selection is None or entity_key == selection


# ---------------- Events ----------------
YearView = Literal["diverging", "map_year_1", "map_year_2"]


@dataclass(frozen=True)
class YearChanged:
    view: YearView
    year: int


@dataclass(frozen=True)
class CategoryChanged:
    sex: str


@dataclass(frozen=True)
class EntityClicked:
    # None means the chart background was clicked.
    state: Optional[str]


@dataclass(frozen=True)
class SelectionCleared:
    pass


DashboardEvent = Union[YearChanged, CategoryChanged, EntityClicked, SelectionCleared]
