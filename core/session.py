"""Dashboard session: filters, selection and the single update function.

A session owns the only ``SelectionCoordinator`` its views read from. Every
control change arrives as an event; ``dispatch`` applies it and returns the
recomputed views. Failures stay scoped to the view that produced them.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict, replace
from typing import Any, Callable, Dict, Optional

from core.data import load_dashboard_data, prepare_context
from core.errors import EmptyInputError, NoDataForYearError, ResourceLoadError
from core.filters import DashboardFilters, normalize_filters
from core.metrics_combined import compute_combined
from core.metrics_heatmap import compute_heatmap
from core.metrics_maps import compute_maps
from core.metrics_trend import compute_trend
from core.selection import (
    CategoryChanged,
    DashboardEvent,
    EntityClicked,
    SelectionCleared,
    SelectionCoordinator,
    YearChanged,
)

logger = logging.getLogger(__name__)

VIEWS = ("combined", "heatmap", "trend", "maps")


def compute_view(name: str, filters: DashboardFilters, ctx: Dict[str, Any], *, selection: Optional[str] = None) -> Dict[str, Any]:
    """Compute one view, turning its failures into a status payload."""
    if name not in VIEWS:
        raise ValueError(f"unknown view: {name}")
    try:
        if name == "combined":
            return compute_combined(filters, ctx, selection=selection)
        if name == "heatmap":
            return compute_heatmap(filters, ctx)
        if name == "trend":
            return compute_trend(filters, ctx)
        if name == "maps":
            return compute_maps(filters, ctx, selection=selection)
    except NoDataForYearError as exc:
        return {
            "filters": asdict(filters),
            "status": "unavailable",
            "message": exc.user_message(),
            "year": exc.year,
            "available_years": exc.available_years,
            "charts": {},
        }
    except EmptyInputError as exc:
        return {"filters": asdict(filters), "status": "unavailable", "message": str(exc), "charts": {}}
    except ResourceLoadError as exc:
        logger.warning("view %s degraded: %s", name, exc)
        return {"filters": asdict(filters), "status": "error", "message": str(exc), "charts": {}}
    except Exception as exc:
        logger.exception("view %s failed", name)
        return {"filters": asdict(filters), "status": "error", "message": str(exc), "charts": {}}


class DashboardSession:
    def __init__(
        self,
        data_ctx: Optional[Dict[str, Any]] = None,
        filters: Optional[DashboardFilters] = None,
        *,
        loader: Callable[[], Dict[str, Any]] = load_dashboard_data,
    ) -> None:
        self._data_ctx = data_ctx
        self._loader = loader
        self.filters = filters or DashboardFilters()
        self.selection = SelectionCoordinator()
        self._payload: Optional[Dict[str, Any]] = None
        self.selection.subscribe(self._invalidate)

    @property
    def data_ctx(self) -> Dict[str, Any]:
        # Tables are loaded on first use and kept for the session.
        if self._data_ctx is None:
            self._data_ctx = self._loader()
        return self._data_ctx

    def _invalidate(self, _selected: Optional[str] = None) -> None:
        self._payload = None

    def apply(self, event: DashboardEvent) -> None:
        if isinstance(event, YearChanged):
            if event.view == "diverging":
                self.filters = replace(self.filters, diverging_year=int(event.year))
            elif event.view == "map_year_1":
                self.filters = replace(self.filters, map_year_1=int(event.year))
            elif event.view == "map_year_2":
                self.filters = replace(self.filters, map_year_2=int(event.year))
            else:
                raise ValueError(f"unknown year control: {event.view}")
        elif isinstance(event, CategoryChanged):
            self.filters = replace(self.filters, sex=normalize_filters({"sex": event.sex}).sex)
        elif isinstance(event, EntityClicked):
            self.selection.toggle(event.state)
        elif isinstance(event, SelectionCleared):
            self.selection.clear()
        else:
            raise TypeError(f"unsupported event: {event!r}")
        if not isinstance(event, (EntityClicked, SelectionCleared)):
            self._invalidate()

    def render(self) -> Dict[str, Any]:
        """Current payload; recomputed only after the filters or the selection change."""
        if self._payload is None:
            ctx = prepare_context(self.filters, self.data_ctx)
            selection = self.selection.current()
            self._payload = {
                "filters": asdict(self.filters),
                "selection": selection,
                "views": {name: compute_view(name, self.filters, ctx, selection=selection) for name in VIEWS},
            }
        return self._payload

    def dispatch(self, event: DashboardEvent) -> Dict[str, Any]:
        self.apply(event)
        return self.render()


class SessionStore:
    """Per-client sessions; each session is used by one request at a time.

    Sessions are created by ``dispatch`` only. Reads of an unknown id do not
    allocate one.
    """

    def __init__(self, factory: Callable[[], DashboardSession] = DashboardSession) -> None:
        self._factory = factory
        self._sessions: Dict[str, DashboardSession] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _entry(self, session_id: str) -> tuple[DashboardSession, threading.Lock]:
        with self._guard:
            if session_id not in self._sessions:
                self._sessions[session_id] = self._factory()
                self._locks[session_id] = threading.Lock()
            return self._sessions[session_id], self._locks[session_id]

    def _lookup(self, session_id: str) -> Optional[tuple[DashboardSession, threading.Lock]]:
        with self._guard:
            if session_id not in self._sessions:
                return None
            return self._sessions[session_id], self._locks[session_id]

    def dispatch(self, session_id: str, event: DashboardEvent) -> Dict[str, Any]:
        session, lock = self._entry(session_id)
        with lock:
            return session.dispatch(event)

    def render(self, session_id: str) -> Optional[Dict[str, Any]]:
        entry = self._lookup(session_id)
        if entry is None:
            return None
        session, lock = entry
        with lock:
            return session.render()

    def selection(self, session_id: str) -> Optional[str]:
        entry = self._lookup(session_id)
        if entry is None:
            return None
        session, lock = entry
        with lock:
            return session.selection.current()

    def __contains__(self, session_id: object) -> bool:
        with self._guard:
            return session_id in self._sessions

    def drop(self, session_id: str) -> None:
        with self._guard:
            self._sessions.pop(session_id, None)
            self._locks.pop(session_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)
