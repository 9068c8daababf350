from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import (
    CategoryChangedModel,
    DashboardFiltersModel,
    EntityClickedModel,
    EventModel,
    EventRequest,
    MetaListResponse,
    MetaYearsResponse,
    SelectionClearedModel,
    SelectionResponse,
    YearChangedModel,
)
from core.config import AVAILABLE_YEARS, SEX_OPTIONS
from core.data import SOURCE_FILES, list_states, load_dashboard_data, prepare_context
from core.filters import DashboardFilters, normalize_filters
from core.selection import CategoryChanged, DashboardEvent, EntityClicked, SelectionCleared, YearChanged
from core.session import VIEWS, SessionStore, compute_view

app = FastAPI(title="State Statistics Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionStore()


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    return normalize_filters(model.model_dump())


def _event_from_model(model: EventModel) -> DashboardEvent:
    if isinstance(model, YearChangedModel):
        return YearChanged(view=model.view, year=model.year)
    if isinstance(model, CategoryChangedModel):
        return CategoryChanged(sex=model.sex)
    if isinstance(model, EntityClickedModel):
        return EntityClicked(state=model.state or None)
    if isinstance(model, SelectionClearedModel):
        return SelectionCleared()
    raise TypeError(f"unsupported event: {model!r}")


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _view(name: str, filters: DashboardFiltersModel, selected_state: Optional[str]) -> JSONResponse:
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_view(name, f, ctx, selection=selected_state or None))
    except Exception as exc:
        logger.exception("%s failed", name)
        return _error(exc)


@app.get("/meta/years", response_model=MetaYearsResponse)
def meta_years():
    try:
        data_ctx = load_dashboard_data()
        years = [int(y) for y in data_ctx.get("years", []) or []]
        return _json({"years": years, "selectable": AVAILABLE_YEARS})
    except Exception as exc:
        logger.exception("meta_years failed")
        return _error(exc)


@app.get("/meta/states", response_model=MetaListResponse)
def meta_states():
    try:
        return _json({"values": list_states(load_dashboard_data())})
    except Exception as exc:
        logger.exception("meta_states failed")
        return _error(exc)


@app.get("/meta/sexes", response_model=MetaListResponse)
def meta_sexes():
    return _json({"values": SEX_OPTIONS})


@app.post("/dashboard")
def dashboard(filters: DashboardFiltersModel, selected_state: Optional[str] = Query(default=None)):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        selection = selected_state or None
        views = {name: compute_view(name, f, ctx, selection=selection) for name in VIEWS}
        return _json({"filters": f, "selection": selection, "views": views})
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(exc)


@app.post("/combined")
def combined(filters: DashboardFiltersModel, selected_state: Optional[str] = Query(default=None)):
    return _view("combined", filters, selected_state)


@app.post("/heatmap")
def heatmap(filters: DashboardFiltersModel):
    return _view("heatmap", filters, None)


@app.post("/trend")
def trend(filters: DashboardFiltersModel):
    return _view("trend", filters, None)


@app.post("/maps")
def maps(filters: DashboardFiltersModel, selected_state: Optional[str] = Query(default=None)):
    return _view("maps", filters, selected_state)


@app.get("/sessions/{session_id}")
def session_render(session_id: str):
    try:
        payload = sessions.render(session_id)
        if payload is None:
            return JSONResponse(status_code=404, content={"error": f"unknown session: {session_id}", "type": "KeyError"})
        return _json({"session_id": session_id, **payload})
    except Exception as exc:
        logger.exception("session_render failed")
        return _error(exc)


@app.post("/sessions/{session_id}/events")
def session_event(session_id: str, request: EventRequest):
    try:
        event = _event_from_model(request.event)
        return _json({"session_id": session_id, **sessions.dispatch(session_id, event)})
    except Exception as exc:
        logger.exception("session_event failed")
        return _error(exc)


@app.get("/sessions/{session_id}/selection", response_model=SelectionResponse)
def session_selection(session_id: str):
    return _json({"session_id": session_id, "selected": sessions.selection(session_id)})


@app.delete("/sessions/{session_id}")
def session_drop(session_id: str):
    sessions.drop(session_id)
    return _json({"session_id": session_id, "dropped": True})


@app.get("/export/{table}")
def export_table(table: str):
    if table not in SOURCE_FILES:
        return JSONResponse(status_code=404, content={"error": f"unknown table: {table}", "type": "KeyError"})
    export_df = load_dashboard_data().get(table)
    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    filename = SOURCE_FILES[table]
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
