import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from core.config import AVAILABLE_YEARS, SEX_OPTIONS
from core.data import list_states, load_dashboard_data
from core.selection import CategoryChanged, EntityClicked, SelectionCleared, YearChanged
from core.session import DashboardSession

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .unavailable {text-align: center;padding: 60px 40px;background-color: #f9f9f9;border-radius: 8px;border: 2px solid #ddd;}
        .unavailable h2 {color: #666;font-size: 28px;margin-bottom: 12px;}
        .unavailable p {color: #999;font-size: 16px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(filters: Dict[str, Any], selection: Optional[str]) -> str:
    chips = [
        f"Diverging year: {filters['diverging_year']}",
        f"Sex: {filters['sex'].capitalize()}",
        f"Maps: {filters['map_year_1']} vs {filters['map_year_2']}",
        f"Selected: {selection}" if selection else "Selected: none",
    ]
    return "".join(f"<span class='chip'>{txt}</span>" for txt in chips)


def render_page_header(title: str, breadcrumb: str, filter_summary_html: str):
    inject_base_styles()
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )
    st.markdown(f"<div class='chip-row'>{filter_summary_html}</div>", unsafe_allow_html=True)


def render_view_status(view: Dict[str, Any]) -> bool:
    """Show a placeholder for a degraded view. Returns True when the view can render."""
    status = view.get("status")
    if status == "ok":
        return True
    if status == "unavailable":
        years = view.get("available_years")
        years_html = f"<p>Available years: {', '.join(str(y) for y in years)}</p>" if years else ""
        st.markdown(
            f"<div class='unavailable'><h2>Data Not Available</h2><p>{view.get('message', '')}</p>{years_html}</div>",
            unsafe_allow_html=True,
        )
        return False
    st.error(f"Error loading view: {view.get('message', 'unknown error')}")
    return False


def render_chart(spec: Optional[Dict[str, Any]]):
    if spec:
        st.vega_lite_chart(spec, use_container_width=True)


def render_state_tags(states: List[str], selection: Optional[str]) -> Optional[object]:
    """Clickable state tags plus a clear action. Returns the event to dispatch, if any."""
    event = None
    cols = st.columns(6)
    for idx, state in enumerate(states):
        label = f"● {state}" if state == selection else state
        if cols[idx % len(cols)].button(label, key=f"state_tag_{state}"):
            event = EntityClicked(state=state)
    if st.button("Clear selection", disabled=selection is None):
        event = SelectionCleared()
    return event


def _year_index(year: int, fallback: int) -> int:
    if year in AVAILABLE_YEARS:
        return AVAILABLE_YEARS.index(year)
    return fallback % len(AVAILABLE_YEARS)


# ---------- UI setup ----------
st.set_page_config(page_title="Malaysia State Statistics Dashboard", layout="wide")
inject_base_styles()
st.title("Malaysia State Statistics Dashboard")
st.caption("Household income and labour-force indicators by state.")

data_ctx = load_dashboard_data()
for table, reason in (data_ctx.get("errors") or {}).items():
    st.warning(f"Could not load the {table} table ({reason}). Views that depend on it are disabled.")

if "dashboard_session" not in st.session_state:
    st.session_state["dashboard_session"] = DashboardSession(data_ctx)
session: DashboardSession = st.session_state["dashboard_session"]

# ----- Sidebar: navigation + controls -----
with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Income & Unemployment", "Participation", "State Maps"], index=0)

    st.markdown("---")
    st.markdown("### Controls")
    diverging_year = st.selectbox("Diverging chart year", AVAILABLE_YEARS, index=_year_index(session.filters.diverging_year, -1))
    sex = st.selectbox("Sex", SEX_OPTIONS, index=SEX_OPTIONS.index(session.filters.sex), format_func=str.capitalize)
    map_year_1 = st.selectbox("Map year (left)", AVAILABLE_YEARS, index=_year_index(session.filters.map_year_1, 0))
    map_year_2 = st.selectbox("Map year (right)", AVAILABLE_YEARS, index=_year_index(session.filters.map_year_2, -1))

# Each changed control becomes one event on the session.
if diverging_year != session.filters.diverging_year:
    session.apply(YearChanged(view="diverging", year=diverging_year))
if sex != session.filters.sex:
    session.apply(CategoryChanged(sex=sex))
if map_year_1 != session.filters.map_year_1:
    session.apply(YearChanged(view="map_year_1", year=map_year_1))
if map_year_2 != session.filters.map_year_2:
    session.apply(YearChanged(view="map_year_2", year=map_year_2))


# ----- Page renderers -----

def render_selection_card():
    with card("Select a state"):
        event = render_state_tags(list_states(session.data_ctx), session.selection.current())
        if event is not None:
            session.apply(event)
            st.rerun()


def render_combined_page(payload: Dict[str, Any]):
    view = payload["views"]["combined"]
    with card("Median income vs unemployment, and deviation from the national average"):
        if render_view_status(view):
            render_chart(view["charts"].get("combined"))
            mean = view.get("national_mean")
            if mean is not None:
                st.caption(f"National average median income ({view['diverging_year']}): RM {mean:,.0f}")
    if view.get("status") == "ok" and view.get("diverging"):
        with st.expander("Diverging data"):
            st.dataframe(pd.DataFrame(view["diverging"]), hide_index=True, use_container_width=True)
    render_selection_card()


def render_participation_page(payload: Dict[str, Any]):
    cols = st.columns(2)
    with cols[0]:
        with card("Participation rate heatmap"):
            view = payload["views"]["heatmap"]
            if render_view_status(view):
                render_chart(view["charts"].get("heatmap"))
    with cols[1]:
        with card("Cumulative participation trend"):
            view = payload["views"]["trend"]
            if render_view_status(view):
                render_chart(view["charts"].get("trend"))


def render_maps_page(payload: Dict[str, Any]):
    view = payload["views"]["maps"]
    if view.get("status") == "error":
        render_view_status(view)
        return
    charts = view.get("charts", {})
    unavailable = view.get("unavailable", {})
    for slot in ("year_1", "year_2"):
        year = view["years"][slot]
        cols = st.columns(2)
        for col, kind, label in ((cols[0], "income", "Income"), (cols[1], "unemployment", "Unemployment")):
            key = f"{kind}_{slot}"
            with col:
                with card(f"{label} ({year})"):
                    if key in charts:
                        render_chart(charts[key])
                    else:
                        render_view_status({"status": "unavailable", **unavailable.get(key, {})})

    render_selection_card()


payload = session.render()
render_page_header(nav_choice, f"Home / {nav_choice}", format_filter_summary(payload["filters"], payload["selection"]))

if nav_choice == "Income & Unemployment":
    render_combined_page(payload)
elif nav_choice == "Participation":
    render_participation_page(payload)
else:
    render_maps_page(payload)
