from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

import altair as alt
import pandas as pd

from core.charts import focus_opacity, to_vega_spec
from core.config import DEFAULT_SEX, GEO_STATE_PROPERTY, resolve_geo_source
from core.data import require_tables
from core.errors import NoDataForYearError
from core.filters import DashboardFilters
from core.selection import is_in_focus
from core.transforms import available_years, state_values

# (table, value field, title prefix, colour scheme, sex filter)
MAP_LAYERS: Dict[str, Tuple[str, str, str, str, Optional[str]]] = {
    "income": ("income", "income_median", "Median Household Income", "blues", None),
    "unemployment": ("labor", "u_rate", "Unemployment Rate", "oranges", DEFAULT_SEX),
}


def _choropleth(values: pd.DataFrame, value_field: str, title: str, scheme: str) -> alt.LayerChart:
    url, feature = resolve_geo_source()
    geo = alt.topo_feature(url, feature)

    outline = alt.Chart(geo).mark_geoshape(fill="#eeeeee", stroke="white")
    filled = (
        alt.Chart(geo)
        .mark_geoshape(stroke="white", strokeOpacity=0.5)
        .transform_lookup(
            lookup=GEO_STATE_PROPERTY,
            from_=alt.LookupData(values, "state", ["state", value_field, "in_focus"]),
        )
        .transform_filter("isValid(datum.state)")
        .encode(
            color=alt.Color(f"{value_field}:Q", title=None, scale=alt.Scale(scheme=scheme)),
            opacity=focus_opacity(),
            tooltip=[
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip(f"{value_field}:Q", title=title, format=",.1f"),
            ],
        )
    )
    return alt.layer(outline, filled).project(type="mercator").properties(title=title, width="container", height=260)


def compute_maps(filters: DashboardFilters, ctx: Dict[str, Any], *, selection: Optional[str] = None) -> Dict[str, Any]:
    """Income and unemployment choropleths for the two selected years."""
    require_tables(ctx, ["income", "labor"])
    charts: Dict[str, Any] = {}
    unavailable: Dict[str, Any] = {}
    focused: List[str] = []

    for slot, year in (("year_1", filters.map_year_1), ("year_2", filters.map_year_2)):
        for kind, (table_name, value_field, title, scheme, sex) in MAP_LAYERS.items():
            key = f"{kind}_{slot}"
            table: pd.DataFrame = ctx.get(table_name, pd.DataFrame())
            values = state_values(table, year, value_field, sex=sex)
            if values.empty:
                err = NoDataForYearError(year, available_years(table))
                unavailable[key] = {"year": year, "message": err.user_message(), "available_years": err.available_years}
                continue
            values = values.assign(in_focus=[is_in_focus(s, selection) for s in values["state"]])
            focused.extend(s for s, f in zip(values["state"], values["in_focus"]) if f and selection is not None)
            charts[key] = to_vega_spec(
                _choropleth(values, value_field, f"{title} ({year})", scheme).configure_view(strokeWidth=0)
            )

    return {
        "filters": asdict(filters),
        "status": "ok" if charts else "unavailable",
        "selection": selection,
        "years": {"year_1": filters.map_year_1, "year_2": filters.map_year_2},
        "focused_states": sorted(set(focused)),
        "unavailable": unavailable,
        "charts": charts,
    }
