from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from core.charts import title_case, to_vega_spec
from core.config import PARTICIPATION_YEAR_RANGE
from core.data import require_tables
from core.errors import EmptyInputError
from core.filters import DashboardFilters
from core.transforms import aggregate_participation

LINE_COLOR = "#1f77b4"


def compute_trend(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Focus + context time series of summed state participation rates."""
    require_tables(ctx, ["labor"])
    labor: pd.DataFrame = ctx.get("labor", pd.DataFrame())
    start, end = PARTICIPATION_YEAR_RANGE
    totals = aggregate_participation(labor, filters.sex, start, end)
    if totals.empty:
        raise EmptyInputError(f"No participation data for sex '{filters.sex}' in {start}-{end}")

    brush = alt.selection_interval(encodings=["x"], name="brush")
    base = alt.Chart(totals).encode(
        x=alt.X("date:T", title="", scale=alt.Scale(domain=brush), axis=alt.Axis(format="%b %Y", labelFontSize=10)),
        y=alt.Y(
            "total_p_rate:Q",
            title="Sum of State Participation Rates",
            scale=alt.Scale(zero=False, nice=True),
            axis=alt.Axis(labelFontSize=12, titleFontSize=14),
        ),
    )
    focus = alt.layer(
        base.mark_area(color=LINE_COLOR, opacity=0.3),
        base.mark_line(strokeWidth=3, color=LINE_COLOR),
        base.mark_point(size=100, filled=True, color=LINE_COLOR).encode(
            tooltip=[
                alt.Tooltip("date:T", title="Date", format="%b %Y"),
                alt.Tooltip("total_p_rate:Q", title="Sum of State Rates", format=".2f"),
            ]
        ),
    ).properties(
        title=f"Cumulative State Participation Rates ({start}-{end}) - {title_case(filters.sex)}",
        width="container",
        height=300,
    )
    context = (
        alt.Chart(totals)
        .mark_area(color=LINE_COLOR, opacity=0.5)
        .encode(
            x=alt.X("date:T", axis=alt.Axis(title="Year", format="%Y", labelAngle=0, labelFontWeight="bold")),
            y=alt.Y("total_p_rate:Q", title="Cumulative Rate", axis=alt.Axis(tickCount=3, grid=False)),
        )
        .add_params(brush)
        .properties(title="Use this chart to filter data by time", width="container", height=60)
    )
    chart = alt.vconcat(focus, context).configure_view(strokeWidth=0)

    return {
        "filters": asdict(filters),
        "status": "ok",
        "sex": filters.sex,
        "points": [
            {"date": d.date().isoformat(), "total_p_rate": float(v)}
            for d, v in zip(totals["date"], totals["total_p_rate"])
        ],
        "charts": {"trend": to_vega_spec(chart)},
    }
