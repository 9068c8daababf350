from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import altair as alt
import pandas as pd

from core.charts import highlight_stroke, records_frame, to_vega_spec
from core.config import SCATTER_YEAR
from core.data import require_tables
from core.filters import DashboardFilters
from core.records import CATEGORY_LABELS
from core.selection import compute_highlight
from core.transforms import build_diverging_dataset, build_scatter_dataset

SCATTER_COLUMNS = ["state", "income_median", "income_percentile", "unemployment_rate"]
DIVERGING_COLUMNS = ["state", "median", "percent_diff", "category", "label"]


def _with_highlight(df: pd.DataFrame, selection: Optional[str]) -> pd.DataFrame:
    return df.assign(highlight=[compute_highlight(s, selection).value for s in df["state"]])


def _scatter_chart(df: pd.DataFrame) -> alt.LayerChart:
    x = alt.X("income_median:Q", title="Median Household Income (RM)", scale=alt.Scale(zero=False))
    y = alt.Y("unemployment_rate:Q", title="Unemployment Rate (%)", scale=alt.Scale(zero=False))
    points = (
        alt.Chart(df)
        .mark_circle(size=140, opacity=0.85, color="#3498db")
        .encode(
            x=x,
            y=y,
            tooltip=[
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip("income_median:Q", title="Median Income", format=",.0f"),
                alt.Tooltip("income_percentile:Q", title="Income Percentile", format=".1f"),
                alt.Tooltip("unemployment_rate:Q", title="Unemployment Rate (%)", format=".1f"),
            ],
            **highlight_stroke(),
        )
    )
    labels = (
        alt.Chart(df)
        .mark_text(align="left", dx=9, fontSize=11)
        .encode(x=x, y=y, text="state:N")
        .transform_filter(alt.datum.highlight != "none")
    )
    return alt.layer(points, labels).properties(
        title=f"Median Income vs Unemployment ({SCATTER_YEAR})", width=380, height=380
    )


def _diverging_chart(df: pd.DataFrame, year: int) -> alt.Chart:
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("percent_diff:Q", title="% Difference from National Average", axis=alt.Axis(format=".0f")),
            y=alt.Y("state:N", title=None, sort="-x"),
            color=alt.Color(
                "label:N",
                title=None,
                scale=alt.Scale(domain=list(CATEGORY_LABELS.values()), range=["#2e86c1", "#e74c3c"]),
                legend=alt.Legend(orient="bottom"),
            ),
            tooltip=[
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip("median:Q", title="Median Income", format=",.0f"),
                alt.Tooltip("percent_diff:Q", title="% Difference", format="+.2f"),
            ],
            **highlight_stroke(),
        )
        .properties(title=f"Median Income vs National Average ({year})", width=380, height=380)
    )


def compute_combined(filters: DashboardFilters, ctx: Dict[str, Any], *, selection: Optional[str] = None) -> Dict[str, Any]:
    require_tables(ctx, ["income", "labor"])
    income: pd.DataFrame = ctx.get("income", pd.DataFrame())
    labor: pd.DataFrame = ctx.get("labor", pd.DataFrame())

    diverging = build_diverging_dataset(income, filters.diverging_year)
    scatter = build_scatter_dataset(income, labor, SCATTER_YEAR)

    scatter_df = _with_highlight(records_frame(scatter, SCATTER_COLUMNS), selection)
    diverging_df = _with_highlight(records_frame(diverging.rows, DIVERGING_COLUMNS), selection)

    combined = (
        alt.hconcat(_scatter_chart(scatter_df), _diverging_chart(diverging_df, diverging.year))
        .resolve_scale(color="independent")
        .configure_view(strokeWidth=0)
    )
    return {
        "filters": asdict(filters),
        "status": "ok",
        "selection": selection,
        "scatter_year": SCATTER_YEAR,
        "diverging_year": diverging.year,
        "national_mean": diverging.mean,
        "scatter": scatter_df.to_dict(orient="records"),
        "diverging": diverging_df.to_dict(orient="records"),
        "charts": {"combined": to_vega_spec(combined)},
    }
