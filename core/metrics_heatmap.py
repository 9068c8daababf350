from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from core.charts import title_case, to_vega_spec
from core.config import HEATMAP_COLORS, HEATMAP_THRESHOLDS, PARTICIPATION_YEAR_RANGE
from core.data import require_tables
from core.errors import EmptyInputError
from core.filters import DashboardFilters
from core.transforms import participation_matrix


def compute_heatmap(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    require_tables(ctx, ["labor"])
    labor: pd.DataFrame = ctx.get("labor", pd.DataFrame())
    start, end = PARTICIPATION_YEAR_RANGE
    matrix = participation_matrix(labor, filters.sex, start, end)
    if matrix.empty:
        raise EmptyInputError(f"No participation data for sex '{filters.sex}' in {start}-{end}")

    heatmap = (
        alt.Chart(matrix)
        .mark_rect(stroke="white", strokeWidth=1)
        .encode(
            x=alt.X("year:O", title="Year", axis=alt.Axis(labelAngle=0, labelFontSize=12, titleFontSize=14)),
            y=alt.Y(
                "state:N",
                title="State",
                sort=alt.EncodingSortField(field="p_rate", op="mean", order="descending"),
                axis=alt.Axis(labelFontSize=11, titleFontSize=14),
            ),
            color=alt.Color(
                "p_rate:Q",
                title="Participation Rate (%)",
                scale=alt.Scale(type="threshold", domain=HEATMAP_THRESHOLDS[filters.sex], range=HEATMAP_COLORS),
                legend=alt.Legend(direction="horizontal", orient="bottom", gradientLength=300),
            ),
            tooltip=[
                alt.Tooltip("state:N", title="State"),
                alt.Tooltip("year:O", title="Year"),
                alt.Tooltip("sex:N", title="Sex"),
                alt.Tooltip("p_rate:Q", title="Participation Rate (%)", format=".2f"),
            ],
        )
        .properties(
            title=f"Participation Rate by State ({start}-{end}) - {title_case(filters.sex)}",
            width="container",
            height=400,
        )
        .configure_view(strokeWidth=0)
    )
    return {
        "filters": asdict(filters),
        "status": "ok",
        "sex": filters.sex,
        "thresholds": HEATMAP_THRESHOLDS[filters.sex],
        "cells": int(len(matrix)),
        "charts": {"heatmap": to_vega_spec(heatmap)},
    }
