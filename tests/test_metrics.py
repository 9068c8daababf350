from __future__ import annotations

import json

import pytest

from core.data import prepare_context
from core.errors import EmptyInputError, NoDataForYearError, ResourceLoadError
from core.filters import DashboardFilters
from core.metrics_combined import compute_combined
from core.metrics_heatmap import compute_heatmap
from core.metrics_maps import compute_maps
from core.metrics_trend import compute_trend


@pytest.fixture
def ctx(data_ctx):
    return prepare_context(DashboardFilters(), data_ctx)


def _highlights(rows):
    return {r["state"]: r["highlight"] for r in rows}


def test_combined_default_highlights(ctx):
    payload = compute_combined(DashboardFilters(), ctx)

    assert payload["status"] == "ok"
    assert payload["national_mean"] == pytest.approx(7000)
    assert [r["state"] for r in payload["scatter"]] == ["Selangor", "Perlis", "Kuala Lumpur"]
    assert _highlights(payload["diverging"]) == {
        "Selangor": "none",
        "Perlis": "none",
        "Kuala Lumpur": "default",
        "Kelantan": "default",
    }
    spec = payload["charts"]["combined"]
    assert len(spec["hconcat"]) == 2
    json.dumps(spec)


def test_combined_selection_highlights_only_selected(ctx):
    payload = compute_combined(DashboardFilters(), ctx, selection="Perlis")
    assert _highlights(payload["scatter"]) == {
        "Selangor": "none",
        "Perlis": "selected",
        "Kuala Lumpur": "none",
    }


def test_combined_uses_diverging_year_and_fixed_scatter_year(ctx):
    payload = compute_combined(DashboardFilters(diverging_year=2019), ctx)
    assert payload["diverging_year"] == 2019
    assert payload["scatter_year"] == 2022
    assert {r["state"] for r in payload["diverging"]} == {"Selangor", "Perlis", "Johor"}


def test_combined_unknown_year(ctx):
    with pytest.raises(NoDataForYearError):
        compute_combined(DashboardFilters(diverging_year=2016), ctx)


def test_combined_requires_both_tables(ctx):
    ctx = {**ctx, "errors": {"labor": "file not found"}}
    with pytest.raises(ResourceLoadError):
        compute_combined(DashboardFilters(), ctx)


@pytest.mark.parametrize(
    "sex, domain",
    [("both", [60, 65, 70, 75]), ("female", [45, 50, 55, 60])],
)
def test_heatmap_threshold_scale_follows_sex(ctx, sex, domain):
    payload = compute_heatmap(DashboardFilters(sex=sex), ctx)
    spec = payload["charts"]["heatmap"]
    assert spec["mark"]["type"] == "rect"
    assert spec["encoding"]["color"]["scale"]["type"] == "threshold"
    assert spec["encoding"]["color"]["scale"]["domain"] == domain
    assert sex.capitalize() in json.dumps(spec["title"])


def test_heatmap_without_rows_for_sex(ctx):
    with pytest.raises(EmptyInputError):
        compute_heatmap(DashboardFilters(sex="male"), {**ctx, "labor": ctx["labor"][ctx["labor"]["sex"] != "male"]})


def test_trend_has_brush_and_points(ctx):
    payload = compute_trend(DashboardFilters(), ctx)
    assert [p["date"] for p in payload["points"]] == ["2012-01-01", "2019-01-01", "2022-01-01"]
    spec = payload["charts"]["trend"]
    assert len(spec["vconcat"]) == 2
    assert '"brush"' in json.dumps(spec)


def test_maps_render_available_years_and_report_missing_ones(ctx):
    payload = compute_maps(DashboardFilters(map_year_1=2012, map_year_2=2022), ctx)

    assert set(payload["charts"]) == {"unemployment_year_1", "income_year_2", "unemployment_year_2"}
    missing = payload["unavailable"]["income_year_1"]
    assert missing["year"] == 2012
    assert missing["available_years"] == [2019, 2022]
    assert payload["focused_states"] == []


def test_maps_focus_follows_selection(ctx):
    payload = compute_maps(DashboardFilters(map_year_1=2019, map_year_2=2022), ctx, selection="Perlis")
    assert payload["status"] == "ok"
    assert payload["focused_states"] == ["Perlis"]
    assert len(payload["charts"]) == 4
    assert "mercator" in json.dumps(payload["charts"]["income_year_2"])


def test_only_the_trend_brush_is_an_in_chart_param(ctx):
    combined = json.dumps(compute_combined(DashboardFilters(), ctx)["charts"]["combined"])
    maps = json.dumps(compute_maps(DashboardFilters(map_year_1=2019), ctx)["charts"])
    assert '"params"' not in combined
    assert '"params"' not in maps
    assert '"brush"' in json.dumps(compute_trend(DashboardFilters(), ctx)["charts"]["trend"])
