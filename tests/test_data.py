from __future__ import annotations

import pytest

from core.data import (
    clear_cache,
    list_states,
    load_dashboard_data,
    prepare_context,
    read_table,
    require_tables,
)
from core.errors import ResourceLoadError
from core.filters import DashboardFilters, normalize_filters


def test_read_table_keeps_strings_and_strips(tmp_path):
    path = tmp_path / "hh_income_state.csv"
    path.write_text(" state , date ,income_median\n Selangor ,2022-01-01, 8500\nPerlis,,\n")

    df = read_table(path, ["state", "date", "income_median"])

    assert list(df.columns) == ["state", "date", "income_median"]
    assert df["state"].tolist() == ["Selangor", "Perlis"]
    assert df["income_median"].tolist() == ["8500", ""]


def test_read_table_missing_file(tmp_path):
    with pytest.raises(ResourceLoadError) as info:
        read_table(tmp_path / "missing.csv")
    assert info.value.reason == "file not found"


def test_read_table_missing_columns(tmp_path):
    path = tmp_path / "lfs_state_sex.csv"
    path.write_text("state,date\nSelangor,2022-01-01\n")
    with pytest.raises(ResourceLoadError, match="sex"):
        read_table(path, ["state", "date", "sex"])


def test_load_dashboard_data(data_ctx):
    assert data_ctx["errors"] == {}
    assert data_ctx["years"] == [2019, 2022]
    assert len(data_ctx["income"]) == 7
    assert set(data_ctx["labor"]["sex"]) == {"both", "female", "male"}


def test_load_dashboard_data_is_cached(data_dir):
    clear_cache()
    first = load_dashboard_data(data_dir)
    assert load_dashboard_data(data_dir) is first
    clear_cache()


def test_missing_table_is_reported_not_raised(data_dir):
    (data_dir / "lfs_state_sex.csv").unlink()
    clear_cache()
    ctx = load_dashboard_data(data_dir)
    clear_cache()

    assert "labor" in ctx["errors"]
    assert ctx["labor"].empty
    assert not ctx["income"].empty


def test_require_tables(data_ctx):
    ctx = prepare_context(DashboardFilters(), {**data_ctx, "errors": {"labor": "file not found"}})
    require_tables(ctx, ["income"])
    with pytest.raises(ResourceLoadError, match="lfs_state_sex.csv"):
        require_tables(ctx, ["income", "labor"])


def test_prepare_context_accepts_raw_filters(data_ctx):
    ctx = prepare_context({"diverging_year": "2019", "sex": "Female"}, data_ctx)
    assert ctx["filters"] == DashboardFilters(diverging_year=2019, sex="female")


def test_list_states(data_ctx):
    assert list_states(data_ctx) == ["Johor", "Kelantan", "Kuala Lumpur", "Perlis", "Selangor"]


def test_normalize_filters_defaults_and_coercion():
    assert normalize_filters({}) == DashboardFilters()
    f = normalize_filters({"diverging_year": "abc", "sex": "unknown", "map_year_1": 2014, "map_year_2": "2099"})
    assert f.diverging_year == 2022
    assert f.sex == "both"
    assert f.map_year_1 == 2014
    assert f.map_year_2 == 2099
