"""Shared fixtures: small income and labour-force tables written as CSV."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pandas as pd
import pytest

from core.data import clear_cache, load_dashboard_data

INCOME_ROWS = [
    # state, date, income_mean, income_median, income_percentile
    ("Selangor", "2022-01-01", "10726", "8500", "90"),
    ("Perlis", "2022-01-01", "6382", "5500", "20"),
    ("Kuala Lumpur", "2022-01-01", "13325", "10000", "95"),
    ("Kelantan", "2022-01-01", "4885", "4000", "5"),
    ("Selangor", "2019-01-01", "10827", "8210", "88"),
    ("Perlis", "2019-01-01", "5476", "4594", "18"),
    ("Johor", "2019-01-01", "8013", "6427", "60"),
]

LABOR_ROWS = [
    # state, date, sex, p_rate, u_rate
    ("Selangor", "2022-01-01", "both", "74.0", "3.2"),
    ("Selangor", "2022-01-01", "female", "62.1", "3.5"),
    ("Selangor", "2022-01-01", "male", "85.3", "3.0"),
    ("Perlis", "2022-01-01", "both", "63.5", "4.1"),
    ("Perlis", "2022-01-01", "female", "50.2", "4.8"),
    ("Kuala Lumpur", "2022-01-01", "both", "72.4", "3.9"),
    ("Kuala Lumpur", "2022-01-01", "female", "60.0", "4.0"),
    ("Selangor", "2019-01-01", "both", "73.1", "3.0"),
    ("Perlis", "2019-01-01", "both", "62.9", "3.8"),
    ("Selangor", "2012-01-01", "both", "70.0", "2.9"),
    ("Perlis", "2012-01-01", "both", "60.5", "3.4"),
]


@pytest.fixture
def income_df() -> pd.DataFrame:
    return pd.DataFrame(
        INCOME_ROWS, columns=["state", "date", "income_mean", "income_median", "income_percentile"]
    )


@pytest.fixture
def labor_df() -> pd.DataFrame:
    return pd.DataFrame(LABOR_ROWS, columns=["state", "date", "sex", "p_rate", "u_rate"])


@pytest.fixture
def data_dir(tmp_path: Path, income_df: pd.DataFrame, labor_df: pd.DataFrame) -> Path:
    income_df.to_csv(tmp_path / "hh_income_state.csv", index=False)
    labor_df.to_csv(tmp_path / "lfs_state_sex.csv", index=False)
    return tmp_path


@pytest.fixture
def data_ctx(data_dir: Path) -> Dict[str, object]:
    clear_cache()
    yield load_dashboard_data(data_dir)
    clear_cache()
