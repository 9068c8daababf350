from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from core.config import DEFAULT_SEX
from core.errors import EmptyInputError, NoDataForYearError, ParseError, ZeroMeanError
from core.records import (
    ABOVE,
    BELOW,
    DeviationRow,
    DivergingRow,
    IncomeRow,
    LaborRow,
    ScatterPoint,
    parse_date,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deviation:
    mean: float
    per_row: List[DeviationRow] = field(default_factory=list)


@dataclass(frozen=True)
class DivergingDataset:
    year: int
    mean: float
    rows: List[DivergingRow] = field(default_factory=list)


def parse_year(value: object) -> Optional[int]:
    """Calendar year of a date string, or None when it does not parse."""
    try:
        return int(parse_date({"date": value}, "date").year)
    except ParseError:
        return None


def _year_series(table: pd.DataFrame, year_field: str) -> pd.Series:
    if year_field not in table.columns:
        return pd.Series([None] * len(table), index=table.index, dtype=object)
    return table[year_field].map(parse_year)


def filter_by_year(table: pd.DataFrame, year_field: str, target_year: int) -> pd.DataFrame:
    if table.empty:
        return table.copy()
    years = _year_series(table, year_field)
    mask = years.map(lambda y: y is not None and y == int(target_year)).astype(bool)
    return table[mask].reset_index(drop=True)


def filter_by_category(table: pd.DataFrame, field_name: str, value: str) -> pd.DataFrame:
    if table.empty or field_name not in table.columns:
        return table.iloc[0:0].copy()
    mask = table[field_name].map(lambda v: isinstance(v, str) and v == value).astype(bool)
    return table[mask].reset_index(drop=True)


def join_by_key(left: pd.DataFrame, right: pd.DataFrame, key_field: str) -> pd.DataFrame:
    """Left join keeping every left record once, paired with the first right match.

    The right table is reduced to one record per key before a hash merge, so the
    join is linear in the combined size. Colliding right-side columns get a
    ``_right`` suffix and ``matched`` flags whether a right record was found.
    """
    lookup = right.drop_duplicates(subset=[key_field], keep="first")
    renamed = {c: f"{c}_right" for c in lookup.columns if c != key_field and c in left.columns}
    lookup = lookup.rename(columns=renamed).assign(matched=True)
    out = left.merge(lookup, on=key_field, how="left", sort=False)
    out["matched"] = out["matched"].eq(True)
    return out.reset_index(drop=True)


def compute_deviation(values: Iterable[float]) -> Deviation:
    series = pd.Series([float(v) for v in values], dtype=float)
    if series.empty:
        raise EmptyInputError("cannot compute a mean over zero values")
    mean = float(series.mean())
    if mean == 0:
        raise ZeroMeanError("percent deviation is undefined for a zero mean")
    pct = (series - mean) / mean * 100
    per_row = [
        DeviationRow(value=float(v), percent_diff=float(p), category=ABOVE if p >= 0 else BELOW)
        for v, p in zip(series, pct)
    ]
    return Deviation(mean=mean, per_row=per_row)


def available_years(table: pd.DataFrame, year_field: str = "date") -> List[int]:
    if table.empty:
        return []
    return sorted({int(y) for y in _year_series(table, year_field).dropna()})


def build_scatter_dataset(income: pd.DataFrame, labor: pd.DataFrame, year: int) -> List[ScatterPoint]:
    income_year = filter_by_year(income, "date", year)
    labor_year = filter_by_category(filter_by_year(labor, "date", year), "sex", DEFAULT_SEX)
    joined = join_by_key(income_year, labor_year, "state")
    joined = joined[joined["matched"]]

    points: List[ScatterPoint] = []
    for record in joined.to_dict(orient="records"):
        try:
            income_row = IncomeRow.from_record(record)
            labor_row = LaborRow.from_record({**record, "date": record.get("date_right")})
            if labor_row.u_rate is None:
                raise ParseError("u_rate", record.get("u_rate"), "missing")
        except ParseError as exc:
            logger.debug("dropping scatter row for %s: %s", record.get("state"), exc)
            continue
        points.append(
            ScatterPoint(
                state=income_row.state,
                income_median=income_row.income_median,
                income_percentile=income_row.income_percentile,
                unemployment_rate=labor_row.u_rate,
            )
        )
    return points


def build_diverging_dataset(income: pd.DataFrame, year: int) -> DivergingDataset:
    rows = filter_by_year(income, "date", year)
    if rows.empty:
        raise NoDataForYearError(year, available_years(income))

    parsed: List[Tuple[str, float]] = []
    for record in rows.to_dict(orient="records"):
        try:
            row = IncomeRow.from_record(record)
            parsed.append((row.state, row.income_median))
        except ParseError as exc:
            logger.debug("dropping income row for %s: %s", record.get("state"), exc)

    deviation = compute_deviation(median for _, median in parsed)
    out = [
        DivergingRow(state=state, median=d.value, percent_diff=d.percent_diff, category=d.category)
        for (state, _), d in zip(parsed, deviation.per_row)
    ]
    return DivergingDataset(year=int(year), mean=deviation.mean, rows=out)


def _labor_rows(labor: pd.DataFrame, sex: str) -> List[LaborRow]:
    rows: List[LaborRow] = []
    for record in filter_by_category(labor, "sex", sex).to_dict(orient="records"):
        try:
            rows.append(LaborRow.from_record(record))
        except ParseError as exc:
            logger.debug("dropping labour row for %s: %s", record.get("state"), exc)
    return rows


def _numeric_in_range(labor: pd.DataFrame, sex: str, start_year: int, end_year: int, value_field: str) -> pd.DataFrame:
    rows = [
        r
        for r in _labor_rows(labor, sex)
        if start_year <= r.date.year <= end_year and getattr(r, value_field) is not None
    ]
    if not rows:
        return pd.DataFrame(columns=["state", "date", "year", value_field])
    return pd.DataFrame(
        {
            "state": [r.state for r in rows],
            "date": pd.to_datetime([r.date for r in rows]),
            "year": [int(r.date.year) for r in rows],
            value_field: [float(getattr(r, value_field)) for r in rows],
        }
    )


def aggregate_participation(labor: pd.DataFrame, sex: str, start_year: int, end_year: int) -> pd.DataFrame:
    """Sum of state participation rates per survey date."""
    df = _numeric_in_range(labor, sex, start_year, end_year, "p_rate")
    if df.empty:
        return pd.DataFrame(columns=["date", "total_p_rate"])
    return (
        df.groupby("date")["p_rate"]
        .sum()
        .reset_index(name="total_p_rate")
        .sort_values("date")
        .reset_index(drop=True)
    )


def participation_matrix(labor: pd.DataFrame, sex: str, start_year: int, end_year: int) -> pd.DataFrame:
    df = _numeric_in_range(labor, sex, start_year, end_year, "p_rate")
    if df.empty:
        return pd.DataFrame(columns=["state", "year", "sex", "p_rate"])
    out = df.groupby(["state", "year"])["p_rate"].mean().reset_index()
    out["sex"] = sex
    return out.sort_values(["state", "year"]).reset_index(drop=True)


def state_values(table: pd.DataFrame, year: int, value_field: str, *, sex: Optional[str] = None) -> pd.DataFrame:
    """One numeric value per state for a year, first record per state wins."""
    df = filter_by_year(table, "date", year)
    if sex is not None:
        df = filter_by_category(df, "sex", sex)
    if df.empty or value_field not in df.columns:
        return pd.DataFrame(columns=["state", value_field])
    row_type = LaborRow if "sex" in df.columns else IncomeRow
    out: List[Tuple[str, float]] = []
    for record in df.drop_duplicates(subset=["state"], keep="first").to_dict(orient="records"):
        try:
            row = row_type.from_record(record)
        except ParseError as exc:
            logger.debug("dropping %s row for %s: %s", value_field, record.get("state"), exc)
            continue
        value = getattr(row, value_field)
        if value is not None:
            out.append((row.state, float(value)))
    return pd.DataFrame(out, columns=["state", value_field])
