"""Typed rows built from raw string records.

Tables stay as string-valued DataFrames until a view needs numbers; the
``from_record`` constructors are the only place where fields are coerced.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import pandas as pd

from core.errors import ParseError

ABOVE = "above"
BELOW = "below"
CATEGORY_LABELS = {ABOVE: "Above Average", BELOW: "Below Average"}


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def parse_float(record: Mapping[str, Any], field: str, *, required: bool = True) -> Optional[float]:
    value = record.get(field)
    if _is_blank(value):
        if required:
            raise ParseError(field, value, "missing")
        return None
    try:
        out = float(str(value).strip().replace(",", ""))
    except ValueError as exc:
        raise ParseError(field, value, "not a number") from exc
    if math.isnan(out) or math.isinf(out):
        raise ParseError(field, value, "not a finite number")
    return out


def parse_date(record: Mapping[str, Any], field: str) -> pd.Timestamp:
    value = record.get(field)
    if _is_blank(value):
        raise ParseError(field, value, "missing")
    ts = pd.to_datetime(str(value).strip(), errors="coerce")
    if pd.isna(ts):
        raise ParseError(field, value, "not a date")
    # Offsets are dropped; the calendar date is kept as written.
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def parse_text(record: Mapping[str, Any], field: str) -> str:
    value = record.get(field)
    if _is_blank(value):
        raise ParseError(field, value, "missing")
    return str(value).strip()


@dataclass(frozen=True)
class IncomeRow:
    state: str
    date: pd.Timestamp
    income_median: float
    income_mean: Optional[float] = None
    income_percentile: Optional[float] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "IncomeRow":
        return cls(
            state=parse_text(record, "state"),
            date=parse_date(record, "date"),
            income_median=parse_float(record, "income_median"),
            income_mean=parse_float(record, "income_mean", required=False),
            income_percentile=parse_float(record, "income_percentile", required=False),
        )


@dataclass(frozen=True)
class LaborRow:
    state: str
    date: pd.Timestamp
    sex: str
    p_rate: Optional[float] = None
    u_rate: Optional[float] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "LaborRow":
        return cls(
            state=parse_text(record, "state"),
            date=parse_date(record, "date"),
            sex=parse_text(record, "sex"),
            p_rate=parse_float(record, "p_rate", required=False),
            u_rate=parse_float(record, "u_rate", required=False),
        )


@dataclass(frozen=True)
class ScatterPoint:
    state: str
    income_median: float
    income_percentile: Optional[float]
    unemployment_rate: float


@dataclass(frozen=True)
class DeviationRow:
    value: float
    percent_diff: float
    category: str


@dataclass(frozen=True)
class DivergingRow:
    state: str
    median: float
    percent_diff: float
    category: str

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self.category]
