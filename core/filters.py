from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.config import DEFAULT_MAP_YEARS, DEFAULT_SEX, DEFAULT_YEAR, SEX_OPTIONS


@dataclass(frozen=True)
class DashboardFilters:
    diverging_year: int = DEFAULT_YEAR
    sex: str = DEFAULT_SEX
    map_year_1: int = DEFAULT_MAP_YEARS[0]
    map_year_2: int = DEFAULT_MAP_YEARS[1]


def _as_int(value: object, default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except Exception:
        return default


def _as_sex(value: Optional[object]) -> str:
    s = str(value or "").strip().lower()
    return s if s in SEX_OPTIONS else DEFAULT_SEX


def normalize_filters(raw: dict) -> DashboardFilters:
    """Coerce raw UI/API input into filters.

    Years are not clamped to the known survey years: an unknown year is passed
    through so the affected view can report it as unavailable.
    """
    raw = raw or {}
    return DashboardFilters(
        diverging_year=_as_int(raw.get("diverging_year"), DEFAULT_YEAR),
        sex=_as_sex(raw.get("sex")),
        map_year_1=_as_int(raw.get("map_year_1"), DEFAULT_MAP_YEARS[0]),
        map_year_2=_as_int(raw.get("map_year_2"), DEFAULT_MAP_YEARS[1]),
    )
