from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Tuple

# Where the CSV bundle lives. Override with DASHBOARD_DATA_DIR.
ENV_DATA_DIR = "DASHBOARD_DATA_DIR"
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1]

INCOME_FILENAME = "hh_income_state.csv"
LABOR_FILENAME = "lfs_state_sex.csv"

# TopoJSON served alongside the dashboard for the choropleth maps.
ENV_GEO_URL = "DASHBOARD_GEO_URL"
ENV_GEO_FEATURE = "DASHBOARD_GEO_FEATURE"
DEFAULT_GEO_URL = "malaysia_states.topojson"
DEFAULT_GEO_FEATURE = "states"
GEO_STATE_PROPERTY = "properties.state"

AVAILABLE_YEARS: List[int] = [2012, 2014, 2016, 2019, 2022]
DEFAULT_YEAR = 2022
SCATTER_YEAR = 2022
DEFAULT_MAP_YEARS: Tuple[int, int] = (2012, 2022)

SEX_OPTIONS: List[str] = ["both", "female", "male"]
DEFAULT_SEX = "both"

# Heatmap and trend cover the full survey window.
PARTICIPATION_YEAR_RANGE: Tuple[int, int] = (2012, 2022)

# States outlined on the combined chart when nothing is selected.
DEFAULT_HIGHLIGHTS: Tuple[str, ...] = ("Kuala Lumpur", "Kelantan")

HEATMAP_COLORS: List[str] = ["#DBF1FF", "#85c1e9", "#3498db", "#21618c", "#154360"]
HEATMAP_THRESHOLDS: Dict[str, List[float]] = {
    "both": [60, 65, 70, 75],
    "female": [45, 50, 55, 60],
    "male": [75, 80, 85, 90],
}

HIGHLIGHT_STROKE = "#000000"
HIGHLIGHT_STROKE_WIDTH = 3
MAP_DIMMED_OPACITY = 0.2


def resolve_data_dir() -> Path:
    """Data directory from the environment, falling back to the repo root."""
    env_path = os.getenv(ENV_DATA_DIR, "").strip()
    if env_path:
        return Path(env_path)
    return DEFAULT_DATA_DIR


def resolve_geo_source() -> Tuple[str, str]:
    url = os.getenv(ENV_GEO_URL, "").strip() or DEFAULT_GEO_URL
    feature = os.getenv(ENV_GEO_FEATURE, "").strip() or DEFAULT_GEO_FEATURE
    return url, feature
