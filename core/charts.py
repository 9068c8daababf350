from __future__ import annotations

from typing import Any, Dict, Iterable, List

import altair as alt
import pandas as pd

from core.config import HIGHLIGHT_STROKE, HIGHLIGHT_STROKE_WIDTH, MAP_DIMMED_OPACITY
from core.selection import HighlightStyle

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def title_case(value: str) -> str:
    return value[:1].upper() + value[1:]


def _is_highlighted():
    return alt.datum.highlight != HighlightStyle.NONE.value


def highlight_stroke() -> Dict[str, Any]:
    """Stroke encodings outlining every datum whose ``highlight`` is not 'none'."""
    return {
        "stroke": alt.condition(_is_highlighted(), alt.value(HIGHLIGHT_STROKE), alt.value("transparent")),
        "strokeWidth": alt.condition(_is_highlighted(), alt.value(HIGHLIGHT_STROKE_WIDTH), alt.value(0)),
    }


def focus_opacity() -> Dict[str, Any]:
    return alt.condition(alt.datum.in_focus, alt.value(1), alt.value(MAP_DIMMED_OPACITY))


def records_frame(rows: Iterable[object], columns: List[str]) -> pd.DataFrame:
    """DataFrame from dataclass rows, empty frames keep their schema."""
    data = [{c: getattr(r, c) for c in columns} for r in rows]
    return pd.DataFrame(data, columns=columns)
