from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from core.config import INCOME_FILENAME, LABOR_FILENAME, resolve_data_dir
from core.errors import ResourceLoadError
from core.filters import DashboardFilters, normalize_filters
from core.transforms import available_years

logger = logging.getLogger(__name__)

SOURCE_FILES: Dict[str, str] = {
    "income": INCOME_FILENAME,
    "labor": LABOR_FILENAME,
}

REQUIRED_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "income": ("state", "date", "income_median"),
    "labor": ("state", "date", "sex"),
}

FileSignature = Tuple[Tuple[str, str, Optional[float]], ...]


def get_source_files(data_dir: Optional[Path] = None) -> Dict[str, Path]:
    base = Path(data_dir) if data_dir is not None else resolve_data_dir()
    return {name: base / filename for name, filename in SOURCE_FILES.items()}


def file_signature(files: Dict[str, Path]) -> FileSignature:
    sig = []
    for name, path in sorted(files.items()):
        mtime = path.stat().st_mtime if path.exists() else None
        sig.append((name, str(path), mtime))
    return tuple(sig)


def strip_values(df: pd.DataFrame) -> pd.DataFrame:
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def read_table(path: Path, required_columns: Iterable[str] = ()) -> pd.DataFrame:
    """Read a CSV as a table of string records.

    Every value is kept as a string; coercion happens where a view needs it.
    """
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except FileNotFoundError as exc:
        raise ResourceLoadError(path.name, "file not found") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as exc:
        raise ResourceLoadError(path.name, str(exc)) from exc

    df = strip_values(df)
    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ResourceLoadError(path.name, f"missing columns: {', '.join(missing)}")
    return df


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: FileSignature) -> Dict[str, object]:
    tables: Dict[str, pd.DataFrame] = {}
    errors: Dict[str, str] = {}
    for name, path_str, _ in files_sig:
        path = Path(path_str)
        try:
            tables[name] = read_table(path, REQUIRED_COLUMNS.get(name, ()))
            logger.info("loaded %s (%d rows) from %s", name, len(tables[name]), path)
        except ResourceLoadError as exc:
            logger.warning("%s", exc)
            tables[name] = pd.DataFrame(columns=list(REQUIRED_COLUMNS.get(name, ())))
            errors[name] = exc.reason

    income = tables.get("income", pd.DataFrame())
    return {
        "files": [Path(p).name for _, p, _ in files_sig],
        "years": available_years(income),
        "income": income,
        "labor": tables.get("labor", pd.DataFrame()),
        "errors": errors,
    }


def load_dashboard_data(data_dir: Optional[Path] = None) -> Dict[str, object]:
    files = get_source_files(data_dir)
    return _load_dashboard_data_cached(file_signature(files))


def clear_cache() -> None:
    _load_dashboard_data_cached.cache_clear()


def prepare_context(filters: dict | DashboardFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)
    return {
        "filters": filt,
        "income": data_ctx.get("income", pd.DataFrame()).copy(),
        "labor": data_ctx.get("labor", pd.DataFrame()).copy(),
        "years": list(data_ctx.get("years", []) or []),
        "errors": dict(data_ctx.get("errors", {}) or {}),
    }


def require_tables(ctx: Dict[str, object], names: Iterable[str]) -> None:
    """Raise the load failure of the first unavailable table a view depends on."""
    errors: Dict[str, str] = ctx.get("errors", {}) or {}
    for name in names:
        if name in errors:
            raise ResourceLoadError(SOURCE_FILES.get(name, name), errors[name])


def list_states(data_ctx: Dict[str, object]) -> List[str]:
    states = set()
    for name in ("income", "labor"):
        df = data_ctx.get(name, pd.DataFrame())
        if not df.empty and "state" in df.columns:
            states.update(s for s in df["state"].tolist() if s)
    return sorted(states)
