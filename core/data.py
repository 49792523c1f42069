from __future__ import annotations

import logging
import math
import os
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from core.filters import DashboardFilters, normalize_filters

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "garmin_data"
DATA_DIR_ENV = "GARMIN_DATA_DIR"

ACTIVITIES_FILE = "activities.csv"
DAILY_STATS_FILE = "daily_stats.csv"
SLEEP_FILE = "sleep_data.csv"
SOURCE_FILES = (ACTIVITIES_FILE, DAILY_STATS_FILE, SLEEP_FILE)

ACTIVITY_COLUMNS = [
    "activity_id",
    "start_time",
    "activity_type",
    "activity_name",
    "distance",
    "duration",
    "calories",
    "avg_hr",
]
ACTIVITY_NUMERIC_COLUMNS = ["distance", "duration", "calories", "avg_hr"]

DAILY_STATS_COLUMNS = ["date", "steps", "resting_hr", "min_hr", "max_hr"]
DAILY_STATS_NUMERIC_COLUMNS = ["steps", "resting_hr", "min_hr", "max_hr"]

SLEEP_COLUMNS = [
    "date",
    "total_sleep_seconds",
    "deep_sleep_seconds",
    "light_sleep_seconds",
    "rem_sleep_seconds",
    "sleep_score",
]
SLEEP_NUMERIC_COLUMNS = SLEEP_COLUMNS[1:]


class DataLoadError(RuntimeError):
    """A source CSV exists but could not be parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Could not read {path}: {reason}")
        self.path = path
        self.reason = reason


def get_data_dir() -> Path:
    override = os.environ.get(DATA_DIR_ENV, "").strip()
    return Path(override) if override else DATA_DIR


def get_source_files(data_dir: Optional[Path] = None) -> List[Path]:
    data_dir = data_dir or get_data_dir()
    return [data_dir / name for name in SOURCE_FILES if (data_dir / name).exists()]


def file_signature(files: List[Path]) -> Tuple[Tuple[str, float], ...]:
    return tuple((f.name, f.stat().st_mtime) for f in files)


# ---------------- Cleaning helpers ----------------
def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


def ensure_columns(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col not in df.columns:
            df[col] = pd.NA
    return df


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def integerize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    """Cast numeric columns holding only whole numbers to nullable Int64."""
    for col in cols:
        if col in df.columns:
            values = df[col].dropna()
            if not values.empty and (values % 1 == 0).all():
                df[col] = df[col].astype("Int64")
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            series = series.replace({"nan": pd.NA, "None": pd.NA, "null": pd.NA, "": pd.NA})
            df[col] = series
    return df


def activity_dates(start_times: pd.Series) -> pd.Series:
    """Date portion of a "date time" start timestamp (text before the first space)."""
    return start_times.astype("string").str.split(" ", n=1).str[0]


def parse_date_series(values: pd.Series) -> pd.Series:
    return pd.to_datetime(values.astype(object), errors="coerce", format="mixed").dt.normalize()


def sort_date_keys(keys: Iterable[str]) -> List[str]:
    """Sort date strings chronologically; unparseable keys go last, by string."""

    def _key(value: str):
        parsed = pd.to_datetime(value, errors="coerce")
        if pd.isna(parsed):
            return (1, value)
        return (0, parsed.tz_localize(None) if parsed.tzinfo else parsed, value)

    return sorted(keys, key=_key)


# ---------------- Formatting ----------------
def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def format_fixed(value: object, decimals: int = 0) -> str:
    """Render a number with a fixed count of decimals, rounding half up."""
    if value is None or pd.isna(value):
        return "nan"
    number = float(value)
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    return f"{round_half_up(number, decimals):.{decimals}f}"


# ---------------- Loaders ----------------
def empty_frame(columns: List[str], numeric_cols: Iterable[str]) -> pd.DataFrame:
    numeric = set(numeric_cols)
    return pd.DataFrame({c: pd.Series(dtype="float64" if c in numeric else "string") for c in columns})


def read_source_csv(path: Path, columns: List[str], numeric_cols: List[str]) -> pd.DataFrame:
    if not path.exists():
        logger.warning("Data file not found: %s", path)
        return empty_frame(columns, numeric_cols)
    try:
        df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        logger.warning("Data file is empty: %s", path)
        return empty_frame(columns, numeric_cols)
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataLoadError(path, str(exc)) from exc

    df.columns = [str(c).strip() for c in df.columns]
    df = drop_duplicate_columns(df)
    df = ensure_columns(df, columns)
    df = coerce_str_safe(df, [c for c in columns if c not in numeric_cols])
    df = numericize(df, numeric_cols)
    return df.reset_index(drop=True)


def _keep_rows(df: pd.DataFrame, keep: pd.Series, label: str) -> pd.DataFrame:
    dropped = int((~keep).sum())
    if dropped:
        logger.info("Dropped %d %s row(s) missing required fields", dropped, label)
    return df[keep].reset_index(drop=True)


def load_activities(path: Optional[Path] = None) -> pd.DataFrame:
    """Activities with a usable id. Blank, zero and "false" ids are dropped."""
    path = path or get_data_dir() / ACTIVITIES_FILE
    df = read_source_csv(path, ACTIVITY_COLUMNS, ACTIVITY_NUMERIC_COLUMNS)
    ids = df["activity_id"]
    zero = pd.to_numeric(ids, errors="coerce").eq(0).fillna(False)
    false_text = ids.str.lower().eq("false").fillna(False)
    keep = (ids.notna() & ~zero & ~false_text).astype(bool)
    return _keep_rows(df, keep, "activity")


def load_daily_stats(path: Optional[Path] = None) -> pd.DataFrame:
    path = path or get_data_dir() / DAILY_STATS_FILE
    df = read_source_csv(path, DAILY_STATS_COLUMNS, DAILY_STATS_NUMERIC_COLUMNS)
    return _keep_rows(df, df["date"].notna(), "daily stats")


def load_sleep(path: Optional[Path] = None) -> pd.DataFrame:
    path = path or get_data_dir() / SLEEP_FILE
    df = read_source_csv(path, SLEEP_COLUMNS, SLEEP_NUMERIC_COLUMNS)
    # A zero total counts as missing.
    keep = df["date"].notna() & df["total_sleep_seconds"].fillna(0).ne(0)
    df = _keep_rows(df, keep, "sleep")
    return integerize(df, ["sleep_score"])


def collect_dates(activities: pd.DataFrame, daily_stats: pd.DataFrame, sleep: pd.DataFrame) -> List[str]:
    keys = set(activity_dates(activities["start_time"]).dropna().tolist()) if "start_time" in activities.columns else set()
    for df in (daily_stats, sleep):
        if "date" in df.columns:
            keys.update(df["date"].dropna().astype(str).tolist())
    keys.discard("")
    return sort_date_keys(keys)


# ---------------- Public API (Streamlit + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(data_dir: str, files_sig: Tuple[Tuple[str, float], ...]) -> Dict[str, object]:
    base = Path(data_dir)
    activities = load_activities(base / ACTIVITIES_FILE)
    daily_stats = load_daily_stats(base / DAILY_STATS_FILE)
    sleep = load_sleep(base / SLEEP_FILE)
    logger.info(
        "Loaded %d activities, %d daily stats, %d sleep records from %s",
        len(activities),
        len(daily_stats),
        len(sleep),
        data_dir,
    )
    return {
        "files": [name for name, _ in files_sig],
        "dates": collect_dates(activities, daily_stats, sleep),
        "activities": activities,
        "daily_stats": daily_stats,
        "sleep": sleep,
    }


def load_dashboard_data() -> Dict[str, object]:
    data_dir = get_data_dir()
    files = get_source_files(data_dir)
    if not files:
        logger.warning("No data files found in %s", data_dir)
        return {
            "files": [],
            "dates": [],
            "activities": empty_frame(ACTIVITY_COLUMNS, ACTIVITY_NUMERIC_COLUMNS),
            "daily_stats": empty_frame(DAILY_STATS_COLUMNS, DAILY_STATS_NUMERIC_COLUMNS),
            "sleep": empty_frame(SLEEP_COLUMNS, SLEEP_NUMERIC_COLUMNS),
        }
    return _load_dashboard_data_cached(str(data_dir), file_signature(files))


def clear_cache() -> None:
    _load_dashboard_data_cached.cache_clear()


def filter_by_date(df: pd.DataFrame, keys: pd.Series, filters: DashboardFilters) -> pd.DataFrame:
    if df.empty or not filters.has_date_range:
        return df
    parsed = parse_date_series(keys)
    mask = parsed.notna()
    if filters.start_date is not None:
        mask &= parsed >= pd.Timestamp(filters.start_date)
    if filters.end_date is not None:
        mask &= parsed <= pd.Timestamp(filters.end_date)
    return df[mask.fillna(False).to_numpy(dtype=bool)].reset_index(drop=True)


def prepare_context(filters: dict | DashboardFilters | None, data_ctx: Dict[str, object]) -> Dict[str, object]:
    filt = filters if isinstance(filters, DashboardFilters) else normalize_filters(filters)

    activities: pd.DataFrame = data_ctx.get("activities", pd.DataFrame()).copy()
    daily_stats: pd.DataFrame = data_ctx.get("daily_stats", pd.DataFrame()).copy()
    sleep: pd.DataFrame = data_ctx.get("sleep", pd.DataFrame()).copy()

    if filt.has_date_range:
        if "start_time" in activities.columns:
            activities = filter_by_date(activities, activity_dates(activities["start_time"]), filt)
        if "date" in daily_stats.columns:
            daily_stats = filter_by_date(daily_stats, daily_stats["date"], filt)
        if "date" in sleep.columns:
            sleep = filter_by_date(sleep, sleep["date"], filt)

    return {
        "filters": filt,
        "files": data_ctx.get("files", []),
        "dates": data_ctx.get("dates", []),
        "activities": activities,
        "daily_stats": daily_stats,
        "sleep": sleep,
    }
