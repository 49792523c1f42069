"""Aggregation pipeline: derives the dashboard series from the three record sets.

Every function here is pure and recomputes from scratch. Inputs are pandas
DataFrames as produced by `core.data`, or any sequence of mappings keyed by the
CSV header names. Missing numeric values count as zero. Averages divide by the
number of records, not the number of records carrying the field, so an empty
input yields NaN rather than an error.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from core.data import (
    ACTIVITY_COLUMNS,
    DAILY_STATS_COLUMNS,
    SLEEP_COLUMNS,
    activity_dates,
    format_fixed,
    round_half_up,
    sort_date_keys,
)

Records = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]

UNKNOWN_TYPE = "unknown"
METERS_PER_KM = 1000
SECONDS_PER_HOUR = 3600


def as_frame(records: Records, columns: Sequence[str]) -> pd.DataFrame:
    df = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(list(records))
    for col in columns:
        if col not in df.columns:
            df[col] = None
    return df


def _numeric(series: pd.Series) -> pd.Series:
    values = series.astype(object).where(series.notna(), None)
    return pd.to_numeric(values, errors="coerce").fillna(0).astype(float)


def _scalar(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        return value
    return value.item() if isinstance(value, np.generic) else value


def _truthy(value: Any) -> bool:
    value = _scalar(value)
    return bool(value) if value is not None else False


def _number_or_zero(value: Any) -> float:
    value = _scalar(value)
    if value is None:
        return 0.0
    return float(pd.to_numeric(value, errors="coerce"))


def _zero_biased_mean(total: float, count: int) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(total, count))


# ---------------- Output types ----------------
@dataclass(frozen=True)
class SummaryStats:
    total_activities: int
    total_distance: float
    total_duration: float
    total_calories: int
    avg_heart_rate: float
    avg_steps: float

    def display(self) -> Dict[str, str]:
        """Card text: one decimal for distance and duration, whole numbers elsewhere."""
        return {
            "total_activities": str(self.total_activities),
            "total_distance": format_fixed(self.total_distance, 1),
            "total_duration": format_fixed(self.total_duration, 1),
            "total_calories": format_fixed(self.total_calories, 0),
            "avg_heart_rate": format_fixed(self.avg_heart_rate, 0),
            "avg_steps": format_fixed(self.avg_steps, 0),
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailyActivityAggregate:
    date: str
    count: int = 0
    distance: float = 0.0
    duration: float = 0.0
    calories: float = 0.0


@dataclass
class ActivityTypeAggregate:
    name: str
    count: int = 0
    distance: float = 0.0


class ActivityTypeDistribution:
    """Activity types in the order they were first seen, with lookup by name."""

    def __init__(self) -> None:
        self._order: List[str] = []
        self._lookup: Dict[str, ActivityTypeAggregate] = {}

    def add(self, name: str, count: int = 1, distance: float = 0.0) -> ActivityTypeAggregate:
        entry = self._lookup.get(name)
        if entry is None:
            entry = ActivityTypeAggregate(name=name)
            self._lookup[name] = entry
            self._order.append(name)
        entry.count += count
        entry.distance += distance
        return entry

    def keys(self) -> List[str]:
        return list(self._order)

    def __getitem__(self, name: str) -> ActivityTypeAggregate:
        return self._lookup[name]

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __iter__(self) -> Iterator[ActivityTypeAggregate]:
        return (self._lookup[name] for name in self._order)

    def __len__(self) -> int:
        return len(self._order)

    def to_records(self) -> List[Dict[str, Any]]:
        return [asdict(entry) for entry in self]


@dataclass(frozen=True)
class HeartRatePoint:
    date: Any
    resting: Any
    min: Any
    max: Any


@dataclass(frozen=True)
class SleepPoint:
    date: Any
    total_hours: str
    deep_hours: str
    light_hours: str
    rem_hours: str
    score: Any


@dataclass
class PipelineResult:
    summary: SummaryStats
    daily_activities: List[DailyActivityAggregate] = field(default_factory=list)
    activity_types: ActivityTypeDistribution = field(default_factory=ActivityTypeDistribution)
    heart_rate: List[HeartRatePoint] = field(default_factory=list)
    sleep: List[SleepPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "summary_display": self.summary.display(),
            "daily_activities": [asdict(d) for d in self.daily_activities],
            "activity_types": self.activity_types.to_records(),
            "heart_rate": [asdict(p) for p in self.heart_rate],
            "sleep": [asdict(p) for p in self.sleep],
        }


# ---------------- Operations ----------------
def compute_summary(activities: Records, daily_stats: Records) -> SummaryStats:
    acts = as_frame(activities, ACTIVITY_COLUMNS)
    days = as_frame(daily_stats, DAILY_STATS_COLUMNS)
    n_activities = int(len(acts))

    total_calories = round_half_up(_numeric(acts["calories"]).sum())
    return SummaryStats(
        total_activities=n_activities,
        total_distance=float(_numeric(acts["distance"]).sum() / METERS_PER_KM),
        total_duration=float(_numeric(acts["duration"]).sum() / SECONDS_PER_HOUR),
        total_calories=int(total_calories),
        avg_heart_rate=_zero_biased_mean(_numeric(acts["avg_hr"]).sum(), n_activities),
        avg_steps=_zero_biased_mean(_numeric(days["steps"]).sum(), int(len(days))),
    )


def compute_daily_activities(activities: Records) -> List[DailyActivityAggregate]:
    """Per-day rollup keyed by the date part of `start_time`, oldest day first.

    Activities without a start time are left out entirely.
    """
    acts = as_frame(activities, ACTIVITY_COLUMNS)
    if acts.empty:
        return []
    dates = activity_dates(acts["start_time"]).fillna("")
    keep = (dates != "").to_numpy(dtype=bool)
    if not keep.any():
        return []

    kept = acts[keep]
    frame = pd.DataFrame(
        {
            "date": dates[keep].astype(str).to_numpy(),
            "count": 1,
            "distance": (_numeric(kept["distance"]) / METERS_PER_KM).to_numpy(),
            "duration": (_numeric(kept["duration"]) / SECONDS_PER_HOUR).to_numpy(),
            "calories": _numeric(kept["calories"]).to_numpy(),
        }
    )
    grouped = frame.groupby("date", sort=False)[["count", "distance", "duration", "calories"]].sum()
    rollup = {
        str(day): DailyActivityAggregate(
            date=str(day),
            count=int(row["count"]),
            distance=float(row["distance"]),
            duration=float(row["duration"]),
            calories=float(row["calories"]),
        )
        for day, row in grouped.iterrows()
    }
    return [rollup[day] for day in sort_date_keys(rollup)]


def compute_activity_types(activities: Records) -> ActivityTypeDistribution:
    acts = as_frame(activities, ACTIVITY_COLUMNS)
    distribution = ActivityTypeDistribution()
    if acts.empty:
        return distribution

    labels = acts["activity_type"].astype(object).map(lambda v: str(v) if _truthy(v) else UNKNOWN_TYPE)
    frame = pd.DataFrame(
        {
            "name": labels.to_numpy(),
            "count": 1,
            "distance": (_numeric(acts["distance"]) / METERS_PER_KM).to_numpy(),
        }
    )
    grouped = frame.groupby("name", sort=False)[["count", "distance"]].sum()
    for name, row in grouped.iterrows():
        distribution.add(str(name), count=int(row["count"]), distance=float(row["distance"]))
    return distribution


def compute_heart_rate_series(daily_stats: Records) -> List[HeartRatePoint]:
    """Resting/min/max heart rate per day, in input order, skipping days without a resting value."""
    days = as_frame(daily_stats, DAILY_STATS_COLUMNS)
    points = [
        HeartRatePoint(
            date=_scalar(rec.get("date")),
            resting=_scalar(rec.get("resting_hr")),
            min=_scalar(rec.get("min_hr")),
            max=_scalar(rec.get("max_hr")),
        )
        for rec in days.to_dict(orient="records")
    ]
    return [p for p in points if _truthy(p.resting)]


def compute_sleep_series(sleep: Records) -> List[SleepPoint]:
    """Sleep stage durations as hour strings with one decimal; score is passed through."""
    nights = as_frame(sleep, SLEEP_COLUMNS)

    def hours(value: Any) -> str:
        return format_fixed(_number_or_zero(value) / SECONDS_PER_HOUR, 1)

    return [
        SleepPoint(
            date=_scalar(rec.get("date")),
            total_hours=hours(rec.get("total_sleep_seconds")),
            deep_hours=hours(rec.get("deep_sleep_seconds")),
            light_hours=hours(rec.get("light_sleep_seconds")),
            rem_hours=hours(rec.get("rem_sleep_seconds")),
            score=_scalar(rec.get("sleep_score")),
        )
        for rec in nights.to_dict(orient="records")
    ]


def run_pipeline(activities: Records, daily_stats: Records, sleep: Records) -> PipelineResult:
    return PipelineResult(
        summary=compute_summary(activities, daily_stats),
        daily_activities=compute_daily_activities(activities),
        activity_types=compute_activity_types(activities),
        heart_rate=compute_heart_rate_series(daily_stats),
        sleep=compute_sleep_series(sleep),
    )


def parse_hours(value: Optional[str]) -> float:
    """Turn a formatted hour string back into a number for charting."""
    return float(pd.to_numeric(value, errors="coerce")) if value is not None else float("nan")
