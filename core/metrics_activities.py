from __future__ import annotations

from dataclasses import asdict
import html
from typing import Any, Dict, List

import pandas as pd

from core.aggregation import compute_daily_activities
from core.charts import daily_bar_chart, to_vega_spec
from core.data import format_fixed
from core.filters import DashboardFilters


def _number(value: Any) -> float:
    if value is None or pd.isna(value):
        return 0.0
    return float(value)


def _text(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value)


def recent_activities(activities: pd.DataFrame, limit: int) -> List[Dict[str, Any]]:
    """First `limit` activities in file order, shaped for the activity list."""
    if activities.empty:
        return []
    rows = []
    for rec in activities.head(limit).to_dict(orient="records"):
        name = _text(rec.get("activity_name")) or _text(rec.get("activity_type"))
        calories = rec.get("calories")
        rows.append(
            {
                "activity_id": _text(rec.get("activity_id")),
                "start_time": _text(rec.get("start_time")) or None,
                "name": name,
                "activity_type": _text(rec.get("activity_type")) or None,
                "distance_km": format_fixed(_number(rec.get("distance")) / 1000, 2),
                "duration_min": format_fixed(_number(rec.get("duration")) / 60, 0),
                "calories": None if calories is None or pd.isna(calories) else calories,
            }
        )
    return rows


def activity_item_html(row: Dict[str, Any]) -> str:
    """One recent-activity row as HTML. Text from the source file is escaped."""
    calories = "" if row.get("calories") is None else f"{row['calories']:.0f}"
    return (
        f"<div class='activity-item'><div>{html.escape(row.get('name') or '')}</div><div class='details'>"
        f"<span>{row['distance_km']} km</span><span>{row['duration_min']} min</span><span>{calories} cal</span>"
        "</div></div>"
    )


def compute_activities(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    activities: pd.DataFrame = ctx.get("activities", pd.DataFrame())
    daily = [asdict(d) for d in compute_daily_activities(activities)]

    charts: Dict[str, Any] = {}
    if daily:
        charts["distance_per_day"] = to_vega_spec(daily_bar_chart(daily, "distance", "Distance (km)", "#00C49F"))
        charts["calories_per_day"] = to_vega_spec(daily_bar_chart(daily, "calories", "Calories", "#FF8042"))

    return {
        "filters": asdict(filters),
        "daily_activities": daily,
        "recent": recent_activities(activities, filters.recent_limit),
        "charts": charts,
    }
