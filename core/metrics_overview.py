from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregation import compute_activity_types, compute_daily_activities, compute_summary
from core.charts import activities_over_time_chart, activity_types_chart, to_vega_spec
from core.filters import DashboardFilters


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    activities: pd.DataFrame = ctx.get("activities", pd.DataFrame())
    daily_stats: pd.DataFrame = ctx.get("daily_stats", pd.DataFrame())

    summary = compute_summary(activities, daily_stats)
    daily = [asdict(d) for d in compute_daily_activities(activities)]
    types = compute_activity_types(activities).to_records()

    charts: Dict[str, Any] = {}
    if daily:
        charts["activities_over_time"] = to_vega_spec(activities_over_time_chart(daily))
    if types:
        charts["activity_types"] = to_vega_spec(activity_types_chart(types))

    return {
        "filters": asdict(filters),
        "summary": summary.to_dict(),
        "summary_display": summary.display(),
        "daily_activities": daily,
        "activity_types": types,
        "charts": charts,
    }
