from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from core.aggregation import compute_heart_rate_series
from core.charts import daily_steps_chart, heart_rate_chart, to_vega_spec
from core.filters import DashboardFilters


def daily_steps(daily_stats: pd.DataFrame) -> List[Dict[str, Any]]:
    if daily_stats.empty or "steps" not in daily_stats.columns:
        return []
    df = daily_stats[["date", "steps"]].astype(object)
    df = df.where(df.notna(), None)
    return df.to_dict(orient="records")


def compute_health(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    daily_stats: pd.DataFrame = ctx.get("daily_stats", pd.DataFrame())
    heart_rate = [asdict(p) for p in compute_heart_rate_series(daily_stats)]
    steps = daily_steps(daily_stats)

    charts: Dict[str, Any] = {}
    if heart_rate:
        charts["heart_rate"] = to_vega_spec(heart_rate_chart(heart_rate))
    if steps:
        charts["daily_steps"] = to_vega_spec(daily_steps_chart(steps))

    return {"filters": asdict(filters), "heart_rate": heart_rate, "daily_steps": steps, "charts": charts}
