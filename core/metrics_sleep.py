from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.aggregation import compute_sleep_series
from core.charts import sleep_duration_chart, sleep_score_chart, sleep_stages_chart, to_vega_spec
from core.filters import DashboardFilters


def compute_sleep(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    sleep: pd.DataFrame = ctx.get("sleep", pd.DataFrame())
    series = [asdict(p) for p in compute_sleep_series(sleep)]

    charts: Dict[str, Any] = {}
    if series:
        charts = {
            "sleep_duration": to_vega_spec(sleep_duration_chart(series)),
            "sleep_score": to_vega_spec(sleep_score_chart(series)),
            "sleep_stages": to_vega_spec(sleep_stages_chart(series)),
        }

    return {"filters": asdict(filters), "sleep": series, "charts": charts}
