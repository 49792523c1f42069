import logging
from dataclasses import asdict
from typing import Dict, List, Optional

import altair as alt
import pandas as pd
import streamlit as st

from core import charts
from core.aggregation import (
    compute_activity_types,
    compute_daily_activities,
    compute_heart_rate_series,
    compute_sleep_series,
    compute_summary,
)
from core.data import DataLoadError, get_data_dir, load_dashboard_data, prepare_context
from core.filters import normalize_filters
from core.logging_config import setup_logging
from core.metrics_activities import activity_item_html, recent_activities
from core.metrics_health import daily_steps
from core.state import DashboardState, LoadStatus, Tab

alt.data_transformers.disable_max_rows()
setup_logging()
logger = logging.getLogger(__name__)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .summary-card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 14px 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .summary-card .value {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .summary-card .label {color: #6b7280;font-size: 0.9rem;}
        .activity-item {display: flex;justify-content: space-between;padding: 8px 0;border-bottom: 1px solid #f3f4f6;}
        .activity-item .details span {margin-left: 14px;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


def summary_card(col, icon: str, value: str, label: str):
    col.markdown(
        f"<div class='summary-card'><div class='label'>{icon} {label}</div><div class='value'>{value}</div></div>",
        unsafe_allow_html=True,
    )


def get_state() -> DashboardState:
    if "dashboard_state" not in st.session_state:
        st.session_state["dashboard_state"] = DashboardState()
    return st.session_state["dashboard_state"]


def set_state(state: DashboardState):
    st.session_state["dashboard_state"] = state


def chart_or_info(chart: Optional[alt.Chart], message: str):
    if chart is None:
        st.info(message)
        return
    st.altair_chart(chart, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Garmin Dashboard", layout="wide")
inject_base_styles()
st.title("🏃 Garmin Dashboard")
st.caption("Track your fitness journey")

state = get_state()
with st.spinner("Loading your Garmin data..."):
    try:
        data_ctx = load_dashboard_data()
        state = state.loaded()
    except DataLoadError as exc:
        logger.exception("Loading data failed")
        state = state.failed(str(exc))
set_state(state)

if state.status is LoadStatus.FAILED:
    st.error(f"Could not load data: {state.error}")
    st.stop()

if not data_ctx.get("files"):
    st.error(f"No files found. Place activities.csv, daily_stats.csv and sleep_data.csv in {get_data_dir()}.")
    st.stop()

# ----- Sidebar: navigation + filters -----
dates: List[str] = data_ctx.get("dates", []) or []
parsed_dates = pd.to_datetime(pd.Series(dates, dtype=object), errors="coerce", format="mixed").dropna()
with st.sidebar:
    st.markdown("### Navigate")
    tab_labels = [t.label for t in Tab]
    nav_choice = st.radio("Navigate", tab_labels, index=tab_labels.index(state.tab.label))
    state = state.select(nav_choice)
    set_state(state)

    st.markdown("---")
    st.markdown("### Filters")
    date_range = ()
    if not parsed_dates.empty:
        min_date, max_date = parsed_dates.min().date(), parsed_dates.max().date()
        date_range = st.date_input("Date range", value=(min_date, max_date), min_value=min_date, max_value=max_date)
    recent_limit = st.slider("Recent activities shown", min_value=5, max_value=50, value=10, step=5)

raw_filters: Dict[str, object] = {"recent_limit": recent_limit}
if isinstance(date_range, (list, tuple)) and len(date_range) == 2:
    raw_filters["start_date"], raw_filters["end_date"] = date_range
filters = normalize_filters(raw_filters, available_dates=dates)

ctx = prepare_context(filters, data_ctx)
activities: pd.DataFrame = ctx["activities"]
daily_stats: pd.DataFrame = ctx["daily_stats"]
sleep: pd.DataFrame = ctx["sleep"]


def render_summary_cards():
    display = compute_summary(activities, daily_stats).display()
    cols = st.columns(6)
    summary_card(cols[0], "🎯", display["total_activities"], "Total Activities")
    summary_card(cols[1], "📏", f"{display['total_distance']} km", "Total Distance")
    summary_card(cols[2], "⏱️", f"{display['total_duration']} hrs", "Total Duration")
    summary_card(cols[3], "🔥", display["total_calories"], "Total Calories")
    summary_card(cols[4], "❤️", f"{display['avg_heart_rate']} bpm", "Avg Heart Rate")
    summary_card(cols[5], "👟", display["avg_steps"], "Avg Daily Steps")


def render_overview_page():
    daily = [asdict(d) for d in compute_daily_activities(activities)]
    types = compute_activity_types(activities).to_records()
    c1, c2 = st.columns(2)
    with c1:
        st.subheader("Activities Over Time")
        chart_or_info(charts.activities_over_time_chart(daily) if daily else None, "No dated activities in range.")
    with c2:
        st.subheader("Activity Types")
        chart_or_info(charts.activity_types_chart(types) if types else None, "No activities in range.")


def render_activities_page():
    daily = [asdict(d) for d in compute_daily_activities(activities)]
    st.subheader("Distance Per Day (km)")
    chart_or_info(
        charts.daily_bar_chart(daily, "distance", "Distance (km)", "#00C49F") if daily else None,
        "No dated activities in range.",
    )
    st.subheader("Calories Burned Per Day")
    chart_or_info(
        charts.daily_bar_chart(daily, "calories", "Calories", "#FF8042") if daily else None,
        "No dated activities in range.",
    )

    st.subheader("Recent Activities")
    rows = recent_activities(activities, filters.recent_limit)
    if not rows:
        st.info("No activities in range.")
    for row in rows:
        st.markdown(activity_item_html(row), unsafe_allow_html=True)
    if not activities.empty:
        st.download_button(
            "Export CSV",
            data=activities.to_csv(index=False).encode("utf-8"),
            file_name="activities.csv",
            mime="text/csv",
        )


def render_health_page():
    heart_rate = [asdict(p) for p in compute_heart_rate_series(daily_stats)]
    steps = daily_steps(daily_stats)
    st.subheader("Heart Rate Trends")
    chart_or_info(charts.heart_rate_chart(heart_rate) if heart_rate else None, "No resting heart rate data in range.")
    st.subheader("Daily Steps")
    chart_or_info(charts.daily_steps_chart(steps) if steps else None, "No step data in range.")


def render_sleep_page():
    series = [asdict(p) for p in compute_sleep_series(sleep)]
    if not series:
        st.info("No sleep data in range.")
        return
    st.subheader("Sleep Duration (hours)")
    chart_or_info(charts.sleep_duration_chart(series), "")
    st.subheader("Sleep Score")
    chart_or_info(charts.sleep_score_chart(series), "")
    st.subheader("Sleep Stages")
    chart_or_info(charts.sleep_stages_chart(series), "")
    st.download_button(
        "Export CSV",
        data=pd.DataFrame(series).to_csv(index=False).encode("utf-8"),
        file_name="sleep_series.csv",
        mime="text/csv",
    )


PAGES = {
    Tab.OVERVIEW: render_overview_page,
    Tab.ACTIVITIES: render_activities_page,
    Tab.HEALTH: render_health_page,
    Tab.SLEEP: render_sleep_page,
}

render_summary_cards()
st.markdown("---")
PAGES[state.tab]()
