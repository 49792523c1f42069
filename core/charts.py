from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import altair as alt
import pandas as pd

from core.aggregation import parse_hours

alt.data_transformers.disable_max_rows()

COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884D8", "#82CA9D"]
CHART_HEIGHT = 300

Rows = Sequence[Mapping[str, Any]]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _date_axis() -> alt.X:
    return alt.X("date:O", title="Date", sort=None, axis=alt.Axis(labelAngle=-45, grid=False))


def _y_axis(field: str, title: str, **kwargs: Any) -> alt.Y:
    return alt.Y(field, title=title, axis=alt.Axis(gridDash=[3, 3], domain=False, ticks=False), **kwargs)


def activities_over_time_chart(daily: Rows) -> alt.Chart:
    df = pd.DataFrame(list(daily))
    return (
        alt.Chart(df)
        .mark_area(line={"color": "#8884d8"}, color="#8884d8", opacity=0.6)
        .encode(
            x=_date_axis(),
            y=_y_axis("count:Q", "Activities"),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip("count:Q", title="Activities")],
        )
        .properties(height=CHART_HEIGHT)
    )


def activity_types_chart(types: Rows) -> alt.Chart:
    df = pd.DataFrame(list(types))
    names: List[str] = df["name"].tolist() if "name" in df.columns else []
    return (
        alt.Chart(df)
        .mark_arc(outerRadius=80)
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color("name:N", title="Type", sort=names, scale=alt.Scale(domain=names, range=COLORS)),
            tooltip=[
                alt.Tooltip("name:N", title="Type"),
                alt.Tooltip("count:Q", title="Activities"),
                alt.Tooltip("distance:Q", title="Distance (km)", format=",.1f"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )


def daily_bar_chart(daily: Rows, field: str, title: str, color: str) -> alt.Chart:
    df = pd.DataFrame(list(daily))
    return (
        alt.Chart(df)
        .mark_bar(color=color)
        .encode(
            x=_date_axis(),
            y=_y_axis(f"{field}:Q", title),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip(f"{field}:Q", title=title, format=",.1f")],
        )
        .properties(height=CHART_HEIGHT)
    )


def heart_rate_chart(points: Rows) -> alt.Chart:
    df = pd.DataFrame(list(points))
    long_df = df.melt(id_vars="date", value_vars=["resting", "max"], var_name="metric", value_name="bpm")
    long_df["metric"] = long_df["metric"].map({"resting": "Resting HR", "max": "Max HR"})
    hover = alt.selection_point(fields=["metric"], on="mouseover", empty="all")
    return (
        alt.Chart(long_df)
        .mark_line(point={"filled": True})
        .encode(
            x=_date_axis(),
            y=_y_axis("bpm:Q", "BPM"),
            color=alt.Color("metric:N", title="Metric", scale=alt.Scale(range=["#8884d8", "#ff7300"])),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip("metric:N"), alt.Tooltip("bpm:Q", title="BPM")],
        )
        .add_params(hover)
        .properties(height=CHART_HEIGHT)
    )


def daily_steps_chart(steps: Rows) -> alt.Chart:
    df = pd.DataFrame(list(steps))
    return (
        alt.Chart(df)
        .mark_area(line={"color": "#82ca9d"}, color="#82ca9d", opacity=0.6)
        .encode(
            x=_date_axis(),
            y=_y_axis("steps:Q", "Steps"),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip("steps:Q", title="Steps", format=",")],
        )
        .properties(height=CHART_HEIGHT)
    )


def _sleep_frame(points: Rows) -> pd.DataFrame:
    df = pd.DataFrame(list(points))
    for col in ["total_hours", "deep_hours", "light_hours", "rem_hours"]:
        if col in df.columns:
            df[col] = df[col].map(parse_hours)
    return df


def sleep_duration_chart(points: Rows) -> alt.Chart:
    df = _sleep_frame(points)
    return (
        alt.Chart(df)
        .mark_line(point={"filled": True}, color="#8884d8")
        .encode(
            x=_date_axis(),
            y=_y_axis("total_hours:Q", "Total Sleep (h)"),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip("total_hours:Q", title="Hours", format=".1f")],
        )
        .properties(height=CHART_HEIGHT)
    )


def sleep_score_chart(points: Rows) -> alt.Chart:
    df = _sleep_frame(points)
    return (
        alt.Chart(df)
        .mark_line(point={"filled": True}, color="#00C49F")
        .encode(
            x=_date_axis(),
            y=_y_axis("score:Q", "Sleep Score", scale=alt.Scale(domain=[0, 100])),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip("score:Q", title="Score")],
        )
        .properties(height=CHART_HEIGHT)
    )


def sleep_stages_chart(points: Rows) -> alt.Chart:
    df = _sleep_frame(points)
    stages = {"deep_hours": "Deep", "light_hours": "Light", "rem_hours": "REM"}
    long_df = df.melt(id_vars="date", value_vars=list(stages), var_name="stage", value_name="hours")
    long_df["stage"] = long_df["stage"].map(stages)
    long_df["stage_order"] = long_df["stage"].map({label: i for i, label in enumerate(stages.values())})
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=_date_axis(),
            y=_y_axis("sum(hours):Q", "Hours", stack="zero"),
            color=alt.Color(
                "stage:N",
                title="Stage",
                sort=list(stages.values()),
                scale=alt.Scale(domain=list(stages.values()), range=COLORS[:3]),
            ),
            order=alt.Order("stage_order:Q"),
            tooltip=[
                alt.Tooltip("date:N", title="Date"),
                alt.Tooltip("stage:N", title="Stage"),
                alt.Tooltip("hours:Q", title="Hours", format=".1f"),
            ],
        )
        .properties(height=CHART_HEIGHT)
    )
