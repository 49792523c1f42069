import math

import pandas as pd
import pytest

from core.aggregation import (
    compute_activity_types,
    compute_daily_activities,
    compute_heart_rate_series,
    compute_sleep_series,
    compute_summary,
    run_pipeline,
)


def test_summary_totals_and_display():
    activities = [
        {"distance": 1000, "duration": 3600, "calories": 100, "avg_hr": 120},
        {"distance": 2000, "duration": 1800, "calories": 50, "avg_hr": 140},
    ]
    summary = compute_summary(activities, [{"date": "2024-01-01", "steps": 9000}])
    display = summary.display()

    assert summary.total_activities == 2
    assert display["total_distance"] == "3.0"
    assert display["total_duration"] == "1.5"
    assert display["total_calories"] == "150"
    assert display["avg_heart_rate"] == "130"
    assert display["avg_steps"] == "9000"


def test_summary_missing_values_bias_averages_toward_zero():
    activities = [{"avg_hr": 150}, {"avg_hr": None}, {}]
    days = [{"date": "2024-01-01", "steps": 9000}, {"date": "2024-01-02"}]
    summary = compute_summary(activities, days)
    assert summary.avg_heart_rate == pytest.approx(50.0)
    assert summary.avg_steps == pytest.approx(4500.0)
    assert summary.total_distance == 0.0


def test_summary_rounds_calories_half_up():
    summary = compute_summary([{"calories": 100.5}, {"calories": 0}], [])
    assert summary.total_calories == 101


def test_summary_on_empty_inputs_is_not_finite():
    summary = compute_summary([], [])
    assert summary.total_activities == 0
    assert summary.total_calories == 0
    assert math.isnan(summary.avg_heart_rate)
    assert math.isnan(summary.avg_steps)
    assert summary.display()["avg_heart_rate"] == "nan"


def test_summary_distance_matches_daily_rollup_total():
    activities = [
        {"start_time": "2024-01-01 07:00:00", "distance": 1234.5},
        {"start_time": "2024-01-02 07:00:00", "distance": 4321},
        {"start_time": "2024-01-02 19:00:00", "distance": None},
        {"start_time": "2024-01-03 07:00:00", "distance": 10000},
    ]
    summary = compute_summary(activities, [])
    rollup_total = sum(d.distance for d in compute_daily_activities(activities))
    assert summary.total_distance == pytest.approx(rollup_total)
    assert summary.total_distance == pytest.approx(15.5555)


def test_daily_rollup_groups_same_date():
    activities = [
        {"start_time": "2024-01-05 07:00:00", "distance": 1000, "duration": 1800, "calories": 100},
        {"start_time": "2024-01-05 18:30:00", "distance": 2500, "duration": 1800, "calories": None},
    ]
    daily = compute_daily_activities(activities)
    assert len(daily) == 1
    assert daily[0].date == "2024-01-05"
    assert daily[0].count == 2
    assert daily[0].distance == pytest.approx(3.5)
    assert daily[0].duration == pytest.approx(1.0)
    assert daily[0].calories == pytest.approx(100)


def test_daily_rollup_skips_activities_without_start_time():
    activities = [
        {"activity_id": "1", "distance": 1000},
        {"activity_id": "2", "start_time": "", "distance": 1000},
        {"activity_id": "3", "start_time": "2024-01-05 07:00:00", "distance": 500},
    ]
    daily = compute_daily_activities(activities)
    assert [d.date for d in daily] == ["2024-01-05"]
    assert daily[0].count == 1
    assert compute_daily_activities([{"activity_id": "1", "distance": 1000}]) == []


def test_daily_rollup_sorts_dates_chronologically():
    activities = [
        {"start_time": "2024-1-10 08:00:00"},
        {"start_time": "2024-1-9 08:00:00"},
        {"start_time": "2023-12-31 08:00:00"},
    ]
    assert [d.date for d in compute_daily_activities(activities)] == ["2023-12-31", "2024-1-9", "2024-1-10"]


def test_activity_types_keep_first_seen_order_and_default_unknown():
    activities = [
        {"activity_type": "running", "distance": 5000},
        {"activity_type": None, "distance": 1000},
        {"activity_type": "cycling", "distance": 20000},
        {"activity_type": "running", "distance": 3000},
        {"activity_type": ""},
    ]
    types = compute_activity_types(activities)
    assert types.keys() == ["running", "unknown", "cycling"]
    assert types["running"].count == 2
    assert types["running"].distance == pytest.approx(8.0)
    assert types["unknown"].count == 2
    assert "swimming" not in types
    assert [t.name for t in types] == ["running", "unknown", "cycling"]


def test_activity_types_missing_column_groups_as_unknown():
    types = compute_activity_types([{"distance": 1000}])
    assert types.to_records() == [{"name": "unknown", "count": 1, "distance": 1.0}]


def test_heart_rate_series_drops_days_without_resting_rate():
    days = [
        {"date": "2024-01-03", "resting_hr": 55, "min_hr": 48, "max_hr": 150},
        {"date": "2024-01-01", "resting_hr": 0, "min_hr": 45, "max_hr": 140},
        {"date": "2024-01-02", "resting_hr": None, "min_hr": 50, "max_hr": 155},
        {"date": "2024-01-04", "resting_hr": 57},
    ]
    series = compute_heart_rate_series(days)
    assert [p.date for p in series] == ["2024-01-03", "2024-01-04"]
    assert series[0].resting == 55
    assert series[0].max == 150
    assert series[1].min is None


def test_sleep_series_formats_hours_and_passes_score_through():
    series = compute_sleep_series(
        [{"date": "2024-01-01", "total_sleep_seconds": 28800, "deep_sleep_seconds": 3600, "sleep_score": 85}]
    )
    point = series[0]
    assert point.total_hours == "8.0"
    assert point.deep_hours == "1.0"
    assert point.light_hours == "0.0"
    assert point.rem_hours == "0.0"
    assert point.score == 85


def test_sleep_series_rounds_half_up_and_keeps_out_of_range_scores():
    series = compute_sleep_series(
        [{"date": "2024-01-02", "total_sleep_seconds": 6300, "rem_sleep_seconds": 5400, "sleep_score": 130}]
    )
    assert series[0].total_hours == "1.8"
    assert series[0].rem_hours == "1.5"
    assert series[0].score == 130


def test_pipeline_accepts_dataframes():
    activities = pd.DataFrame(
        [{"activity_id": "1", "start_time": "2024-01-05 07:00:00", "activity_type": "running", "distance": 5000.0}]
    )
    daily_stats = pd.DataFrame([{"date": "2024-01-05", "steps": 12000.0, "resting_hr": 52.0}])
    sleep = pd.DataFrame([{"date": "2024-01-05", "total_sleep_seconds": 27000.0, "sleep_score": 80.0}])

    result = run_pipeline(activities, daily_stats, sleep)
    payload = result.to_dict()

    assert payload["summary"]["total_activities"] == 1
    assert payload["summary_display"]["total_distance"] == "5.0"
    assert payload["daily_activities"][0]["date"] == "2024-01-05"
    assert payload["activity_types"][0]["name"] == "running"
    assert payload["heart_rate"][0]["resting"] == 52.0
    assert payload["sleep"][0]["total_hours"] == "7.5"
