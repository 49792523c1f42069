from datetime import date, datetime

from core.filters import DashboardFilters, normalize_filters


def test_defaults():
    filters = normalize_filters({})
    assert filters == DashboardFilters()
    assert not filters.has_date_range
    assert normalize_filters(None).recent_limit == 10


def test_dates_are_parsed_and_reversed_ranges_swapped():
    filters = normalize_filters({"start_date": "2024-02-01", "end_date": datetime(2024, 1, 1, 12, 0)})
    assert filters.start_date == date(2024, 1, 1)
    assert filters.end_date == date(2024, 2, 1)
    assert filters.has_date_range


def test_invalid_dates_are_ignored():
    filters = normalize_filters({"start_date": "not-a-date", "end_date": ""})
    assert filters.start_date is None
    assert filters.end_date is None


def test_recent_limit_is_clamped():
    assert normalize_filters({"recent_limit": "abc"}).recent_limit == 10
    assert normalize_filters({"recent_limit": 0}).recent_limit == 1
    assert normalize_filters({"recent_limit": 1000}).recent_limit == 100
    assert normalize_filters({"recent_limit": "25"}).recent_limit == 25


def test_range_spanning_all_available_dates_is_dropped():
    dates = ["2024-01-05", "2024-01-06", "2024-01-07"]
    full = normalize_filters({"start_date": date(2024, 1, 5), "end_date": date(2024, 1, 7)}, available_dates=dates)
    assert not full.has_date_range
    wider = normalize_filters({"start_date": "2024-01-01", "end_date": "2024-02-01"}, available_dates=dates)
    assert not wider.has_date_range


def test_narrower_range_is_kept_with_available_dates():
    dates = ["2024-01-05", "2024-01-06", "2024-01-07"]
    filters = normalize_filters({"start_date": "2024-01-06", "end_date": "2024-01-07"}, available_dates=dates)
    assert filters.start_date == date(2024, 1, 6)
    assert filters.end_date == date(2024, 1, 7)
    assert normalize_filters({"end_date": "2024-01-06"}, available_dates=dates).has_date_range
    assert normalize_filters({"start_date": "2024-01-06"}, available_dates=[]).has_date_range
