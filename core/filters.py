from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

RECENT_LIMIT_DEFAULT = 10
RECENT_LIMIT_MAX = 100


@dataclass(frozen=True)
class DashboardFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    recent_limit: int = RECENT_LIMIT_DEFAULT

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None or self.end_date is not None


def _as_date(value: object) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _covers_all(start_date: Optional[date], end_date: Optional[date], available_dates: Iterable[object]) -> bool:
    known = [d for d in (_as_date(v) for v in available_dates) if d is not None]
    if not known:
        return False
    return (start_date is None or start_date <= min(known)) and (end_date is None or end_date >= max(known))


def normalize_filters(raw: Optional[dict], available_dates: Optional[Iterable[object]] = None) -> DashboardFilters:
    """Build filters from raw input.

    When `available_dates` is given and the requested range spans all of them,
    the range is dropped so records without a date stay in scope.
    """
    raw = raw or {}
    start_date = _as_date(raw.get("start_date"))
    end_date = _as_date(raw.get("end_date"))
    if start_date and end_date and start_date > end_date:
        start_date, end_date = end_date, start_date
    if available_dates is not None and _covers_all(start_date, end_date, available_dates):
        start_date = end_date = None

    recent_limit = raw.get("recent_limit", RECENT_LIMIT_DEFAULT)
    try:
        recent_limit = int(recent_limit)
    except (TypeError, ValueError):
        recent_limit = RECENT_LIMIT_DEFAULT
    recent_limit = max(1, min(RECENT_LIMIT_MAX, recent_limit))

    return DashboardFilters(start_date=start_date, end_date=end_date, recent_limit=recent_limit)
