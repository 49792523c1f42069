"""Presentation state for the dashboard: which tab is shown and whether data loaded.

Both the Streamlit app and the API read this; none of it feeds the aggregation
pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union


class Tab(str, Enum):
    OVERVIEW = "overview"
    ACTIVITIES = "activities"
    HEALTH = "health"
    SLEEP = "sleep"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class LoadStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


def parse_tab(value: Union[Tab, str, None], default: Tab = Tab.OVERVIEW) -> Tab:
    """Map a tab value or label ("Sleep", "sleep") to a Tab, falling back to `default`."""
    if isinstance(value, Tab):
        return value
    if not value:
        return default
    try:
        return Tab(str(value).strip().lower())
    except ValueError:
        return default


@dataclass(frozen=True)
class DashboardState:
    tab: Tab = Tab.OVERVIEW
    status: LoadStatus = LoadStatus.LOADING
    error: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.status is LoadStatus.READY

    def select(self, tab: Union[Tab, str, None]) -> "DashboardState":
        return replace(self, tab=parse_tab(tab, default=self.tab))

    def loaded(self) -> "DashboardState":
        return replace(self, status=LoadStatus.READY, error=None)

    def failed(self, error: str) -> "DashboardState":
        return replace(self, status=LoadStatus.FAILED, error=error)

    def to_dict(self) -> dict:
        return {"tab": self.tab.value, "status": self.status.value, "error": self.error}
