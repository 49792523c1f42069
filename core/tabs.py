from __future__ import annotations

from typing import Any, Callable, Dict, Union

from core.filters import DashboardFilters
from core.metrics_activities import compute_activities
from core.metrics_health import compute_health
from core.metrics_overview import compute_overview
from core.metrics_sleep import compute_sleep
from core.state import Tab

TabComputer = Callable[[DashboardFilters, Dict[str, Any]], Dict[str, Any]]

TAB_COMPUTERS: Dict[Tab, TabComputer] = {
    Tab.OVERVIEW: compute_overview,
    Tab.ACTIVITIES: compute_activities,
    Tab.HEALTH: compute_health,
    Tab.SLEEP: compute_sleep,
}


def compute_tab(tab: Union[Tab, str], filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Payload for one tab. Raises ValueError for an unknown tab name."""
    tab = tab if isinstance(tab, Tab) else Tab(tab)
    payload = TAB_COMPUTERS[tab](filters, ctx)
    payload["tab"] = tab.value
    return payload
