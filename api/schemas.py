from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class DashboardFiltersModel(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    recent_limit: int = Field(default=10, ge=1, le=100)


class MetaDatesResponse(BaseModel):
    dates: List[str]


class StatusResponse(BaseModel):
    tab: str
    status: str
    error: Optional[str] = None
    files: List[str] = Field(default_factory=list)
