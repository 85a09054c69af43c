"""
Pydantic schemas for time tracking.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class TimeEntryCreateRequest(BaseModel):
    """Log hours against a project for one day."""
    project_id: str = Field(..., min_length=1, description="Project UUID")
    entry_date: Optional[date] = Field(None, description="Defaults to today")
    hours: float = Field(..., gt=0, le=24)
    notes: str = Field("", description="What was worked on")


class TimeEntryResponse(BaseModel):
    id: str
    employee_id: str
    project_id: str
    project_name: str
    entry_date: str
    hours: float
    notes: str = ""
    created_at: Optional[str] = None


class TimeEntryCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    entry: TimeEntryResponse
    day_total_hours: float = Field(..., description="Caller's total for entry_date after this entry")
    message: str


class TimeEntryListResponse(BaseModel):
    entries: List[TimeEntryResponse]
    count: int
    total_hours: float


class DailyTotal(BaseModel):
    entry_date: str
    hours: float


class ProjectTotal(BaseModel):
    project_id: str
    project_name: str
    hours: float


class TimeSummaryResponse(BaseModel):
    employee_id: str
    daily: List[DailyTotal]
    by_project: List[ProjectTotal]
    total_hours: float
