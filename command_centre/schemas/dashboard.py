"""
Pydantic schemas for the dashboard bulk fetch.

Rows are passed through as stored; the datastore schema is the contract.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class DashboardResponse(BaseModel):
    employees: List[Dict[str, Any]] = Field(..., description="employees joined with profiles")
    projects: List[Dict[str, Any]]
    skills: List[Dict[str, Any]]
    employee_projects: List[Dict[str, Any]]
    employee_skills: List[Dict[str, Any]]


class DashboardOverviewResponse(BaseModel):
    employee_count: int
    project_count: int
    active_projects: int
    average_utilization: float
    projects_by_status: Dict[str, int]
    employees_by_department: Dict[str, int]
