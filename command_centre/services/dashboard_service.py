"""
Dashboard bulk fetch and KPI overview.
"""

import logging
from typing import Any, Dict, List, cast

from supabase import Client

from command_centre.utils.constants import DEPARTMENTS, PROJECT_STATUS_LABELS

logger = logging.getLogger(__name__)


def _fetch(supabase_client: Client, table: str, columns: str = "*") -> List[Dict[str, Any]]:
    result = supabase_client.table(table).select(columns).execute()
    return cast(List[Dict[str, Any]], result.data or [])


async def get_dashboard_data(supabase_client: Client) -> Dict[str, List[Dict[str, Any]]]:
    """
    Fetch everything the dashboard renders in one pass.

    Returns:
        Dict with employees (joined with profiles), projects, skills,
        employee_projects and employee_skills
    """
    data = {
        "employees": _fetch(supabase_client, "employees", "*, profiles:id(name, email, phone, role)"),
        "projects": _fetch(supabase_client, "projects"),
        "skills": _fetch(supabase_client, "skills"),
        "employee_projects": _fetch(supabase_client, "employee_projects"),
        "employee_skills": _fetch(supabase_client, "employee_skills"),
    }

    logger.info(
        "Dashboard data fetched: "
        + ", ".join(f"{name}={len(rows)}" for name, rows in data.items())
    )
    return data


def build_overview(data: Dict[str, List[Dict[str, Any]]]) -> Dict[str, Any]:
    """KPI summary from the bulk dashboard data."""
    employees = data.get("employees", [])
    projects = data.get("projects", [])

    projects_by_status = {status: 0 for status in PROJECT_STATUS_LABELS}
    for project in projects:
        status = str(project.get("status") or "inprogress")
        projects_by_status[status] = projects_by_status.get(status, 0) + 1

    employees_by_department = {department: 0 for department in DEPARTMENTS}
    for employee in employees:
        department = str(employee.get("department") or "")
        if department:
            employees_by_department[department] = employees_by_department.get(department, 0) + 1

    utilizations = [float(e.get("utilization") or 0) for e in employees]
    average_utilization = round(sum(utilizations) / len(utilizations), 1) if utilizations else 0.0

    return {
        "employee_count": len(employees),
        "project_count": len(projects),
        "active_projects": projects_by_status.get("inprogress", 0),
        "average_utilization": average_utilization,
        "projects_by_status": projects_by_status,
        "employees_by_department": employees_by_department,
    }
