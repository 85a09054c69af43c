"""
Project service.

Projects have no client foreign key; the client name entered on the New
Project form is kept in `description`.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from command_centre.utils.constants import PROJECT_STATUS_LABELS

logger = logging.getLogger(__name__)


def to_project_view(row: Dict[str, Any]) -> Dict[str, Any]:
    description = row.get("description")
    status = str(row.get("status") or "inprogress")

    def _date(key: str) -> Optional[str]:
        value = row.get(key)
        return str(value) if value else None

    cost = row.get("estimated_cost")

    return {
        "id": str(row.get("id")),
        "name": str(row.get("name") or ""),
        "client": str(description) if description else "N/A",
        "description": description,
        "category": str(row.get("category") or ""),
        "status": status,
        "status_label": PROJECT_STATUS_LABELS.get(status, status),
        "start_date": _date("start_date"),
        "end_date": _date("end_date"),
        "estimated_cost": float(cost) if cost is not None else None,
        "created_at": _date("created_at"),
    }


async def get_all_projects(
    supabase_client: Client,
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch projects newest first.

    category and status filter in the query; search matches name or client
    name case-insensitively.
    """
    logger.debug(f"Fetching projects (search={search}, category={category}, status={status})")

    query = supabase_client.table("projects").select("*")
    if category:
        query = query.eq("category", category)
    if status:
        query = query.eq("status", status)

    result = query.order("created_at", desc=True).execute()
    projects = [to_project_view(row) for row in cast(List[Dict[str, Any]], result.data or [])]

    if search:
        needle = search.lower()
        projects = [
            p for p in projects
            if needle in p["name"].lower() or needle in p["client"].lower()
        ]

    logger.info(f"Fetched {len(projects)} projects")
    return projects


def _serialize(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in values.items()}


async def create_project(
    supabase_client: Client,
    name: str,
    category: str = "Development",
    status: str = "inprogress",
    description: Optional[str] = None,
    client: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    estimated_cost: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Insert a project.

    Raises:
        Exception: If the datastore returns no row
    """
    project_data = _serialize({
        "name": name,
        "description": description or client,
        "category": category,
        "status": status,
        "start_date": start_date,
        "end_date": end_date,
        "estimated_cost": estimated_cost,
    })

    logger.info(f"Creating project '{name}' (category={category}, status={status})")

    result = supabase_client.table("projects").insert(project_data).execute()
    if not result.data:
        raise Exception("Failed to create project: no data returned")

    created = to_project_view(cast(Dict[str, Any], result.data[0]))
    logger.info(f"Project created successfully: {created['id']}")
    return created


async def update_project(
    supabase_client: Client,
    project_id: str,
    **updates: Any
) -> Optional[Dict[str, Any]]:
    """Patch a project. Returns None if it does not exist."""
    logger.info(f"Updating project {project_id}: {list(updates.keys())}")

    result = (
        supabase_client.table("projects")
        .update(_serialize(updates))
        .eq("id", project_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Project {project_id} not found for update")
        return None

    return to_project_view(cast(Dict[str, Any], result.data[0]))


async def assign_project(
    supabase_client: Client,
    employee_id: str,
    project_id: str,
    role_in_project: Optional[str] = None,
) -> Dict[str, Any]:
    assignment: Dict[str, Any] = {
        "employee_id": employee_id,
        "project_id": project_id,
        "assigned_at": datetime.now(timezone.utc).isoformat(),
    }
    if role_in_project:
        assignment["role_in_project"] = role_in_project

    logger.info(f"Assigning employee {employee_id} to project {project_id}")

    result = supabase_client.table("employee_projects").insert(assignment).execute()
    if not result.data:
        raise Exception("Failed to assign project: no data returned")

    return cast(Dict[str, Any], result.data[0])
