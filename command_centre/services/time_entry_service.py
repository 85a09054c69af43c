"""
Time tracking service.

Entries are stored in `time_entries` (employee_id, project_id, entry_date,
hours, notes). Aggregation helpers are pure and work on already-fetched rows.
"""

import logging
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Optional, cast

from supabase import Client

logger = logging.getLogger(__name__)

TIME_ENTRY_SELECT = "*, projects:project_id(name)"


def to_entry_view(row: Dict[str, Any]) -> Dict[str, Any]:
    project = row.get("projects") or {}
    created_at = row.get("created_at")
    return {
        "id": str(row.get("id")),
        "employee_id": str(row.get("employee_id")),
        "project_id": str(row.get("project_id")),
        "project_name": str(project.get("name") or "Unknown") if isinstance(project, dict) else "Unknown",
        "entry_date": str(row.get("entry_date") or ""),
        "hours": float(row.get("hours") or 0),
        "notes": str(row.get("notes") or ""),
        "created_at": str(created_at) if created_at else None,
    }


def total_hours_for_date(entries: List[Dict[str, Any]], entry_date: date) -> float:
    """Sum hours of entries logged on entry_date."""
    day = entry_date.isoformat()
    return round(sum(float(e.get("hours") or 0) for e in entries if str(e.get("entry_date")) == day), 2)


def summarize_entries(entries: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate entry views.

    Returns:
        Dict with `daily` (ascending by date), `by_project` (descending by
        hours) and `total_hours`
    """
    daily: Dict[str, float] = {}
    projects: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()

    for entry in entries:
        hours = float(entry.get("hours") or 0)
        day = str(entry.get("entry_date"))
        daily[day] = daily.get(day, 0.0) + hours

        project_id = str(entry.get("project_id"))
        bucket = projects.setdefault(project_id, {
            "project_id": project_id,
            "project_name": entry.get("project_name") or "Unknown",
            "hours": 0.0,
        })
        bucket["hours"] += hours

    by_project = sorted(projects.values(), key=lambda p: p["hours"], reverse=True)
    for bucket in by_project:
        bucket["hours"] = round(bucket["hours"], 2)

    return {
        "daily": [{"entry_date": day, "hours": round(daily[day], 2)} for day in sorted(daily)],
        "by_project": by_project,
        "total_hours": round(sum(daily.values()), 2),
    }


async def get_time_entries(
    supabase_client: Client,
    employee_id: str,
    entry_date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch an employee's entries, newest first.

    entry_date selects a single day and takes precedence over the range.
    """
    logger.debug(
        f"Fetching time entries for {employee_id} "
        f"(date={entry_date}, start={start_date}, end={end_date})"
    )

    query = (
        supabase_client.table("time_entries")
        .select(TIME_ENTRY_SELECT)
        .eq("employee_id", employee_id)
    )
    if entry_date:
        query = query.eq("entry_date", entry_date.isoformat())
    else:
        if start_date:
            query = query.gte("entry_date", start_date.isoformat())
        if end_date:
            query = query.lte("entry_date", end_date.isoformat())

    result = (
        query.order("entry_date", desc=True)
        .order("created_at", desc=True)
        .execute()
    )
    entries = [to_entry_view(row) for row in cast(List[Dict[str, Any]], result.data or [])]

    logger.info(f"Fetched {len(entries)} time entries for {employee_id}")
    return entries


async def log_time_entry(
    supabase_client: Client,
    employee_id: str,
    project_id: str,
    hours: float,
    notes: str = "",
    entry_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Insert an entry and return it with the day's new total.

    Returns:
        Dict with `entry` and `day_total_hours`
    """
    day = entry_date or date.today()
    entry_data = {
        "employee_id": employee_id,
        "project_id": project_id,
        "entry_date": day.isoformat(),
        "hours": hours,
        "notes": notes,
    }

    logger.info(f"Logging {hours}h on project {project_id} for {employee_id} ({day.isoformat()})")

    result = supabase_client.table("time_entries").insert(entry_data).execute()
    if not result.data:
        raise Exception("Failed to log time entry: no data returned")

    inserted = cast(Dict[str, Any], result.data[0])

    day_entries = await get_time_entries(supabase_client, employee_id, entry_date=day)
    if not any(e["id"] == str(inserted.get("id")) for e in day_entries):
        day_entries.append(to_entry_view(inserted))

    entry = next(e for e in day_entries if e["id"] == str(inserted.get("id")))

    return {
        "entry": entry,
        "day_total_hours": total_hours_for_date(day_entries, day),
    }
