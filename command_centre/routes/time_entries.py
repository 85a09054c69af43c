"""
Time tracking endpoints.

Endpoints:
- POST /time-entries - Log hours for the caller
- GET /time-entries - List entries (single day or range)
- GET /time-entries/summary - Per-day and per-project totals

Admins and managers may pass employee_id to read another employee's entries.
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from command_centre.auth.dependencies import CurrentMember, get_current_member
from command_centre.db.client import get_supabase_client
from command_centre.schemas.time_entries import (
    TimeEntryCreateRequest,
    TimeEntryCreateResponse,
    TimeEntryListResponse,
    TimeEntryResponse,
    TimeSummaryResponse,
)
from command_centre.services.time_entry_service import (
    get_time_entries,
    log_time_entry,
    summarize_entries,
)
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/time-entries", tags=["time-tracking"])

Member = Annotated[CurrentMember, Depends(get_current_member)]

CROSS_EMPLOYEE_ROLES = ("admin", "manager")


def _target_employee(member: CurrentMember, employee_id: Optional[str]) -> str:
    """Whose entries to read; only admins and managers may name someone else."""
    if not employee_id or employee_id == member.user_id:
        return member.user_id
    if member.role not in CROSS_EMPLOYEE_ROLES:
        logger.warning(f"Role '{member.role}' denied reading time entries of {employee_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "details": "Only admins and managers can view other employees' time"}
        )
    return employee_id


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": "end_date cannot be before start_date"}
        )


@router.post(
    "",
    response_model=TimeEntryCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log time",
)
async def create_time_entry(request: TimeEntryCreateRequest, member: Member) -> TimeEntryCreateResponse:
    """
    Log hours against a project.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - get_current_member (any role)

    Step 2: Parse/Validate Request
    - TimeEntryCreateRequest (0 < hours <= 24)

    Step 3: Domain & Intent Filter
    - The entry always belongs to the caller

    Step 4: Call Service
    - log_time_entry()

    Step 5: Map Output -> ResponseModel
    - TimeEntryCreateResponse with the day's new total

    Step 6: Persistence
    - time_entries insert under RLS
    """
    logger.info(f"{member.user_id} logging {request.hours}h on project {request.project_id}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        logged = await log_time_entry(
            supabase_client,
            employee_id=member.user_id,
            project_id=request.project_id,
            hours=request.hours,
            notes=request.notes,
            entry_date=request.entry_date,
        )
        return TimeEntryCreateResponse(
            entry=TimeEntryResponse.model_validate(logged["entry"]),
            day_total_hours=logged["day_total_hours"],
            message="Time logged successfully"
        )

    except Exception as e:
        logger.error(f"Failed to log time for {member.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to log time entry", e)}
        )


@router.get(
    "",
    response_model=TimeEntryListResponse,
    status_code=status.HTTP_200_OK,
    summary="List time entries",
)
async def list_time_entries(
    member: Member,
    entry_date: Optional[date] = Query(None, alias="date", description="Single day"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    employee_id: Optional[str] = Query(None, description="Admins and managers only"),
) -> TimeEntryListResponse:
    _check_range(start_date, end_date)
    target = _target_employee(member, employee_id)

    supabase_client = get_supabase_client(member.access_token)

    try:
        entries = await get_time_entries(
            supabase_client,
            employee_id=target,
            entry_date=entry_date,
            start_date=start_date,
            end_date=end_date,
        )
    except Exception as e:
        logger.error(f"Failed to fetch time entries for {target}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve time entries", e)}
        )

    return TimeEntryListResponse(
        entries=[TimeEntryResponse.model_validate(e) for e in entries],
        count=len(entries),
        total_hours=round(sum(e["hours"] for e in entries), 2),
    )


@router.get(
    "/summary",
    response_model=TimeSummaryResponse,
    status_code=status.HTTP_200_OK,
    summary="Time summary",
)
async def get_time_summary(
    member: Member,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    employee_id: Optional[str] = Query(None, description="Admins and managers only"),
) -> TimeSummaryResponse:
    _check_range(start_date, end_date)
    target = _target_employee(member, employee_id)

    supabase_client = get_supabase_client(member.access_token)

    try:
        entries = await get_time_entries(
            supabase_client,
            employee_id=target,
            start_date=start_date,
            end_date=end_date,
        )
    except Exception as e:
        logger.error(f"Failed to summarize time entries for {target}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve time entries", e)}
        )

    return TimeSummaryResponse(employee_id=target, **summarize_entries(entries))
