"""
Dashboard endpoints.

Endpoints:
- GET /dashboard - Bulk fetch of the rows the dashboard renders
- GET /dashboard/overview - KPI summary
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from command_centre.auth.access import require_roles
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_supabase_client
from command_centre.schemas.dashboard import DashboardOverviewResponse, DashboardResponse
from command_centre.services.dashboard_service import build_overview, get_dashboard_data
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

DashboardMember = Annotated[CurrentMember, Depends(require_roles("admin", "manager", "teamlead"))]


@router.get(
    "",
    response_model=DashboardResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard data",
)
async def get_dashboard(member: DashboardMember) -> DashboardResponse:
    """
    Employees (with profiles), projects, skills and both link tables.

    Restricted to admin, manager and teamlead.
    """
    supabase_client = get_supabase_client(member.access_token)

    try:
        data = await get_dashboard_data(supabase_client)
        return DashboardResponse(**data)

    except Exception as e:
        logger.error(f"Failed to fetch dashboard data: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve dashboard data", e)}
        )


@router.get(
    "/overview",
    response_model=DashboardOverviewResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard KPIs",
)
async def get_dashboard_overview(member: DashboardMember) -> DashboardOverviewResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        data = await get_dashboard_data(supabase_client)
        return DashboardOverviewResponse(**build_overview(data))

    except Exception as e:
        logger.error(f"Failed to build dashboard overview: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to build dashboard overview", e)}
        )
