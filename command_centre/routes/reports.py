"""
Reports & Analytics endpoints.

Endpoints:
- GET /reports/financial - Revenue by department and monthly revenue/expense
- GET /reports/projects - Project counts per status and category
- GET /reports/employees - Headcount and utilization per department
- GET /reports/clients - Revenue per client and clients per status

Query parameters: year (financial year) and month ('All' or Jan..Dec).
"""

import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from command_centre.auth.access import require_permission
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_supabase_client
from command_centre.schemas.reports import (
    ClientReportResponse,
    EmployeeReportResponse,
    FinancialReportResponse,
    ProjectReportResponse,
)
from command_centre.services.finance_service import financial_year_of
from command_centre.services.report_service import (
    ALL_MONTHS,
    build_client_report,
    build_employee_report,
    build_financial_report,
    build_project_report,
    parse_month,
)
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

ReportViewer = Annotated[CurrentMember, Depends(require_permission("reports", "view"))]
YearQuery = Annotated[Optional[int], Query(ge=2000, le=2100, description="Financial year")]
MonthQuery = Annotated[str, Query(description="'All' or a month abbreviation (Jan..Dec)")]


def _period(year: Optional[int], month: str) -> int:
    try:
        parse_month(month)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": str(e)}
        )
    return year if year is not None else financial_year_of(date.today())


def _report_failed(name: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to build {name} report: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "report_error", "details": failure_details(f"Failed to build {name} report", e)}
    )


@router.get(
    "/financial",
    response_model=FinancialReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Financial report",
)
async def financial_report(
    member: ReportViewer,
    year: YearQuery = None,
    month: MonthQuery = ALL_MONTHS,
) -> FinancialReportResponse:
    """
    Revenue by department with shares, plus the monthly revenue/expense series.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("reports", "view")

    Step 2: Parse/Validate Request
    - year, month (400 on an unknown month)

    Step 3: Domain & Intent Filter
    - Month narrows the department breakdown only

    Step 4: Call Service
    - build_financial_report()

    Step 5: Map Output -> ResponseModel
    - FinancialReportResponse

    Step 6: Persistence
    - Read-only operation
    """
    financial_year = _period(year, month)
    supabase_client = get_supabase_client(member.access_token)

    try:
        report = await build_financial_report(supabase_client, financial_year, month)
    except Exception as e:
        raise _report_failed("financial", e)

    return FinancialReportResponse.model_validate(report)


@router.get(
    "/projects",
    response_model=ProjectReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Project report",
)
async def project_report(member: ReportViewer) -> ProjectReportResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        report = await build_project_report(supabase_client)
    except Exception as e:
        raise _report_failed("project", e)

    return ProjectReportResponse.model_validate(report)


@router.get(
    "/employees",
    response_model=EmployeeReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Employee report",
)
async def employee_report(member: ReportViewer) -> EmployeeReportResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        report = await build_employee_report(supabase_client)
    except Exception as e:
        raise _report_failed("employee", e)

    return EmployeeReportResponse.model_validate(report)


@router.get(
    "/clients",
    response_model=ClientReportResponse,
    status_code=status.HTTP_200_OK,
    summary="Client report",
)
async def client_report(
    member: ReportViewer,
    year: YearQuery = None,
    month: MonthQuery = ALL_MONTHS,
) -> ClientReportResponse:
    financial_year = _period(year, month)
    supabase_client = get_supabase_client(member.access_token)

    try:
        report = await build_client_report(supabase_client, financial_year, month)
    except Exception as e:
        raise _report_failed("client", e)

    return ClientReportResponse.model_validate(report)
