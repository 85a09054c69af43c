"""
Finance API endpoints.

Endpoints:
- GET /finance/invoices - Invoices due in a financial year
- PATCH /finance/invoices/{invoice_id}/status - Change an invoice's status
- GET /finance/summary - Revenue, payments, expenses and breakdowns
- GET /finance/aging - Overdue invoice aging buckets and top overdue
- GET /finance/profitability - Per-project revenue, cost and margin
- GET /finance/budgets - Budget lines
- POST /finance/budgets - Create a budget line
- PATCH /finance/budgets/{budget_id} - Update a budget line
- GET /finance/budget-vs-actual - Twelve-month budget vs actual trend

`year` is the financial year (April to March) and defaults to the current one.
"""

import logging
from datetime import date
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from postgrest.exceptions import APIError

from command_centre.auth.access import require_permission
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_supabase_client
from command_centre.schemas.finance import (
    BudgetCreateRequest,
    BudgetCreateResponse,
    BudgetListResponse,
    BudgetResponse,
    BudgetUpdateRequest,
    BudgetUpdateResponse,
    BudgetVsActualResponse,
    FinanceSummaryResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatusUpdateRequest,
    InvoiceStatusUpdateResponse,
    PaymentAgingResponse,
    ProfitabilityResponse,
)
from command_centre.services.finance_service import (
    create_budget,
    financial_year_of,
    get_budget_vs_actual,
    get_budgets,
    get_finance_summary,
    get_invoices,
    get_payment_aging,
    get_project_profitability,
    update_budget,
    update_invoice_status,
)
from command_centre.utils.constants import ALL_DEPARTMENTS
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/finance", tags=["finance"])

FinanceViewer = Annotated[CurrentMember, Depends(require_permission("finance", "view"))]
FinanceCreator = Annotated[CurrentMember, Depends(require_permission("finance", "create"))]
FinanceEditor = Annotated[CurrentMember, Depends(require_permission("finance", "edit"))]
YearQuery = Annotated[
    Optional[int],
    Query(ge=2000, le=2100, description="Financial year (April start); defaults to the current one")
]


def _resolve_year(year: Optional[int]) -> int:
    return year if year is not None else financial_year_of(date.today())


def _fetch_failed(what: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to fetch {what}: {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "fetch_error", "details": failure_details(f"Failed to retrieve {what}", e)}
    )


# --- Invoices ---

@router.get(
    "/invoices",
    response_model=InvoiceListResponse,
    status_code=status.HTTP_200_OK,
    summary="List invoices for a financial year",
)
async def list_invoices(member: FinanceViewer, year: YearQuery = None) -> InvoiceListResponse:
    """
    List client invoices due within the financial year.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("finance", "view")

    Step 2: Parse/Validate Request
    - Query parameter: year

    Step 3: Domain & Intent Filter
    - Default to the current financial year

    Step 4: Call Service
    - get_invoices()

    Step 5: Map Output -> ResponseModel
    - InvoiceListResponse

    Step 6: Persistence
    - Read-only operation
    """
    financial_year = _resolve_year(year)
    supabase_client = get_supabase_client(member.access_token)

    try:
        invoices = await get_invoices(supabase_client, financial_year)
    except Exception as e:
        raise _fetch_failed("invoices", e)

    responses = [InvoiceResponse.model_validate(i) for i in invoices]
    return InvoiceListResponse(invoices=responses, count=len(responses), financial_year=financial_year)


@router.patch(
    "/invoices/{invoice_id}/status",
    response_model=InvoiceStatusUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Change an invoice's status",
)
async def change_invoice_status(
    invoice_id: Annotated[str, Path(..., description="Invoice UUID")],
    request: InvoiceStatusUpdateRequest,
    member: FinanceEditor,
) -> InvoiceStatusUpdateResponse:
    """Marking an invoice paid stamps today's date; other statuses clear it."""
    logger.info(f"{member.user_id} setting invoice {invoice_id} to {request.status}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        updated = await update_invoice_status(supabase_client, invoice_id, request.status)
    except Exception as e:
        logger.error(f"Failed to update invoice {invoice_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update invoice", e)}
        )

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"Invoice {invoice_id} not found"}
        )

    paid_date = updated.get("paid_date")
    return InvoiceStatusUpdateResponse(
        invoice_id=invoice_id,
        invoice_status=updated.get("status", request.status),
        paid_date=str(paid_date) if paid_date else None,
    )


# --- Overview ---

@router.get(
    "/summary",
    response_model=FinanceSummaryResponse,
    status_code=status.HTTP_200_OK,
    summary="Financial overview",
)
async def get_summary(member: FinanceViewer, year: YearQuery = None) -> FinanceSummaryResponse:
    financial_year = _resolve_year(year)
    supabase_client = get_supabase_client(member.access_token)

    try:
        summary = await get_finance_summary(supabase_client, financial_year)
    except Exception as e:
        raise _fetch_failed("financial summary", e)

    return FinanceSummaryResponse.model_validate(summary)


@router.get(
    "/aging",
    response_model=PaymentAgingResponse,
    status_code=status.HTTP_200_OK,
    summary="Overdue invoice aging",
)
async def get_aging(member: FinanceViewer, year: YearQuery = None) -> PaymentAgingResponse:
    financial_year = _resolve_year(year)
    supabase_client = get_supabase_client(member.access_token)

    try:
        aging = await get_payment_aging(supabase_client, financial_year)
    except Exception as e:
        raise _fetch_failed("payment aging", e)

    return PaymentAgingResponse.model_validate(aging)


@router.get(
    "/profitability",
    response_model=ProfitabilityResponse,
    status_code=status.HTTP_200_OK,
    summary="Project profitability",
)
async def get_profitability(member: FinanceViewer, year: YearQuery = None) -> ProfitabilityResponse:
    financial_year = _resolve_year(year)
    supabase_client = get_supabase_client(member.access_token)

    try:
        projects = await get_project_profitability(supabase_client, financial_year)
    except Exception as e:
        raise _fetch_failed("project profitability", e)

    return ProfitabilityResponse.model_validate({"financial_year": financial_year, "projects": projects})


# --- Budgets ---

def _budget_view(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **row,
        "id": str(row.get("id")),
        "created_at": str(row["created_at"]) if row.get("created_at") else None,
        "updated_at": str(row["updated_at"]) if row.get("updated_at") else None,
    }


@router.get(
    "/budgets",
    response_model=BudgetListResponse,
    status_code=status.HTTP_200_OK,
    summary="List budget lines",
)
async def list_budgets(
    member: FinanceViewer,
    year: YearQuery = None,
    department: Optional[str] = Query(None, description="Department, or 'All Departments'"),
) -> BudgetListResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        budgets = await get_budgets(supabase_client, year=year, department=department)
    except Exception as e:
        raise _fetch_failed("budgets", e)

    responses = [BudgetResponse.model_validate(_budget_view(b)) for b in budgets]
    return BudgetListResponse(budgets=responses, count=len(responses))


@router.post(
    "/budgets",
    response_model=BudgetCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a budget line",
)
async def create_new_budget(request: BudgetCreateRequest, member: FinanceCreator) -> BudgetCreateResponse:
    """
    Create a budget line.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("finance", "create")

    Step 2: Parse/Validate Request
    - BudgetCreateRequest (department enum, non-negative amounts)

    Step 3: Domain & Intent Filter
    - One line per (financial_year, month, department)

    Step 4: Call Service
    - create_budget()

    Step 5: Map Output -> ResponseModel
    - BudgetCreateResponse, 409 on a duplicate line

    Step 6: Persistence
    - budgets insert under RLS
    """
    logger.info(
        f"{member.user_id} creating budget for {request.department} "
        f"FY {request.financial_year} month {request.month}"
    )

    supabase_client = get_supabase_client(member.access_token)

    try:
        created = await create_budget(supabase_client, **request.model_dump())
        return BudgetCreateResponse(
            budget=BudgetResponse.model_validate(_budget_view(created)),
            message="Budget created successfully"
        )

    except APIError as e:
        if e.code == "23505":  # unique_violation
            logger.warning(
                f"Duplicate budget for {request.department} FY {request.financial_year} month {request.month}"
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "error": "budget_exists",
                    "details": "A budget already exists for this year, month and department. Use PATCH to update it."
                }
            )
        logger.error(f"Database error creating budget: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to create budget", e)}
        )
    except Exception as e:
        logger.error(f"Failed to create budget: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to create budget", e)}
        )


@router.patch(
    "/budgets/{budget_id}",
    response_model=BudgetUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a budget line",
)
async def update_existing_budget(
    budget_id: Annotated[str, Path(..., description="Budget UUID")],
    request: BudgetUpdateRequest,
    member: FinanceEditor,
) -> BudgetUpdateResponse:
    updates = request.model_dump(exclude_none=True)

    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    supabase_client = get_supabase_client(member.access_token)

    try:
        updated = await update_budget(supabase_client, budget_id, **updates)
    except Exception as e:
        logger.error(f"Failed to update budget {budget_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update budget", e)}
        )

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"Budget {budget_id} not found"}
        )

    return BudgetUpdateResponse(
        budget=BudgetResponse.model_validate(_budget_view(updated)),
        message="Budget updated successfully"
    )


@router.get(
    "/budget-vs-actual",
    response_model=BudgetVsActualResponse,
    status_code=status.HTTP_200_OK,
    summary="Budget vs actual trend",
)
async def get_budget_trend(
    member: FinanceViewer,
    year: YearQuery = None,
    department: str = Query(ALL_DEPARTMENTS, description="Department, or 'All Departments'"),
) -> BudgetVsActualResponse:
    financial_year = _resolve_year(year)
    supabase_client = get_supabase_client(member.access_token)

    try:
        points = await get_budget_vs_actual(supabase_client, financial_year, department)
    except Exception as e:
        raise _fetch_failed("budget trend", e)

    return BudgetVsActualResponse.model_validate({
        "financial_year": financial_year,
        "department": department,
        "points": points,
    })
