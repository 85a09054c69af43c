"""
Pydantic schemas for finance endpoints.

Covers client invoices, the financial overview, payment aging, project
profitability and departmental budgets (budget vs actual).

All amounts are INR. Financial year Y spans 1 April Y to 31 March Y+1.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from command_centre.utils.constants import Department, InvoiceStatus


# --- Invoices ---

class InvoiceResponse(BaseModel):
    id: str
    client: str = Field(..., description="Client name, 'Unknown' when missing")
    project_name: str = Field(..., description="Project name, '-' when missing")
    amount: float
    amount_label: str
    due_date: Optional[str] = None
    paid_date: Optional[str] = None
    status: InvoiceStatus
    notes: str = ""


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceResponse]
    count: int
    financial_year: int


class InvoiceStatusUpdateRequest(BaseModel):
    status: InvoiceStatus


class InvoiceStatusUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    invoice_id: str
    invoice_status: InvoiceStatus
    paid_date: Optional[str] = None
    message: str = "Invoice updated"


# --- Overview ---

class BreakdownItem(BaseModel):
    name: str
    value: float
    share: int = Field(..., description="Percent of the breakdown total")


class MonthlyPoint(BaseModel):
    month: str
    revenue: float
    expense: float


class FinanceSummaryResponse(BaseModel):
    financial_year: int
    total_revenue: float
    pending_payments: float
    overdue_payments: float
    total_expenses: float
    total_profit: float
    department_breakdown: List[BreakdownItem]
    client_breakdown: List[BreakdownItem]
    monthly_trend: List[MonthlyPoint]


# --- Aging ---

class AgingBucket(BaseModel):
    bucket: str
    value: float


class OverdueInvoice(BaseModel):
    id: str
    client: str
    project_name: str
    amount: float
    due_date: Optional[str] = None
    days_overdue: int


class PaymentAgingResponse(BaseModel):
    financial_year: int
    buckets: List[AgingBucket]
    top_overdue: List[OverdueInvoice]


# --- Profitability ---

class ProjectProfitability(BaseModel):
    project_id: str
    project_name: str
    client_name: str
    revenue: float
    est_cost: float
    profit: float
    margin: Optional[int] = Field(None, description="Percent, null when there is no revenue")


class ProfitabilityResponse(BaseModel):
    financial_year: int
    projects: List[ProjectProfitability]


# --- Budgets ---

class BudgetCreateRequest(BaseModel):
    """
    One budget line: a department's planned revenue and cost for a month.

    (financial_year, month, department) is unique in the datastore.
    """
    financial_year: int = Field(..., ge=2000, le=2100, examples=[2025])
    month: int = Field(..., ge=1, le=12, description="Calendar month number")
    department: Department
    budget_revenue: float = Field(..., ge=0)
    budget_cost: float = Field(..., ge=0)
    actual_revenue: Optional[float] = Field(None, ge=0)
    actual_cost: Optional[float] = Field(None, ge=0)


class BudgetUpdateRequest(BaseModel):
    """Patch a budget line. At least one field is required."""
    budget_revenue: Optional[float] = Field(None, ge=0)
    budget_cost: Optional[float] = Field(None, ge=0)
    actual_revenue: Optional[float] = Field(None, ge=0)
    actual_cost: Optional[float] = Field(None, ge=0)


class BudgetResponse(BaseModel):
    id: str
    financial_year: int
    month: int
    department: str
    budget_revenue: float
    budget_cost: float
    actual_revenue: Optional[float] = None
    actual_cost: Optional[float] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class BudgetListResponse(BaseModel):
    budgets: List[BudgetResponse]
    count: int


class BudgetCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    budget: BudgetResponse
    message: str


class BudgetUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    budget: BudgetResponse
    message: str


class TrendPoint(BaseModel):
    """
    One financial-year month. Past and current months carry actuals and
    variance; later months carry projections instead.
    """
    month: str
    budget_revenue: float
    budget_cost: float
    actual_revenue: Optional[float] = None
    actual_cost: Optional[float] = None
    revenue_variance: Optional[float] = None
    revenue_variance_pct: Optional[int] = None
    cost_variance: Optional[float] = None
    cost_variance_pct: Optional[int] = None
    projected_revenue: Optional[float] = None
    projected_cost: Optional[float] = None


class BudgetVsActualResponse(BaseModel):
    financial_year: int
    department: str
    points: List[TrendPoint]
