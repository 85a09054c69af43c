"""
Finance service.

Tables:
- client_invoices: id, client_id, project_id, amount, due_date, paid_date,
  status (paid|pending|overdue), notes
- budgets: financial_year, month, department, budget_revenue, budget_cost,
  actual_revenue, actual_cost; unique on (financial_year, month, department)
- projects: estimated_cost is the delivery cost used for profitability

Financial year Y spans 1 April Y to 31 March Y+1. Every function that
depends on "today" accepts it as an argument so results are reproducible.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, cast

from supabase import Client

from command_centre.utils.constants import (
    AGING_BUCKETS,
    ALL_DEPARTMENTS,
    FINANCIAL_YEAR_MONTHS,
    MONTH_ABBREVIATIONS,
    TOP_OVERDUE_LIMIT,
)
from command_centre.utils.formatting import format_inr, percentage, profit_margin

logger = logging.getLogger(__name__)

INVOICE_SELECT = "*, clients:client_id(name), projects:project_id(name)"


# --- Financial year arithmetic ---

def financial_year_bounds(year: int) -> Tuple[date, date]:
    """First and last day of financial year `year`."""
    return date(year, 4, 1), date(year + 1, 3, 31)


def financial_year_of(day: date) -> int:
    return day.year if day.month >= 4 else day.year - 1


def financial_month_index(day: date) -> int:
    """0 for April through 11 for March."""
    return (day.month - 4) % 12


def in_financial_year(day: Optional[date], year: int) -> bool:
    if day is None:
        return False
    start, end = financial_year_bounds(year)
    return start <= day <= end


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _embedded_name(row: Dict[str, Any], key: str) -> Optional[str]:
    embedded = row.get(key)
    if isinstance(embedded, list):
        embedded = embedded[0] if embedded else None
    if isinstance(embedded, dict) and embedded.get("name"):
        return str(embedded["name"])
    return None


def _breakdown(totals: Dict[str, float]) -> List[Dict[str, Any]]:
    """Name/value/share items, largest first, zero totals dropped."""
    grand_total = sum(totals.values())
    items = [
        {"name": name, "value": round(value, 2), "share": percentage(value, grand_total)}
        for name, value in totals.items()
        if value
    ]
    return sorted(items, key=lambda item: item["value"], reverse=True)


# --- Invoices ---

def flatten_invoice(row: Dict[str, Any]) -> Dict[str, Any]:
    amount = float(row.get("amount") or 0)
    due_date = row.get("due_date")
    paid_date = row.get("paid_date")
    return {
        "id": str(row.get("id")),
        "client_id": row.get("client_id"),
        "project_id": row.get("project_id"),
        "client": _embedded_name(row, "clients") or "Unknown",
        "project_name": _embedded_name(row, "projects") or "-",
        "amount": amount,
        "amount_label": format_inr(amount),
        "due_date": str(due_date) if due_date else None,
        "paid_date": str(paid_date) if paid_date else None,
        "status": row.get("status") or "pending",
        "notes": str(row.get("notes") or ""),
    }


async def get_invoices(supabase_client: Client, year: int) -> List[Dict[str, Any]]:
    """Invoices due within financial year `year`, ordered by due date."""
    start, end = financial_year_bounds(year)

    logger.debug(f"Fetching invoices for FY {year} ({start} to {end})")

    result = (
        supabase_client.table("client_invoices")
        .select(INVOICE_SELECT)
        .gte("due_date", start.isoformat())
        .lte("due_date", end.isoformat())
        .order("due_date")
        .execute()
    )
    invoices = [flatten_invoice(row) for row in cast(List[Dict[str, Any]], result.data or [])]

    logger.info(f"Fetched {len(invoices)} invoices for FY {year}")
    return invoices


async def update_invoice_status(
    supabase_client: Client,
    invoice_id: str,
    new_status: str,
    today: Optional[date] = None,
) -> Optional[Dict[str, Any]]:
    """
    Change an invoice's status.

    Marking paid stamps paid_date with today; any other status clears it.
    Returns the updated row, or None if the invoice does not exist.
    """
    paid_date = (today or date.today()).isoformat() if new_status == "paid" else None

    logger.info(f"Setting invoice {invoice_id} status to {new_status}")

    result = (
        supabase_client.table("client_invoices")
        .update({"status": new_status, "paid_date": paid_date})
        .eq("id", invoice_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Invoice {invoice_id} not found for status update")
        return None

    return cast(Dict[str, Any], result.data[0])


# --- Budgets ---

async def get_budgets(
    supabase_client: Client,
    year: Optional[int] = None,
    department: Optional[str] = None,
) -> List[Dict[str, Any]]:
    query = supabase_client.table("budgets").select("*")
    if year is not None:
        query = query.eq("financial_year", year)
    if department and department != ALL_DEPARTMENTS:
        query = query.eq("department", department)

    result = query.order("financial_year").order("month").execute()
    budgets = cast(List[Dict[str, Any]], result.data or [])

    logger.info(f"Fetched {len(budgets)} budget lines (year={year}, department={department})")
    return budgets


async def create_budget(
    supabase_client: Client,
    financial_year: int,
    month: int,
    department: str,
    budget_revenue: float,
    budget_cost: float,
    actual_revenue: Optional[float] = None,
    actual_cost: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Insert a budget line.

    Raises:
        postgrest.exceptions.APIError: code 23505 for a duplicate
            (financial_year, month, department)
        Exception: If the datastore returns no row
    """
    budget_data = {
        "financial_year": financial_year,
        "month": month,
        "department": department,
        "budget_revenue": budget_revenue,
        "budget_cost": budget_cost,
        "actual_revenue": actual_revenue,
        "actual_cost": actual_cost,
    }

    logger.info(f"Creating budget for {department} FY {financial_year} month {month}")

    result = supabase_client.table("budgets").insert(budget_data).execute()
    if not result.data:
        raise Exception("Failed to create budget: no data returned")

    return cast(Dict[str, Any], result.data[0])


async def update_budget(
    supabase_client: Client,
    budget_id: str,
    **updates: Any
) -> Optional[Dict[str, Any]]:
    logger.info(f"Updating budget {budget_id}: {list(updates.keys())}")

    result = (
        supabase_client.table("budgets")
        .update(updates)
        .eq("id", budget_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Budget {budget_id} not found for update")
        return None

    return cast(Dict[str, Any], result.data[0])


def _variance_pct(variance: float, budget: float) -> Optional[int]:
    return percentage(variance, budget) if budget > 0 else None


def build_budget_vs_actual(
    budgets: List[Dict[str, Any]],
    year: int,
    department: str = ALL_DEPARTMENTS,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    """
    Twelve April-to-March points for one department (or all of them).

    Months up to and including the current month of the current financial
    year carry actuals and variance (actual - budget); later months carry
    the budget as the projection. A past year is fully actual and a future
    year fully projected.
    """
    today = today or date.today()
    current_year = financial_year_of(today)
    if year < current_year:
        last_actual_index = 11
    elif year > current_year:
        last_actual_index = -1
    else:
        last_actual_index = financial_month_index(today)

    totals = {
        month: {"budget_revenue": 0.0, "budget_cost": 0.0, "actual_revenue": 0.0, "actual_cost": 0.0}
        for month in FINANCIAL_YEAR_MONTHS
    }
    for row in budgets:
        if int(row.get("financial_year") or 0) != year:
            continue
        if department != ALL_DEPARTMENTS and row.get("department") != department:
            continue
        month = int(row.get("month") or 0)
        if month not in totals:
            continue
        for field in totals[month]:
            totals[month][field] += float(row.get(field) or 0)

    points: List[Dict[str, Any]] = []
    for index, month in enumerate(FINANCIAL_YEAR_MONTHS):
        line = totals[month]
        point: Dict[str, Any] = {
            "month": MONTH_ABBREVIATIONS[month],
            "budget_revenue": round(line["budget_revenue"], 2),
            "budget_cost": round(line["budget_cost"], 2),
        }
        if index <= last_actual_index:
            revenue_variance = line["actual_revenue"] - line["budget_revenue"]
            cost_variance = line["actual_cost"] - line["budget_cost"]
            point.update({
                "actual_revenue": round(line["actual_revenue"], 2),
                "actual_cost": round(line["actual_cost"], 2),
                "revenue_variance": round(revenue_variance, 2),
                "revenue_variance_pct": _variance_pct(revenue_variance, line["budget_revenue"]),
                "cost_variance": round(cost_variance, 2),
                "cost_variance_pct": _variance_pct(cost_variance, line["budget_cost"]),
            })
        else:
            point.update({
                "projected_revenue": point["budget_revenue"],
                "projected_cost": point["budget_cost"],
            })
        points.append(point)

    return points


# --- Overview, aging, profitability ---

def build_summary(
    invoices: List[Dict[str, Any]],
    budgets: List[Dict[str, Any]],
    year: int,
) -> Dict[str, Any]:
    """Financial overview for one year from flattened invoices and budget lines."""
    revenue = pending = overdue = 0.0
    by_client: Dict[str, float] = {}
    monthly_revenue = {month: 0.0 for month in FINANCIAL_YEAR_MONTHS}

    for invoice in invoices:
        amount = float(invoice.get("amount") or 0)
        status = invoice.get("status")
        if status == "paid":
            revenue += amount
            by_client[invoice["client"]] = by_client.get(invoice["client"], 0.0) + amount
            paid_on = _parse_date(invoice.get("paid_date"))
            if in_financial_year(paid_on, year):
                monthly_revenue[cast(date, paid_on).month] += amount
        elif status == "pending":
            pending += amount
        elif status == "overdue":
            overdue += amount

    expenses = 0.0
    by_department: Dict[str, float] = {}
    monthly_expense = {month: 0.0 for month in FINANCIAL_YEAR_MONTHS}
    for line in budgets:
        cost = float(line.get("actual_cost") or 0)
        expenses += cost
        department = str(line.get("department") or "")
        by_department[department] = by_department.get(department, 0.0) + float(line.get("actual_revenue") or 0)
        month = int(line.get("month") or 0)
        if month in monthly_expense:
            monthly_expense[month] += cost

    return {
        "financial_year": year,
        "total_revenue": round(revenue, 2),
        "pending_payments": round(pending, 2),
        "overdue_payments": round(overdue, 2),
        "total_expenses": round(expenses, 2),
        "total_profit": round(revenue - expenses, 2),
        "department_breakdown": _breakdown(by_department),
        "client_breakdown": _breakdown(by_client),
        "monthly_trend": [
            {
                "month": MONTH_ABBREVIATIONS[month],
                "revenue": round(monthly_revenue[month], 2),
                "expense": round(monthly_expense[month], 2),
            }
            for month in FINANCIAL_YEAR_MONTHS
        ],
    }


def build_aging(
    invoices: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Bucket overdue invoices by days past due and pick the largest ones.

    An overdue invoice whose due date is still in the future counts as 0 days.
    """
    today = today or date.today()
    bucket_totals = {label: 0.0 for label, _, _ in AGING_BUCKETS}
    overdue_rows: List[Dict[str, Any]] = []

    for invoice in invoices:
        if invoice.get("status") != "overdue":
            continue
        due = _parse_date(invoice.get("due_date"))
        days = max((today - due).days, 0) if due else 0
        amount = float(invoice.get("amount") or 0)

        for label, lower, upper in AGING_BUCKETS:
            if days >= lower and (upper is None or days <= upper):
                bucket_totals[label] += amount
                break

        overdue_rows.append({
            "id": invoice["id"],
            "client": invoice.get("client", "Unknown"),
            "project_name": invoice.get("project_name", "-"),
            "amount": amount,
            "due_date": invoice.get("due_date"),
            "days_overdue": days,
        })

    top_overdue = sorted(overdue_rows, key=lambda row: row["amount"], reverse=True)[:TOP_OVERDUE_LIMIT]

    return {
        "buckets": [{"bucket": label, "value": round(value, 2)} for label, value in bucket_totals.items()],
        "top_overdue": top_overdue,
    }


def build_profitability(
    invoices: List[Dict[str, Any]],
    projects: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Revenue (paid invoices), estimated cost, profit and margin per project.

    Projects with neither revenue nor an estimated cost are left out.
    """
    revenue_by_project: Dict[str, float] = {}
    client_by_project: Dict[str, str] = {}
    for invoice in invoices:
        project_id = invoice.get("project_id")
        if not project_id:
            continue
        project_id = str(project_id)
        client_by_project.setdefault(project_id, invoice.get("client", "Unknown"))
        if invoice.get("status") == "paid":
            revenue_by_project[project_id] = revenue_by_project.get(project_id, 0.0) + float(invoice.get("amount") or 0)

    rows: List[Dict[str, Any]] = []
    for project in projects:
        project_id = str(project.get("id"))
        revenue = revenue_by_project.get(project_id, 0.0)
        est_cost = float(project.get("estimated_cost") or 0)
        if not revenue and not est_cost:
            continue
        rows.append({
            "project_id": project_id,
            "project_name": str(project.get("name") or ""),
            "client_name": client_by_project.get(project_id) or str(project.get("description") or "N/A"),
            "revenue": round(revenue, 2),
            "est_cost": round(est_cost, 2),
            "profit": round(revenue - est_cost, 2),
            "margin": profit_margin(revenue, est_cost),
        })

    return sorted(rows, key=lambda row: row["profit"], reverse=True)


async def get_finance_summary(supabase_client: Client, year: int) -> Dict[str, Any]:
    invoices = await get_invoices(supabase_client, year)
    budgets = await get_budgets(supabase_client, year=year)
    return build_summary(invoices, budgets, year)


async def get_payment_aging(
    supabase_client: Client,
    year: int,
    today: Optional[date] = None
) -> Dict[str, Any]:
    invoices = await get_invoices(supabase_client, year)
    return {"financial_year": year, **build_aging(invoices, today)}


async def get_project_profitability(supabase_client: Client, year: int) -> List[Dict[str, Any]]:
    invoices = await get_invoices(supabase_client, year)
    result = (
        supabase_client.table("projects")
        .select("id, name, description, estimated_cost")
        .execute()
    )
    projects = cast(List[Dict[str, Any]], result.data or [])
    return build_profitability(invoices, projects)


async def get_budget_vs_actual(
    supabase_client: Client,
    year: int,
    department: str = ALL_DEPARTMENTS,
    today: Optional[date] = None,
) -> List[Dict[str, Any]]:
    budgets = await get_budgets(supabase_client, year=year, department=department)
    return build_budget_vs_actual(budgets, year, department, today)
