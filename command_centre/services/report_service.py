"""
Reports & Analytics service.

Financial figures come from budget actuals (department revenue/expense) and
paid client invoices (client revenue). Project and employee reports are
point-in-time snapshots and ignore the period filter.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from command_centre.services.finance_service import get_budgets, get_invoices
from command_centre.utils.constants import (
    DEPARTMENTS,
    FINANCIAL_YEAR_MONTHS,
    MONTH_ABBREVIATIONS,
    PROJECT_STATUS_LABELS,
)
from command_centre.utils.formatting import capitalize_label, format_inr, percentage

logger = logging.getLogger(__name__)

ALL_MONTHS = "All"
MONTH_NUMBERS = {abbr: number for number, abbr in MONTH_ABBREVIATIONS.items()}
_FULL_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
# Lower-cased abbreviations and full names, e.g. "sep" and "september" -> 9
_MONTH_LOOKUP = {
    **{abbr.lower(): number for abbr, number in MONTH_NUMBERS.items()},
    **{name.lower(): number for number, name in enumerate(_FULL_MONTH_NAMES, start=1)},
}


def parse_month(month: Optional[str]) -> Optional[int]:
    """
    Month filter value to a calendar month number.

    Raises:
        ValueError: If the value is neither 'All' nor a month abbreviation
            or full month name (case-insensitive)
    """
    if not month or month == ALL_MONTHS:
        return None
    number = _MONTH_LOOKUP.get(month.strip().lower())
    if number is None:
        raise ValueError(f"Unknown month '{month}'")
    return number


def share_items(totals: Dict[str, float], currency: bool = True) -> List[Dict[str, Any]]:
    """Name/value/share/label items in insertion order."""
    grand_total = sum(totals.values())
    return [
        {
            "name": name,
            "value": round(value, 2),
            "share": percentage(value, grand_total),
            "label": format_inr(value) if currency else str(int(value)),
        }
        for name, value in totals.items()
    ]


async def build_financial_report(
    supabase_client: Client,
    year: int,
    month: Optional[str] = None
) -> Dict[str, Any]:
    month_number = parse_month(month)
    budgets = await get_budgets(supabase_client, year=year)

    by_department = {department: 0.0 for department in DEPARTMENTS}
    monthly = {m: {"revenue": 0.0, "expense": 0.0} for m in FINANCIAL_YEAR_MONTHS}

    for line in budgets:
        line_month = int(line.get("month") or 0)
        revenue = float(line.get("actual_revenue") or 0)
        if line_month in monthly:
            monthly[line_month]["revenue"] += revenue
            monthly[line_month]["expense"] += float(line.get("actual_cost") or 0)
        if month_number is None or line_month == month_number:
            department = str(line.get("department") or "")
            by_department[department] = by_department.get(department, 0.0) + revenue

    total_revenue = sum(by_department.values())

    return {
        "financial_year": year,
        "month": month or ALL_MONTHS,
        "total_revenue": round(total_revenue, 2),
        "total_revenue_label": format_inr(total_revenue),
        "revenue_by_department": share_items(by_department),
        "monthly": [
            {
                "month": MONTH_ABBREVIATIONS[m],
                "revenue": round(monthly[m]["revenue"], 2),
                "expense": round(monthly[m]["expense"], 2),
            }
            for m in FINANCIAL_YEAR_MONTHS
        ],
    }


async def build_project_report(supabase_client: Client) -> Dict[str, Any]:
    result = supabase_client.table("projects").select("status, category").execute()
    projects = cast(List[Dict[str, Any]], result.data or [])

    by_status: Dict[str, float] = {label: 0 for label in PROJECT_STATUS_LABELS.values()}
    by_category: Dict[str, float] = {department: 0 for department in DEPARTMENTS}
    for project in projects:
        status = str(project.get("status") or "inprogress")
        label = PROJECT_STATUS_LABELS.get(status, capitalize_label(status))
        by_status[label] = by_status.get(label, 0) + 1
        category = str(project.get("category") or "")
        if category:
            by_category[category] = by_category.get(category, 0) + 1

    logger.info(f"Project report built from {len(projects)} projects")

    return {
        "total_projects": len(projects),
        "by_status": share_items(by_status, currency=False),
        "by_category": share_items(by_category, currency=False),
    }


async def build_employee_report(supabase_client: Client) -> Dict[str, Any]:
    result = supabase_client.table("employees").select("department, utilization").execute()
    employees = cast(List[Dict[str, Any]], result.data or [])

    grouped: Dict[str, List[float]] = {department: [] for department in DEPARTMENTS}
    for employee in employees:
        department = str(employee.get("department") or "")
        if department:
            grouped.setdefault(department, []).append(float(employee.get("utilization") or 0))

    def _average(values: List[float]) -> float:
        return round(sum(values) / len(values), 1) if values else 0.0

    all_values = [value for values in grouped.values() for value in values]

    return {
        "total_employees": len(employees),
        "average_utilization": _average(all_values),
        "by_department": [
            {
                "department": department,
                "headcount": len(values),
                "average_utilization": _average(values),
            }
            for department, values in grouped.items()
        ],
    }


async def build_client_report(
    supabase_client: Client,
    year: int,
    month: Optional[str] = None
) -> Dict[str, Any]:
    month_number = parse_month(month)
    invoices = await get_invoices(supabase_client, year)

    revenue_by_client: Dict[str, float] = {}
    for invoice in invoices:
        if invoice.get("status") != "paid":
            continue
        paid_date = invoice.get("paid_date") or invoice.get("due_date") or ""
        if month_number is not None and (len(paid_date) < 7 or int(paid_date[5:7]) != month_number):
            continue
        revenue_by_client[invoice["client"]] = revenue_by_client.get(invoice["client"], 0.0) + invoice["amount"]

    result = supabase_client.table("clients").select("status").execute()
    clients_by_status: Dict[str, float] = {"Active": 0, "Inactive": 0, "Prospect": 0}
    for row in cast(List[Dict[str, Any]], result.data or []):
        label = capitalize_label(row.get("status") or "prospect")
        clients_by_status[label] = clients_by_status.get(label, 0) + 1

    ranked = dict(sorted(revenue_by_client.items(), key=lambda item: item[1], reverse=True))

    return {
        "financial_year": year,
        "month": month or ALL_MONTHS,
        "revenue_by_client": share_items(ranked),
        "clients_by_status": share_items(clients_by_status, currency=False),
    }
