"""
Tests for the finance service.

Covers financial-year arithmetic, invoice flattening and status changes,
the overview, aging buckets, profitability and the budget-vs-actual trend.
"""

from datetime import date

import pytest

from command_centre.services.finance_service import (
    build_aging,
    build_budget_vs_actual,
    build_profitability,
    build_summary,
    create_budget,
    financial_month_index,
    financial_year_bounds,
    financial_year_of,
    flatten_invoice,
    get_invoices,
    update_invoice_status,
)


def _invoice(**overrides):
    base = {
        "id": "inv-1",
        "client": "ABC Retail",
        "project_id": "p-1",
        "project_name": "Website",
        "amount": 100000.0,
        "due_date": "2025-06-15",
        "paid_date": None,
        "status": "pending",
    }
    return {**base, **overrides}


def _budget(month, department="Development", **overrides):
    base = {
        "financial_year": 2025,
        "month": month,
        "department": department,
        "budget_revenue": 100000,
        "budget_cost": 60000,
        "actual_revenue": 90000,
        "actual_cost": 66000,
    }
    return {**base, **overrides}


class TestFinancialYear:
    def test_bounds(self):
        assert financial_year_bounds(2025) == (date(2025, 4, 1), date(2026, 3, 31))

    @pytest.mark.parametrize(
        "day, expected",
        [(date(2025, 4, 1), 2025), (date(2026, 3, 31), 2025), (date(2025, 12, 31), 2025), (date(2025, 1, 5), 2024)],
    )
    def test_year_of(self, day, expected):
        assert financial_year_of(day) == expected

    def test_month_index(self):
        assert financial_month_index(date(2025, 4, 10)) == 0
        assert financial_month_index(date(2026, 1, 10)) == 9
        assert financial_month_index(date(2026, 3, 10)) == 11


class TestInvoices:
    def test_flatten_uses_embedded_names(self):
        row = {
            "id": 7,
            "amount": "850000",
            "status": "paid",
            "due_date": "2025-05-01",
            "paid_date": "2025-05-03",
            "clients": {"name": "ABC Retail"},
            "projects": {"name": "Website Redesign"},
        }
        flat = flatten_invoice(row)
        assert flat["id"] == "7"
        assert flat["client"] == "ABC Retail"
        assert flat["project_name"] == "Website Redesign"
        assert flat["amount_label"] == "₹8,50,000"

    def test_flatten_defaults_when_names_missing(self):
        flat = flatten_invoice({"id": "i", "amount": None, "clients": None, "projects": None})
        assert flat["client"] == "Unknown"
        assert flat["project_name"] == "-"
        assert flat["status"] == "pending"
        assert flat["notes"] == ""

    @pytest.mark.asyncio
    async def test_get_invoices_filters_by_financial_year(self, supabase_factory, query_factory):
        query = query_factory([{"id": "i-1", "amount": 10, "status": "pending"}])
        supabase = supabase_factory({"client_invoices": query})

        invoices = await get_invoices(supabase, 2025)

        assert len(invoices) == 1
        query.gte.assert_called_once_with("due_date", "2025-04-01")
        query.lte.assert_called_once_with("due_date", "2026-03-31")
        query.order.assert_called_once_with("due_date")

    @pytest.mark.asyncio
    async def test_mark_paid_stamps_today(self, supabase_factory, query_factory):
        query = query_factory([{"id": "i-1", "status": "paid", "paid_date": "2025-10-19"}])
        supabase = supabase_factory({"client_invoices": query})

        result = await update_invoice_status(supabase, "i-1", "paid", today=date(2025, 10, 19))

        query.update.assert_called_once_with({"status": "paid", "paid_date": "2025-10-19"})
        query.eq.assert_called_once_with("id", "i-1")
        assert result["paid_date"] == "2025-10-19"

    @pytest.mark.asyncio
    async def test_other_status_clears_paid_date(self, supabase_factory, query_factory):
        query = query_factory([{"id": "i-1", "status": "pending"}])
        supabase = supabase_factory({"client_invoices": query})

        await update_invoice_status(supabase, "i-1", "pending", today=date(2025, 10, 19))

        query.update.assert_called_once_with({"status": "pending", "paid_date": None})

    @pytest.mark.asyncio
    async def test_missing_invoice_returns_none(self, supabase_factory):
        supabase = supabase_factory()
        assert await update_invoice_status(supabase, "nope", "paid") is None


class TestSummary:
    def test_totals_and_breakdowns(self):
        invoices = [
            _invoice(id="a", status="paid", amount=300000, paid_date="2025-05-10", client="ABC Retail"),
            _invoice(id="b", status="paid", amount=100000, paid_date="2025-06-01", client="Zen Foods"),
            _invoice(id="c", status="pending", amount=50000),
            _invoice(id="d", status="overdue", amount=25000),
        ]
        budgets = [
            _budget(4, "Development", actual_revenue=300000, actual_cost=120000),
            _budget(5, "Social", actual_revenue=100000, actual_cost=80000),
        ]

        summary = build_summary(invoices, budgets, 2025)

        assert summary["total_revenue"] == 400000
        assert summary["pending_payments"] == 50000
        assert summary["overdue_payments"] == 25000
        assert summary["total_expenses"] == 200000
        assert summary["total_profit"] == 200000
        assert summary["client_breakdown"][0] == {"name": "ABC Retail", "value": 300000, "share": 75}
        assert {d["name"]: d["share"] for d in summary["department_breakdown"]} == {
            "Development": 75,
            "Social": 25,
        }

    def test_monthly_trend_in_financial_order(self):
        invoices = [_invoice(status="paid", amount=1000, paid_date="2026-01-20")]
        summary = build_summary(invoices, [_budget(1, actual_cost=400)], 2025)

        months = [point["month"] for point in summary["monthly_trend"]]
        assert months[0] == "Apr" and months[-1] == "Mar"
        january = summary["monthly_trend"][9]
        assert january == {"month": "Jan", "revenue": 1000, "expense": 400}

    def test_empty_year(self):
        summary = build_summary([], [], 2025)
        assert summary["total_profit"] == 0
        assert summary["client_breakdown"] == []


class TestAging:
    def test_buckets_and_top_overdue(self):
        today = date(2025, 10, 19)
        invoices = [
            _invoice(id="a", status="overdue", amount=10000, due_date="2025-10-01"),  # 18 days
            _invoice(id="b", status="overdue", amount=20000, due_date="2025-09-19"),  # 30 days
            _invoice(id="c", status="overdue", amount=30000, due_date="2025-09-18"),  # 31 days
            _invoice(id="d", status="overdue", amount=40000, due_date="2025-08-19"),  # 61 days
            _invoice(id="e", status="pending", amount=99999, due_date="2025-01-01"),
        ]

        aging = build_aging(invoices, today)

        assert aging["buckets"] == [
            {"bucket": "0-30", "value": 30000},
            {"bucket": "31-60", "value": 30000},
            {"bucket": "61+", "value": 40000},
        ]
        assert [row["id"] for row in aging["top_overdue"]] == ["d", "c", "b", "a"]
        assert aging["top_overdue"][0]["days_overdue"] == 61

    def test_top_overdue_limited_to_five(self):
        invoices = [
            _invoice(id=str(i), status="overdue", amount=1000 * i, due_date="2025-10-01")
            for i in range(1, 8)
        ]
        aging = build_aging(invoices, date(2025, 10, 19))
        assert [row["id"] for row in aging["top_overdue"]] == ["7", "6", "5", "4", "3"]

    def test_future_due_date_counts_as_zero_days(self):
        aging = build_aging([_invoice(status="overdue", due_date="2025-11-01")], date(2025, 10, 19))
        assert aging["top_overdue"][0]["days_overdue"] == 0
        assert aging["buckets"][0]["value"] == 100000


class TestProfitability:
    def test_revenue_cost_margin(self):
        invoices = [
            _invoice(id="a", project_id="p-1", status="paid", amount=200000),
            _invoice(id="b", project_id="p-1", status="pending", amount=50000),
        ]
        projects = [
            {"id": "p-1", "name": "Website", "estimated_cost": 150000},
            {"id": "p-2", "name": "SEO", "estimated_cost": 40000, "description": "Zen Foods"},
            {"id": "p-3", "name": "Idle", "estimated_cost": None},
        ]

        rows = build_profitability(invoices, projects)

        assert [r["project_id"] for r in rows] == ["p-1", "p-2"]
        website, seo = rows
        assert website["revenue"] == 200000
        assert website["profit"] == 50000
        assert website["margin"] == 25
        assert website["client_name"] == "ABC Retail"
        assert seo["margin"] is None
        assert seo["client_name"] == "Zen Foods"


class TestBudgetVsActual:
    def test_current_year_splits_actual_and_projected(self):
        budgets = [_budget(month) for month in (4, 5, 6, 7, 8, 9, 10, 11, 12, 1, 2, 3)]

        points = build_budget_vs_actual(budgets, 2025, today=date(2025, 10, 19))

        assert len(points) == 12
        october = points[6]
        assert october["month"] == "Oct"
        assert october["actual_revenue"] == 90000
        assert october["revenue_variance"] == -10000
        assert october["revenue_variance_pct"] == -10
        assert october["cost_variance"] == 6000
        assert october["cost_variance_pct"] == 10
        assert "projected_revenue" not in october

        november = points[7]
        assert "actual_revenue" not in november
        assert november["projected_revenue"] == 100000
        assert november["projected_cost"] == 60000

    def test_past_year_fully_actual(self):
        points = build_budget_vs_actual([_budget(3, financial_year=2024)], 2024, today=date(2025, 10, 19))
        assert all("actual_revenue" in p for p in points)
        assert points[-1]["actual_revenue"] == 90000

    def test_future_year_fully_projected(self):
        points = build_budget_vs_actual([], 2026, today=date(2025, 10, 19))
        assert all("projected_revenue" in p and "actual_revenue" not in p for p in points)

    def test_all_departments_sums(self):
        budgets = [_budget(4, "Development"), _budget(4, "Social"), _budget(4, "Social", financial_year=2024)]

        combined = build_budget_vs_actual(budgets, 2025, today=date(2025, 10, 19))
        social = build_budget_vs_actual(budgets, 2025, department="Social", today=date(2025, 10, 19))

        assert combined[0]["budget_revenue"] == 200000
        assert social[0]["budget_revenue"] == 100000

    def test_variance_pct_none_without_budget(self):
        points = build_budget_vs_actual(
            [_budget(4, budget_revenue=0, budget_cost=0)], 2025, today=date(2025, 10, 19)
        )
        assert points[0]["revenue_variance_pct"] is None
        assert points[0]["revenue_variance"] == 90000


class TestCreateBudget:
    @pytest.mark.asyncio
    async def test_inserts_line(self, supabase_factory, query_factory):
        query = query_factory([{"id": "b-1", "financial_year": 2025, "month": 4}])
        supabase = supabase_factory({"budgets": query})

        created = await create_budget(supabase, 2025, 4, "Social", 100000, 60000)

        assert created["id"] == "b-1"
        inserted = query.insert.call_args[0][0]
        assert inserted["department"] == "Social"
        assert inserted["actual_cost"] is None

    @pytest.mark.asyncio
    async def test_no_row_raises(self, supabase_factory):
        with pytest.raises(Exception, match="Failed to create budget"):
            await create_budget(supabase_factory(), 2025, 4, "Social", 1, 1)
