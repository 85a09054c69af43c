"""
Tests for report aggregation and the dashboard overview.
"""

import pytest

from command_centre.services.dashboard_service import build_overview, get_dashboard_data
from command_centre.services.report_service import (
    build_client_report,
    build_employee_report,
    build_financial_report,
    build_project_report,
    parse_month,
    share_items,
)


class TestParseMonth:
    @pytest.mark.parametrize("value", [None, "", "All"])
    def test_all_months(self, value):
        assert parse_month(value) is None

    def test_abbreviation_and_full_name(self):
        assert parse_month("Apr") == 4
        assert parse_month("january") == 1

    @pytest.mark.parametrize("value", ["Smarch", "Marchxyz", "Mayday", "Ja", "13"])
    def test_unknown(self, value):
        with pytest.raises(ValueError):
            parse_month(value)


def test_share_items_labels():
    items = share_items({"A": 75000.0, "B": 25000.0})
    assert items[0] == {"name": "A", "value": 75000.0, "share": 75, "label": "₹75,000"}
    assert share_items({"Active": 3}, currency=False)[0]["label"] == "3"


class TestFinancialReport:
    @pytest.mark.asyncio
    async def test_department_revenue_for_month(self, supabase_factory, query_factory):
        budgets = [
            {"financial_year": 2025, "month": 4, "department": "Development", "actual_revenue": 300000, "actual_cost": 100000},
            {"financial_year": 2025, "month": 5, "department": "Social", "actual_revenue": 100000, "actual_cost": 50000},
        ]
        supabase = supabase_factory({"budgets": query_factory(budgets)})

        report = await build_financial_report(supabase, 2025, "Apr")

        departments = {item["name"]: item["value"] for item in report["revenue_by_department"]}
        assert departments["Development"] == 300000
        assert departments["Social"] == 0
        assert report["total_revenue"] == 300000
        assert report["total_revenue_label"] == "₹3,00,000"
        # trend always covers the whole year
        assert report["monthly"][1] == {"month": "May", "revenue": 100000, "expense": 50000}

    @pytest.mark.asyncio
    async def test_bad_month(self, supabase_factory):
        with pytest.raises(ValueError):
            await build_financial_report(supabase_factory(), 2025, "Foo")


class TestSnapshotReports:
    @pytest.mark.asyncio
    async def test_project_report(self, supabase_factory, query_factory):
        projects = [
            {"status": "inprogress", "category": "Development"},
            {"status": "inprogress", "category": "Social"},
            {"status": "billed", "category": "Development"},
        ]
        report = await build_project_report(supabase_factory({"projects": query_factory(projects)}))

        statuses = {item["name"]: item["value"] for item in report["by_status"]}
        assert report["total_projects"] == 3
        assert statuses["In Progress"] == 2
        assert statuses["Overdue"] == 0
        categories = {item["name"]: item["share"] for item in report["by_category"]}
        assert categories["Development"] == 67

    @pytest.mark.asyncio
    async def test_employee_report(self, supabase_factory, query_factory):
        employees = [
            {"department": "Development", "utilization": 80},
            {"department": "Development", "utilization": 95},
            {"department": "Social", "utilization": 60},
        ]
        report = await build_employee_report(supabase_factory({"employees": query_factory(employees)}))

        assert report["total_employees"] == 3
        assert report["average_utilization"] == 78.3
        development = next(d for d in report["by_department"] if d["department"] == "Development")
        assert development == {"department": "Development", "headcount": 2, "average_utilization": 87.5}


class TestClientReport:
    @pytest.mark.asyncio
    async def test_paid_revenue_ranked(self, supabase_factory, query_factory):
        invoices = [
            {"id": 1, "amount": 100000, "status": "paid", "paid_date": "2025-05-02", "clients": {"name": "Zen Foods"}},
            {"id": 2, "amount": 300000, "status": "paid", "paid_date": "2025-06-10", "clients": {"name": "ABC Retail"}},
            {"id": 3, "amount": 999999, "status": "pending", "due_date": "2025-06-30", "clients": {"name": "ABC Retail"}},
        ]
        clients = [{"status": "active"}, {"status": "active"}, {"status": "prospect"}]
        supabase = supabase_factory({
            "client_invoices": query_factory(invoices),
            "clients": query_factory(clients),
        })

        report = await build_client_report(supabase, 2025)
        june = await build_client_report(supabase, 2025, "Jun")

        assert [item["name"] for item in report["revenue_by_client"]] == ["ABC Retail", "Zen Foods"]
        assert report["revenue_by_client"][0]["share"] == 75
        assert [item["name"] for item in june["revenue_by_client"]] == ["ABC Retail"]
        statuses = {item["name"]: item["value"] for item in report["clients_by_status"]}
        assert statuses == {"Active": 2, "Inactive": 0, "Prospect": 1}


class TestDashboard:
    @pytest.mark.asyncio
    async def test_fetches_all_tables(self, supabase_factory):
        supabase = supabase_factory()
        data = await get_dashboard_data(supabase)
        assert set(data) == {"employees", "projects", "skills", "employee_projects", "employee_skills"}
        assert set(supabase.tables) == set(data)

    def test_overview(self):
        overview = build_overview({
            "employees": [
                {"department": "Development", "utilization": 90},
                {"department": "Social", "utilization": 75},
            ],
            "projects": [{"status": "inprogress"}, {"status": "overdue"}, {"status": None}],
        })
        assert overview["employee_count"] == 2
        assert overview["active_projects"] == 2
        assert overview["average_utilization"] == 82.5
        assert overview["projects_by_status"]["overdue"] == 1
        assert overview["employees_by_department"]["Performance"] == 0

    def test_overview_empty(self):
        overview = build_overview({})
        assert overview["average_utilization"] == 0.0
        assert overview["project_count"] == 0
