"""
Tests for the project service.
"""

from datetime import date

import pytest

from command_centre.services.project_service import (
    assign_project,
    create_project,
    get_all_projects,
    to_project_view,
    update_project,
)


PROJECT_ROW = {
    "id": 5,
    "name": "Website Redesign",
    "description": "ABC Retail",
    "category": "Development",
    "status": "awaitingPO",
    "start_date": "2025-04-01",
    "end_date": None,
    "estimated_cost": "150000",
}


def test_view_uses_description_as_client():
    view = to_project_view(PROJECT_ROW)
    assert view["id"] == "5"
    assert view["client"] == "ABC Retail"
    assert view["status_label"] == "Awaiting PO"
    assert view["estimated_cost"] == 150000.0
    assert view["end_date"] is None


def test_view_without_client():
    assert to_project_view({"id": 1, "name": "Internal"})["client"] == "N/A"


@pytest.mark.asyncio
async def test_list_filters_in_query_and_searches_client(supabase_factory, query_factory):
    rows = [PROJECT_ROW, {**PROJECT_ROW, "id": 6, "name": "SEO Sprint", "description": "Zen Foods"}]
    query = query_factory(rows)
    supabase = supabase_factory({"projects": query})

    projects = await get_all_projects(supabase, search="zen", category="Development", status="awaitingPO")

    query.eq.assert_any_call("category", "Development")
    query.eq.assert_any_call("status", "awaitingPO")
    query.order.assert_called_once_with("created_at", desc=True)
    assert [p["id"] for p in projects] == ["6"]


@pytest.mark.asyncio
async def test_create_stores_client_in_description(supabase_factory, query_factory):
    query = query_factory([PROJECT_ROW])
    supabase = supabase_factory({"projects": query})

    await create_project(supabase, "Website Redesign", client="ABC Retail", start_date=date(2025, 4, 1))

    inserted = query.insert.call_args[0][0]
    assert inserted["description"] == "ABC Retail"
    assert inserted["start_date"] == "2025-04-01"
    assert inserted["status"] == "inprogress"


@pytest.mark.asyncio
async def test_update_serializes_dates(supabase_factory, query_factory):
    query = query_factory([PROJECT_ROW])
    supabase = supabase_factory({"projects": query})

    await update_project(supabase, "5", end_date=date(2025, 12, 31))

    query.update.assert_called_once_with({"end_date": "2025-12-31"})


@pytest.mark.asyncio
async def test_assign_includes_role_when_given(supabase_factory, query_factory):
    query = query_factory([{"employee_id": "emp-1", "project_id": "5"}])
    supabase = supabase_factory({"employee_projects": query})

    await assign_project(supabase, "emp-1", "5", role_in_project="Lead developer")
    await assign_project(supabase, "emp-1", "5")

    first, second = [call.args[0] for call in query.insert.call_args_list]
    assert first["role_in_project"] == "Lead developer"
    assert "role_in_project" not in second
    assert "assigned_at" in second
