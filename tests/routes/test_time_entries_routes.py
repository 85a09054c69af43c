"""
Tests for /time-entries endpoints.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import pytest


ENTRY = {
    "id": "t-1",
    "employee_id": "emp-1",
    "project_id": "p-1",
    "project_name": "Website",
    "entry_date": "2025-07-01",
    "hours": 3.0,
    "notes": "Homepage",
    "created_at": None,
}


@pytest.fixture
def mock_supabase():
    with patch("command_centre.routes.time_entries.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


class TestLogTime:
    def test_entry_belongs_to_caller(self, client, as_member, mock_supabase):
        as_member("employee", user_id="emp-1")
        with patch("command_centre.routes.time_entries.log_time_entry", new_callable=AsyncMock) as mock_log:
            mock_log.return_value = {"entry": ENTRY, "day_total_hours": 7.5}
            response = client.post(
                "/time-entries",
                json={"project_id": "p-1", "hours": 3, "notes": "Homepage", "entry_date": "2025-07-01"},
            )

        assert response.status_code == 201
        body = response.json()
        assert body["day_total_hours"] == 7.5
        kwargs = mock_log.call_args.kwargs
        assert kwargs["employee_id"] == "emp-1"
        assert kwargs["entry_date"] == date(2025, 7, 1)

    @pytest.mark.parametrize("hours", [0, 25])
    def test_hours_range(self, client, as_member, mock_supabase, hours):
        as_member("employee")
        response = client.post("/time-entries", json={"project_id": "p-1", "hours": hours})
        assert response.status_code == 422

    def test_requires_token(self, client):
        assert client.post("/time-entries", json={"project_id": "p-1", "hours": 1}).status_code == 401


class TestListTime:
    def test_own_entries_for_day(self, client, as_member, mock_supabase):
        as_member("employee", user_id="emp-1")
        with patch("command_centre.routes.time_entries.get_time_entries", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = [ENTRY, {**ENTRY, "id": "t-2", "hours": 4.5}]
            response = client.get("/time-entries", params={"date": "2025-07-01"})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["total_hours"] == 7.5
        assert mock_get.call_args.kwargs["employee_id"] == "emp-1"
        assert mock_get.call_args.kwargs["entry_date"] == date(2025, 7, 1)

    @pytest.mark.parametrize("role", ["employee", "teamlead"])
    def test_cannot_read_others(self, client, as_member, mock_supabase, role):
        as_member(role, user_id="emp-1")
        response = client.get("/time-entries", params={"employee_id": "emp-2"})
        assert response.status_code == 403

    def test_manager_reads_others(self, client, as_member, mock_supabase):
        as_member("manager")
        with patch("command_centre.routes.time_entries.get_time_entries", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = []
            response = client.get("/time-entries", params={"employee_id": "emp-2"})

        assert response.status_code == 200
        assert mock_get.call_args.kwargs["employee_id"] == "emp-2"

    def test_reversed_range(self, client, as_member, mock_supabase):
        as_member("employee")
        response = client.get("/time-entries", params={"start_date": "2025-07-10", "end_date": "2025-07-01"})
        assert response.status_code == 400


class TestSummary:
    def test_summary(self, client, as_member, mock_supabase):
        as_member("employee", user_id="emp-1")
        with patch("command_centre.routes.time_entries.get_time_entries", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = [ENTRY, {**ENTRY, "id": "t-2", "project_id": "p-2", "project_name": "SEO", "hours": 5}]
            response = client.get("/time-entries/summary", params={"start_date": "2025-07-01", "end_date": "2025-07-07"})

        assert response.status_code == 200
        body = response.json()
        assert body["employee_id"] == "emp-1"
        assert body["total_hours"] == 8
        assert body["by_project"][0]["project_name"] == "SEO"
        assert body["daily"] == [{"entry_date": "2025-07-01", "hours": 8.0}]
