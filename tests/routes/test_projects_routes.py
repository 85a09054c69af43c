"""
Tests for /projects and /invitations endpoints.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from postgrest.exceptions import APIError


PROJECT_VIEW = {
    "id": "p-1",
    "name": "Website Redesign",
    "client": "ABC Retail",
    "description": "ABC Retail",
    "category": "Development",
    "status": "inprogress",
    "status_label": "In Progress",
    "start_date": "2025-04-01",
    "end_date": None,
    "estimated_cost": 150000.0,
    "created_at": None,
}


@pytest.fixture
def mock_supabase():
    with patch("command_centre.routes.projects.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


class TestProjects:
    def test_list_with_filters(self, client, as_member, mock_supabase):
        as_member("employee")
        with patch("command_centre.routes.projects.get_all_projects", new_callable=AsyncMock) as mock_list:
            mock_list.return_value = [PROJECT_VIEW]
            response = client.get("/projects", params={"status": "inprogress", "category": "Development"})

        assert response.status_code == 200
        assert response.json()["projects"][0]["status_label"] == "In Progress"
        assert mock_list.call_args.kwargs == {"search": None, "category": "Development", "status": "inprogress"}

    def test_unknown_status_filter(self, client, as_member, mock_supabase):
        as_member("admin")
        assert client.get("/projects", params={"status": "done"}).status_code == 422

    def test_teamlead_creates(self, client, as_member, mock_supabase):
        as_member("teamlead")
        with patch("command_centre.routes.projects.create_project", new_callable=AsyncMock) as mock_create:
            mock_create.return_value = PROJECT_VIEW
            response = client.post("/projects", json={"name": "Website Redesign", "client": "ABC Retail"})

        assert response.status_code == 201
        assert mock_create.call_args.kwargs["client"] == "ABC Retail"

    def test_employee_cannot_create(self, client, as_member, mock_supabase):
        as_member("employee")
        assert client.post("/projects", json={"name": "Website Redesign"}).status_code == 403

    def test_end_before_start(self, client, as_member, mock_supabase):
        as_member("admin")
        response = client.post(
            "/projects",
            json={"name": "Website Redesign", "start_date": "2025-05-02", "end_date": "2025-05-01"},
        )
        assert response.status_code == 422

    def test_update_end_before_start(self, client, as_member, mock_supabase):
        as_member("admin")
        with patch("command_centre.routes.projects.update_project", new_callable=AsyncMock) as mock_update:
            response = client.patch(
                "/projects/p-1",
                json={"start_date": "2025-06-01", "end_date": "2025-01-01"},
            )

        assert response.status_code == 422
        mock_update.assert_not_called()

    def test_assign_twice(self, client, as_member, mock_supabase):
        as_member("manager")
        with patch("command_centre.routes.projects.assign_project", new_callable=AsyncMock) as mock_assign:
            mock_assign.side_effect = APIError({"code": "23505", "message": "duplicate key value"})
            response = client.post("/projects/assign", json={"employee_id": "emp-1", "project_id": "p-1"})

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "already_assigned"

    def test_assign_unknown_project_keeps_message(self, client, as_member, mock_supabase):
        as_member("manager")
        with patch("command_centre.routes.projects.assign_project", new_callable=AsyncMock) as mock_assign:
            mock_assign.side_effect = APIError({
                "message": 'insert or update on table "employee_projects" violates foreign key constraint',
                "code": "23503",
            })
            response = client.post("/projects/assign", json={"employee_id": "emp-1", "project_id": "p-404"})

        assert response.status_code == 500
        assert response.json()["detail"] == {
            "error": "create_error",
            "details": 'Failed to assign project: insert or update on table "employee_projects" '
                       'violates foreign key constraint',
        }

    def test_update_empty_and_missing(self, client, as_member, mock_supabase):
        as_member("admin")
        assert client.patch("/projects/p-1", json={}).status_code == 400

        with patch("command_centre.routes.projects.update_project", new_callable=AsyncMock) as mock_update:
            mock_update.return_value = None
            response = client.patch("/projects/missing", json={"status": "billed"})

        assert response.status_code == 404


class TestInvitations:
    PAYLOAD = {
        "employee_id": "emp-1",
        "employee_email": "priya@agency.com",
        "invited_by": "HR Team",
        "signup_url": "https://app.example.com/login",
    }

    def test_email_failure_still_created(self, client, as_member):
        as_member("admin")
        with patch("command_centre.routes.invitations.get_service_role_client") as mock_admin, \
             patch("command_centre.routes.invitations.create_invitation", new_callable=AsyncMock) as mock_invite:
            mock_admin.return_value = MagicMock()
            mock_invite.return_value = {
                "invitation": {"id": "inv-1"},
                "email_sent": False,
                "email_send_error": {"message": "Email provider rejected the message", "status_code": 403, "body": None},
            }
            response = client.post("/invitations", json=self.PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["email_sent"] is False
        assert body["email_send_error"]["status_code"] == 403
        assert mock_invite.call_args.kwargs["employee_email"] == "priya@agency.com"

    def test_teamlead_cannot_invite(self, client, as_member):
        as_member("teamlead")
        assert client.post("/invitations", json=self.PAYLOAD).status_code == 403
