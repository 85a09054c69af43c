"""
Tests for /settings endpoints (admin only).
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest


USER = {
    "id": "u-2",
    "name": "Neha Verma",
    "email": "neha@agency.com",
    "role": "manager",
    "role_name": "Manager",
    "avatar": "NV",
    "last_active": None,
}


@pytest.fixture
def mock_supabase():
    with patch("command_centre.routes.settings.get_supabase_client") as mock:
        mock.return_value = MagicMock()
        yield mock


@pytest.mark.parametrize("role", ["manager", "teamlead", "employee"])
def test_non_admins_forbidden(client, as_member, mock_supabase, role):
    as_member(role)
    assert client.get("/settings/roles").status_code == 403
    assert client.get("/settings/users").status_code == 403


def test_roles_matrix(client, as_member):
    as_member("admin")
    response = client.get("/settings/roles")

    assert response.status_code == 200
    roles = response.json()["roles"]
    assert [r["id"] for r in roles] == ["admin", "manager", "teamlead", "employee"]
    assert roles[2]["name"] == "Team Lead"
    assert roles[3]["permissions"]["projects"] == {"view": True, "create": False, "edit": False, "delete": False}


def test_list_users(client, as_member, mock_supabase):
    as_member("admin")
    with patch("command_centre.routes.settings.get_users", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = [USER]
        response = client.get("/settings/users")

    assert response.status_code == 200
    assert response.json()["count"] == 1


def test_change_role(client, as_member, mock_supabase):
    as_member("admin", user_id="u-1")
    with patch("command_centre.routes.settings.update_user_role", new_callable=AsyncMock) as mock_update:
        mock_update.return_value = {**USER, "role": "teamlead", "role_name": "Team Lead"}
        response = client.patch("/settings/users/u-2/role", json={"role": "teamlead"})

    assert response.status_code == 200
    assert response.json()["user"]["role_name"] == "Team Lead"
    mock_update.assert_awaited_once_with(mock_supabase.return_value, "u-2", "teamlead")


def test_admin_cannot_demote_self(client, as_member, mock_supabase):
    as_member("admin", user_id="u-1")
    response = client.patch("/settings/users/u-1/role", json={"role": "employee"})
    assert response.status_code == 400


def test_unknown_role_value(client, as_member, mock_supabase):
    as_member("admin")
    assert client.patch("/settings/users/u-2/role", json={"role": "owner"}).status_code == 422


def test_unknown_user(client, as_member, mock_supabase):
    as_member("admin", user_id="u-1")
    with patch("command_centre.routes.settings.update_user_role", new_callable=AsyncMock) as mock_update:
        mock_update.return_value = None
        response = client.patch("/settings/users/missing/role", json={"role": "manager"})

    assert response.status_code == 404
