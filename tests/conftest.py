"""
Pytest configuration for Agency Command Centre backend tests.

Sets up test environment and global fixtures.
"""
import os
from typing import Any, Callable, Dict, List, Optional

import pytest
from unittest.mock import MagicMock

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")
os.environ.setdefault("RESEND_API_KEY", "test-resend-key")

QUERY_METHODS = ("select", "eq", "gte", "lte", "order", "range", "insert", "update", "delete")


def make_query(data: Optional[List[Dict[str, Any]]] = None) -> MagicMock:
    """
    Chainable stand-in for a postgrest query builder.

    Every builder method returns the same mock, so calls can be asserted on
    it directly; execute() returns an object whose .data is `data`.
    """
    query = MagicMock()
    for method in QUERY_METHODS:
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data if data is not None else [])
    return query


@pytest.fixture
def supabase_factory() -> Callable[..., MagicMock]:
    """
    Build a mock Supabase client from {table_name: query_mock}.

    Tables not listed get an empty query on first use and are added to the
    dict, so tests can inspect them afterwards.
    """
    def _factory(tables: Optional[Dict[str, MagicMock]] = None) -> MagicMock:
        registry = tables if tables is not None else {}
        client = MagicMock()
        client.table.side_effect = lambda name: registry.setdefault(name, make_query())
        client.tables = registry
        return client

    return _factory


@pytest.fixture
def query_factory() -> Callable[..., MagicMock]:
    return make_query


@pytest.fixture
def supabase_client():
    """
    Plain mock Supabase client.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def client():
    """Create test client for FastAPI app."""
    from fastapi.testclient import TestClient
    from command_centre.main import app

    return TestClient(app)


@pytest.fixture
def as_member():
    """
    Override get_current_member with a member of the given role.

    Usage:
        def test_x(client, as_member):
            as_member("manager")
            client.get("/clients")
    """
    from command_centre.auth.dependencies import CurrentMember, get_current_member
    from command_centre.main import app

    def _override(role: str = "admin", user_id: str = "test-user-id") -> CurrentMember:
        member = CurrentMember(
            user_id=user_id,
            access_token="test-access-token",
            role=role,
            name="Test User",
            email="test.user@agency.com",
        )

        async def mock_get_current_member() -> CurrentMember:
            return member

        app.dependency_overrides[get_current_member] = mock_get_current_member
        return member

    yield _override

    app.dependency_overrides.clear()
