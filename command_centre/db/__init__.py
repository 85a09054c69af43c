"""
Database access layer for the Agency Command Centre backend.

The backing schema (tables, foreign keys, enums, RLS policies) is owned by
Supabase. This layer only builds clients; table access lives in the services.
"""

from .client import get_anon_client, get_service_role_client, get_supabase_client

__all__ = ["get_supabase_client", "get_service_role_client", "get_anon_client"]
