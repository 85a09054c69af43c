"""
Supabase client factory.

Two kinds of clients exist:

1. get_supabase_client(access_token): per-request client carrying the caller's
   JWT. Every table read/write issued on behalf of a signed-in member goes
   through it, so Row Level Security applies.
2. get_service_role_client(): privileged client for the few admin operations
   that have no member session yet (creating auth users, the employee login
   lookup, storing invitations). It bypasses RLS.
"""

import logging

from command_centre.config import settings
from supabase import Client, create_client

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific member.

    Args:
        access_token: The member's JWT access token from Supabase Auth.

    Returns:
        An authenticated Supabase client that enforces RLS.

    Example:
        >>> client = get_supabase_client(member.access_token)
        >>> result = client.table("clients").select("*").execute()
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # The token's 'sub' claim drives auth.uid() in RLS policies
    client.postgrest.auth(access_token)

    logger.debug("Created authenticated Supabase client with member token (RLS enforced)")

    return client


def get_service_role_client() -> Client:
    """
    Create a Supabase client with service_role privileges.

    WARNING: This bypasses RLS. Use it only for admin operations.

    Raises:
        ValueError: If SUPABASE_SERVICE_ROLE_KEY is not configured.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ValueError(
            "SUPABASE_SERVICE_ROLE_KEY is not configured. "
            "Admin operations (add employee, login lookup, invitations) are unavailable."
        )

    logger.debug("Created service-role Supabase client (RLS bypassed)")

    return create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_SERVICE_ROLE_KEY
    )


def get_anon_client() -> Client:
    """
    Create an unauthenticated Supabase client (publishable key only).

    Used for the auth flows that run before a session exists: sign-in,
    sign-up and password reset emails.
    """
    logger.debug("Created anonymous Supabase client")

    return create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )
