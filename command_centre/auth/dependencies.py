"""
FastAPI dependency functions for authentication.

These functions verify Supabase Auth bearer tokens and resolve the caller's
agency role from the profiles table.

Uses Supabase's JWT Signing Keys (ES256) with public keys fetched from JWKS.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Any, Optional, cast

from fastapi import Depends, Header, HTTPException, status
from jwt import PyJWKClient, decode
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError, PyJWKClientError

from command_centre.config import settings
from command_centre.db.client import get_supabase_client
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

# Caches Supabase's public keys across requests (key rotation handled by PyJWKClient)
_jwks_client: PyJWKClient | None = None

DEFAULT_ROLE = "employee"


@dataclass
class AuthenticatedUser:
    """
    A verified Supabase Auth identity.

    Attributes:
        user_id: The user's UUID from the JWT 'sub' claim
        access_token: The raw JWT (for creating RLS-scoped Supabase clients)
        email: The 'email' claim, when present
    """
    user_id: str
    access_token: str
    email: Optional[str] = None


@dataclass
class CurrentMember:
    """
    An authenticated agency member with their role resolved from profiles.
    """
    user_id: str
    access_token: str
    role: str
    name: str
    email: Optional[str] = None


def get_jwks_client() -> PyJWKClient:
    """
    Get or create the JWKS client instance.

    Raises:
        ValueError: If SUPABASE_URL is not configured
    """
    global _jwks_client

    if _jwks_client is None:
        jwks_url = settings.SUPABASE_JWKS_URL
        if not jwks_url:
            raise ValueError(
                "SUPABASE_URL is not configured. "
                "Cannot construct JWKS URL for JWT verification."
            )

        logger.info(f"Initializing JWKS client with URL: {jwks_url}")
        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
        )

    return _jwks_client


def _unauthorized(error: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "details": details}
    )


def _extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        logger.warning("Missing Authorization header")
        raise _unauthorized("unauthorized", "Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.warning("Invalid Authorization header format")
        raise _unauthorized("unauthorized", "Invalid Authorization header format")

    return parts[1]


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry, audience and issuer of a Supabase access token.

    Returns:
        The verified JWT payload

    Raises:
        HTTPException: 401 for any verification failure
    """
    try:
        jwks_client = get_jwks_client()
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        # Supabase issuer includes the /auth/v1 path
        issuer = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1"

        return decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience="authenticated",
            issuer=issuer,
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_aud": True,
                "verify_iss": True,
            }
        )

    except ExpiredSignatureError:
        logger.warning("Token has expired")
        raise _unauthorized("token_expired", "Authentication token has expired")

    except PyJWKClientError as e:
        logger.error(f"JWKS client error: {str(e)}")
        raise _unauthorized("jwks_error", "Unable to verify token signature")

    except InvalidTokenError as e:
        logger.warning(f"Invalid token: {str(e)}")
        raise _unauthorized("invalid_token", "Invalid authentication token")

    except ValueError as e:
        logger.error(f"Token verification misconfigured: {str(e)}")
        raise _unauthorized("unauthorized", "Token verification failed")


async def get_authenticated_user(
    authorization: Annotated[str | None, Header()] = None
) -> AuthenticatedUser:
    """
    Verify the bearer token and return the caller's identity.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired

    Usage:
        @router.get("/time-entries")
        async def list_entries(
            auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
        ):
            supabase_client = get_supabase_client(auth_user.access_token)
    """
    token = _extract_bearer_token(authorization)
    payload = decode_access_token(token)

    user_id = payload.get("sub")
    if not user_id:
        logger.error("Token payload missing 'sub' claim")
        raise _unauthorized("unauthorized", "Invalid token: missing user ID")

    email = payload.get("email")

    logger.info(f"Token verified successfully for user_id={user_id}")

    return AuthenticatedUser(
        user_id=str(user_id),
        access_token=token,
        email=str(email) if email else None,
    )


def _fetch_profile(access_token: str, user_id: str) -> Optional[dict[str, Any]]:
    supabase_client = get_supabase_client(access_token)
    result = (
        supabase_client.table("profiles")
        .select("id, name, email, role")
        .eq("id", user_id)
        .execute()
    )
    if not result.data:
        return None
    return cast(dict[str, Any], result.data[0])


async def get_current_member(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> CurrentMember:
    """
    Resolve the caller's agency role.

    A member without a profiles row (e.g. a freshly signed-up employee) is
    treated as role 'employee' named after their email's local part.

    Raises:
        HTTPException: 500 if the profile lookup itself fails
    """
    try:
        profile = _fetch_profile(auth_user.access_token, auth_user.user_id)
    except Exception as e:
        logger.error(f"Failed to load profile for user_id={auth_user.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "profile_error", "details": failure_details("Failed to resolve member role", e)}
        )

    fallback_name = (auth_user.email or "").split("@")[0] or "User"

    if not profile:
        logger.info(f"No profile for user_id={auth_user.user_id}, defaulting to role '{DEFAULT_ROLE}'")
        return CurrentMember(
            user_id=auth_user.user_id,
            access_token=auth_user.access_token,
            role=DEFAULT_ROLE,
            name=fallback_name,
            email=auth_user.email,
        )

    return CurrentMember(
        user_id=auth_user.user_id,
        access_token=auth_user.access_token,
        role=str(profile.get("role") or DEFAULT_ROLE),
        name=str(profile.get("name") or fallback_name),
        email=profile.get("email") or auth_user.email,
    )
