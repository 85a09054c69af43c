"""
Onboarding and credential flows around Supabase Auth.

Employees are created with a shared default password. Signing in with it
never yields a session: the member is sent through first-time setup, which
registers (or signs in) with a password of their own.
"""

import logging
from typing import Any, Dict, Optional, cast

from supabase import AuthApiError, Client

from command_centre.config import settings
from command_centre.services.employee_service import find_employee_by_email
from command_centre.utils.passwords import validate_passwords

logger = logging.getLogger(__name__)


class EmployeeNotFoundError(Exception):
    """No employee record exists for the email used to sign in."""


class InvalidCredentialsError(Exception):
    """Supabase Auth rejected the email/password pair."""


class PasswordPolicyError(ValueError):
    """A new password failed the onboarding rules."""


def _session_tokens(session: Any) -> Optional[Dict[str, Any]]:
    if session is None:
        return None
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": getattr(session, "expires_in", None),
        "token_type": getattr(session, "token_type", None) or "bearer",
    }


def _is_already_registered(error: AuthApiError) -> bool:
    code = str(getattr(error, "code", "") or "")
    return code == "user_already_exists" or "already registered" in str(error).lower()


def _check_passwords(new_password: str, confirm_password: str) -> None:
    result = validate_passwords(new_password, confirm_password)
    if not result.is_valid:
        raise PasswordPolicyError(result.error)


async def login(
    admin_client: Client,
    anon_client: Client,
    email: str,
    password: str
) -> Dict[str, Any]:
    """
    Sign an employee in.

    Returns:
        Dict with employee_id, name, email, requires_password_change and
        session (None when the default password was used)

    Raises:
        EmployeeNotFoundError: No employee record for this email
        InvalidCredentialsError: Wrong password
    """
    employee = await find_employee_by_email(admin_client, email)
    if not employee:
        logger.warning(f"Login attempt for unknown employee {email}")
        raise EmployeeNotFoundError("Employee not found")

    identity = {
        "employee_id": str(employee.get("id")),
        "name": str(employee.get("name") or email.split("@")[0]),
        "email": email,
    }

    if password == settings.DEFAULT_EMPLOYEE_PASSWORD:
        logger.info(f"Employee {identity['employee_id']} used the default password, setup required")
        return {**identity, "requires_password_change": True, "session": None}

    try:
        response = anon_client.auth.sign_in_with_password({"email": email, "password": password})
    except AuthApiError as e:
        logger.warning(f"Sign-in failed for {email}: {e}")
        raise InvalidCredentialsError("Invalid email or password") from e

    logger.info(f"Employee {identity['employee_id']} signed in")
    return {
        **identity,
        "requires_password_change": False,
        "session": _session_tokens(response.session),
    }


async def ensure_profile(admin_client: Client, user_id: str, email: str) -> Dict[str, Any]:
    """Return the member's profile, creating an employee-role one if missing."""
    result = admin_client.table("profiles").select("*").eq("id", user_id).execute()
    if result.data:
        return cast(Dict[str, Any], result.data[0])

    profile_data = {
        "id": user_id,
        "email": email,
        "name": email.split("@")[0],
        "role": "employee",
    }
    logger.info(f"Creating missing profile for {user_id}")

    created = admin_client.table("profiles").insert(profile_data).execute()
    if not created.data:
        raise Exception("Failed to create profile: no data returned")
    return cast(Dict[str, Any], created.data[0])


async def first_time_setup(
    admin_client: Client,
    anon_client: Client,
    email: str,
    new_password: str,
    confirm_password: str
) -> Dict[str, Any]:
    """
    Replace the default password with the member's own.

    Only emails that already have an employees row may set up an account.
    Signs up with the new password; if the account already exists, signs in
    with it instead. A profile row is guaranteed afterwards.

    Raises:
        PasswordPolicyError: Passwords rejected
        EmployeeNotFoundError: No employee record for this email
        InvalidCredentialsError: Account exists and the password does not match
    """
    _check_passwords(new_password, confirm_password)

    if not await find_employee_by_email(admin_client, email):
        logger.warning(f"First-time setup attempted for unknown employee {email}")
        raise EmployeeNotFoundError("Employee not found")

    user = None
    session = None
    try:
        response = anon_client.auth.sign_up({
            "email": email,
            "password": new_password,
            "options": {"data": {"name": email.split("@")[0]}},
        })
        user, session = response.user, response.session
    except AuthApiError as e:
        if not _is_already_registered(e):
            raise
        logger.info(f"{email} already registered, signing in instead")

    if user is None:
        try:
            response = anon_client.auth.sign_in_with_password({"email": email, "password": new_password})
        except AuthApiError as e:
            raise InvalidCredentialsError("Account already exists with a different password") from e
        user, session = response.user, response.session

    if user is None:
        raise Exception("Supabase Auth returned no user")

    profile = await ensure_profile(admin_client, str(user.id), email)
    return {"user_id": str(user.id), "profile": profile, "session": _session_tokens(session)}


async def send_password_reset(anon_client: Client, email: str) -> None:
    logger.info(f"Sending password reset email to {email}")
    anon_client.auth.reset_password_for_email(
        email,
        {"redirect_to": settings.PASSWORD_RESET_REDIRECT_URL}
    )


async def change_password(
    admin_client: Client,
    user_id: str,
    new_password: str,
    confirm_password: str
) -> None:
    """
    Set a signed-in member's password.

    Raises:
        PasswordPolicyError: Passwords rejected
    """
    _check_passwords(new_password, confirm_password)

    logger.info(f"Updating password for {user_id}")
    admin_client.auth.admin.update_user_by_id(user_id, {"password": new_password})
