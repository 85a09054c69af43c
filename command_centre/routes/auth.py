"""
Auth API endpoints.

Endpoints:
- GET /auth/me - Identity, role, navigation and permissions
- GET /auth/route-access - Whether the caller may open a dashboard page
- POST /auth/login - Employee sign-in (default password triggers setup)
- POST /auth/first-time-setup - Replace the default password
- POST /auth/password-reset - Send a password reset email
- POST /auth/password - Change the caller's password

/auth/login, /auth/first-time-setup and /auth/password-reset are public;
the others require a valid Bearer token.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from supabase import AuthApiError

from command_centre.auth.access import (
    PERMISSIONS,
    ROLE_NAMES,
    navigation_items,
    resolve_route,
)
from command_centre.auth.dependencies import CurrentMember, get_current_member
from command_centre.db.client import get_anon_client, get_service_role_client
from command_centre.schemas.auth import (
    AuthActionResponse,
    AuthMeResponse,
    FirstTimeSetupRequest,
    LoginRequest,
    LoginResponse,
    NavItemResponse,
    PasswordChangeRequest,
    PasswordResetRequest,
    RouteAccessResponse,
    SessionTokens,
)
from command_centre.services.auth_service import (
    EmployeeNotFoundError,
    InvalidCredentialsError,
    PasswordPolicyError,
    change_password,
    first_time_setup,
    login,
    send_password_reset,
)
from command_centre.utils.errors import error_message, failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

Member = Annotated[CurrentMember, Depends(get_current_member)]


def _password_rejected(e: PasswordPolicyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "invalid_password", "details": str(e)}
    )


@router.get(
    "/me",
    response_model=AuthMeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get authenticated member",
    description="""
    Return the caller's identity together with what their role unlocks.

    This endpoint:
    - Resolves the role from profiles (employee when no profile exists)
    - Lists the sidebar navigation for that role
    - Returns the role's row of the permission matrix

    Security:
    - Requires valid Authorization Bearer token
    """
)
async def get_me(member: Member) -> AuthMeResponse:
    """
    Get authenticated member.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - get_current_member (token + profile role)

    Step 2: Parse/Validate Request
    - No request body

    Step 3: Domain & Intent Filter
    - N/A

    Step 4: Call Service
    - navigation_items(), PERMISSIONS lookup

    Step 5: Map Output -> ResponseModel
    - AuthMeResponse

    Step 6: Persistence
    - Read-only operation
    """
    logger.info(f"Auth /me requested by {member.user_id} (role={member.role})")

    return AuthMeResponse(
        user_id=member.user_id,
        email=member.email,
        name=member.name,
        role=member.role,
        role_name=ROLE_NAMES.get(member.role, member.role),
        navigation=[NavItemResponse(label=item.label, href=item.href) for item in navigation_items(member.role)],
        permissions=PERMISSIONS.get(member.role, {}),
    )


@router.get(
    "/route-access",
    response_model=RouteAccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Check access to a dashboard page",
)
async def check_route_access(
    member: Member,
    path: str = Query(..., min_length=1, description="Dashboard path, e.g. /reports"),
) -> RouteAccessResponse:
    decision = resolve_route(member.role, path)
    return RouteAccessResponse(
        path=path,
        allowed=decision.allowed,
        redirect_to=decision.redirect_to,
        reason=decision.reason,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Employee sign-in",
    description="""
    Sign an employee in with email and password.

    This endpoint:
    - Looks the employee up by email (404 if unknown)
    - Returns requires_password_change=true, without a session, for the
      default password
    - Otherwise signs in through Supabase Auth (401 on a wrong password)

    Security:
    - Public endpoint
    """
)
async def login_employee(request: LoginRequest) -> LoginResponse:
    logger.info(f"Login attempt for {request.email}")

    try:
        outcome = await login(
            get_service_role_client(),
            get_anon_client(),
            email=request.email,
            password=request.password,
        )
    except EmployeeNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": "Employee not found"}
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_credentials", "details": str(e)}
        )
    except Exception as e:
        logger.error(f"Login failed for {request.email}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "login_error", "details": failure_details("Sign-in failed", e)}
        )

    session = outcome.get("session")
    return LoginResponse(
        employee_id=outcome["employee_id"],
        name=outcome["name"],
        email=outcome["email"],
        requires_password_change=outcome["requires_password_change"],
        session=SessionTokens(**session) if session else None,
    )


@router.post(
    "/first-time-setup",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="First-time password setup",
)
async def complete_first_time_setup(request: FirstTimeSetupRequest) -> LoginResponse:
    """
    Replace the default password.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - Public endpoint

    Step 2: Parse/Validate Request
    - FirstTimeSetupRequest

    Step 3: Domain & Intent Filter
    - Passwords must match, be 6+ characters and differ from the default
    - The email must belong to an existing employee (404 otherwise)

    Step 4: Call Service
    - first_time_setup() (sign up, or sign in if already registered)

    Step 5: Map Output -> ResponseModel
    - LoginResponse with the new session

    Step 6: Persistence
    - Supabase Auth user, profiles row if missing
    """
    logger.info(f"First-time setup for {request.email}")

    try:
        outcome = await first_time_setup(
            get_service_role_client(),
            get_anon_client(),
            email=request.email,
            new_password=request.new_password,
            confirm_password=request.confirm_password,
        )
    except PasswordPolicyError as e:
        raise _password_rejected(e)
    except EmployeeNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": "Employee not found"}
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "invalid_credentials", "details": str(e)}
        )
    except AuthApiError as e:
        logger.warning(f"Sign-up rejected for {request.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "signup_error", "details": error_message(e)}
        )
    except Exception as e:
        logger.error(f"First-time setup failed for {request.email}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "setup_error", "details": failure_details("Account setup failed", e)}
        )

    profile = outcome["profile"]
    session = outcome.get("session")
    return LoginResponse(
        employee_id=outcome["user_id"],
        name=str(profile.get("name") or request.email.split("@")[0]),
        email=request.email,
        requires_password_change=False,
        session=SessionTokens(**session) if session else None,
    )


@router.post(
    "/password-reset",
    response_model=AuthActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Send a password reset email",
)
async def request_password_reset(request: PasswordResetRequest) -> AuthActionResponse:
    try:
        await send_password_reset(get_anon_client(), request.email)
    except Exception as e:
        logger.error(f"Password reset email failed for {request.email}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "reset_error", "details": failure_details("Failed to send password reset email", e)}
        )

    return AuthActionResponse(message="Password reset email sent")


@router.post(
    "/password",
    response_model=AuthActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Change my password",
)
async def update_my_password(request: PasswordChangeRequest, member: Member) -> AuthActionResponse:
    try:
        await change_password(
            get_service_role_client(),
            member.user_id,
            new_password=request.new_password,
            confirm_password=request.confirm_password,
        )
    except PasswordPolicyError as e:
        raise _password_rejected(e)
    except Exception as e:
        logger.error(f"Password change failed for {member.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update password", e)}
        )

    return AuthActionResponse(message="Password updated successfully")
