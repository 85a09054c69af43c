"""
Admin settings endpoints.

Endpoints:
- GET /settings/roles - Permission matrix per role
- GET /settings/users - Members with their roles
- PATCH /settings/users/{user_id}/role - Change a member's role

All endpoints are restricted to admins.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status

from command_centre.auth.access import require_roles
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_supabase_client
from command_centre.schemas.settings import (
    RoleListResponse,
    RolePermissions,
    RoleUpdateRequest,
    RoleUpdateResponse,
    SettingsUser,
    SettingsUserListResponse,
)
from command_centre.services.settings_service import get_users, list_roles, update_user_role
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])

Admin = Annotated[CurrentMember, Depends(require_roles("admin"))]


@router.get("/roles", response_model=RoleListResponse, summary="List roles and permissions")
async def get_roles(member: Admin) -> RoleListResponse:
    return RoleListResponse(roles=[RolePermissions(**role) for role in list_roles()])


@router.get("/users", response_model=SettingsUserListResponse, summary="List members")
async def list_users(member: Admin) -> SettingsUserListResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        users = await get_users(supabase_client)
    except Exception as e:
        logger.error(f"Failed to fetch users: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve users", e)}
        )

    return SettingsUserListResponse(users=[SettingsUser(**u) for u in users], count=len(users))


@router.patch(
    "/users/{user_id}/role",
    response_model=RoleUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Change a member's role",
)
async def change_user_role(
    user_id: Annotated[str, Path(..., description="Member UUID")],
    request: RoleUpdateRequest,
    member: Admin,
) -> RoleUpdateResponse:
    """
    Change a member's role.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_roles("admin")

    Step 2: Parse/Validate Request
    - RoleUpdateRequest (role enum)

    Step 3: Domain & Intent Filter
    - Admins cannot demote themselves

    Step 4: Call Service
    - update_user_role()

    Step 5: Map Output -> ResponseModel
    - RoleUpdateResponse, 404 if missing

    Step 6: Persistence
    - profiles update under RLS
    """
    if user_id == member.user_id and request.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": "Admins cannot change their own role"}
        )

    logger.info(f"Admin {member.user_id} changing role of {user_id} to {request.role}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        updated = await update_user_role(supabase_client, user_id, request.role)
    except Exception as e:
        logger.error(f"Failed to update role for {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update role", e)}
        )

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"User {user_id} not found"}
        )

    return RoleUpdateResponse(user=SettingsUser(**updated), message="Role updated successfully")
