"""
Employee invitation endpoint.

Endpoints:
- POST /invitations - Store an invitation and email the signup link
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from command_centre.auth.access import require_permission
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_service_role_client
from command_centre.schemas.invitations import InvitationCreateRequest, InvitationResponse
from command_centre.services.invitation_service import create_invitation
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post(
    "",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite an employee",
    description="""
    Create an invitation token for an employee and email them the link.

    This endpoint:
    - Stores the invitation (token, expiry) in employee_invitations
    - Sends the invitation email through Resend
    - Still returns 201 when the email fails; email_send_error explains why

    Security:
    - Requires employees:create
    - Runs with the service-role client
    """
)
async def invite_employee(
    request: InvitationCreateRequest,
    member: Annotated[CurrentMember, Depends(require_permission("employees", "create"))],
) -> InvitationResponse:
    """
    Invite an employee.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("employees", "create")

    Step 2: Parse/Validate Request
    - InvitationCreateRequest

    Step 3: Domain & Intent Filter
    - Defaults for employee name, company name and expiry

    Step 4: Call Service
    - create_invitation()

    Step 5: Map Output -> ResponseModel
    - InvitationResponse (email outcome included)

    Step 6: Persistence
    - employee_invitations insert
    """
    logger.info(f"{member.user_id} is inviting employee {request.employee_id}")

    try:
        admin_client = get_service_role_client()
        outcome = await create_invitation(admin_client, **request.model_dump())
        return InvitationResponse(**outcome)

    except Exception as e:
        logger.error(f"Failed to create invitation for {request.employee_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to create invitation", e)}
        )
