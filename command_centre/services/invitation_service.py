"""
Employee invitation service.

An invitation row is written first; the email is best effort. A failed send
is reported back to the caller but never rolls the invitation back.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, cast

from fastapi.concurrency import run_in_threadpool
from supabase import Client

from command_centre.config import settings
from command_centre.services.email_service import EmailSendError, render_invitation_html, send_email

logger = logging.getLogger(__name__)


def build_signup_link(signup_url: str, token: str) -> str:
    separator = "&" if "?" in signup_url else "?"
    return f"{signup_url}{separator}token={token}"


async def create_invitation(
    admin_client: Client,
    employee_id: str,
    employee_email: str,
    invited_by: str,
    signup_url: str,
    employee_name: Optional[str] = None,
    company_name: Optional[str] = None,
    expires_in_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Record an invitation and email the signup link.

    Returns:
        Dict with `invitation`, `email_sent`, and either `email_response` or
        `email_send_error`

    Raises:
        Exception: If the invitation row cannot be stored
    """
    days = expires_in_days or settings.INVITATION_EXPIRY_DAYS
    issued_at = now or datetime.now(timezone.utc)
    token = str(uuid.uuid4())

    invitation_data = {
        "id": str(uuid.uuid4()),
        "email": employee_email,
        "employee_id": employee_id,
        "invited_by": invited_by,
        "invited_at": issued_at.isoformat(),
        "expires_at": (issued_at + timedelta(days=days)).isoformat(),
        "token": token,
    }

    logger.info(f"Creating invitation for employee {employee_id} (expires in {days} days)")

    result = admin_client.table("employee_invitations").insert(invitation_data).execute()
    if not result.data:
        raise Exception("Failed to create invitation: no data returned")

    invitation = cast(Dict[str, Any], result.data[0])
    company = company_name or settings.COMPANY_NAME

    body = render_invitation_html(
        employee_name=employee_name or employee_email,
        employee_email=employee_email,
        invited_by=invited_by,
        company_name=company,
        signup_link=build_signup_link(signup_url, token),
        expires_in_days=days,
    )

    try:
        # requests is blocking; run it off the event loop
        email_response = await run_in_threadpool(
            send_email,
            to=[employee_email],
            subject=f"Welcome to {company} - Complete Your Account Setup",
            html_body=body,
        )
    except EmailSendError as e:
        logger.warning(f"Invitation {invitation.get('id')} stored but email failed: {e}")
        return {
            "invitation": invitation,
            "email_sent": False,
            "email_send_error": e.to_dict(),
        }

    return {
        "invitation": invitation,
        "email_sent": True,
        "email_response": email_response,
    }
