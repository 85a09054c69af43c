"""
Pydantic schemas for employee invitations.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class InvitationCreateRequest(BaseModel):
    """
    Invite an existing employee record to set up their login.

    The emailed link is `signup_url?token=<generated token>`.
    """
    employee_id: str = Field(..., min_length=1)
    employee_email: EmailStr
    employee_name: Optional[str] = Field(None, description="Defaults to the email address")
    invited_by: str = Field(..., min_length=1, description="Name shown as the inviter")
    company_name: Optional[str] = Field(None, description="Defaults to the configured company name")
    signup_url: str = Field(..., min_length=1, examples=["https://app.example.com/login"])
    expires_in_days: Optional[int] = Field(None, ge=1, le=90)


class InvitationResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    invitation: Dict[str, Any]
    email_sent: bool
    email_response: Optional[Dict[str, Any]] = None
    email_send_error: Optional[Dict[str, Any]] = None
