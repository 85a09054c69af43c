"""
Pydantic schemas for authentication endpoints.

Sessions themselves are issued by Supabase Auth; these endpoints only wrap
the onboarding flow (default password -> first-time setup) and expose the
caller's role, navigation and permissions.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field


class NavItemResponse(BaseModel):
    label: str
    href: str


class AuthMeResponse(BaseModel):
    """
    Response for GET /auth/me - identity plus role-derived shell data.
    """
    user_id: str = Field(..., description="User UUID (from JWT 'sub' claim)")
    email: Optional[str] = None
    name: str
    role: str
    role_name: str
    navigation: List[NavItemResponse]
    permissions: Dict[str, Dict[str, bool]] = Field(
        ...,
        description="section -> action -> allowed, for the caller's role"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "38f7d540-23fa-497a-8df2-3ab9cbe13da5",
                    "email": "raj@agency.com",
                    "name": "Raj Kumar",
                    "role": "manager",
                    "role_name": "Manager",
                    "navigation": [{"label": "Dashboard", "href": "/dashboard"}],
                    "permissions": {"projects": {"view": True, "create": True, "edit": True, "delete": False}}
                }
            ]
        }
    }


class RouteAccessResponse(BaseModel):
    path: str
    allowed: bool
    redirect_to: Optional[str] = None
    reason: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class SessionTokens(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    token_type: str = "bearer"


class LoginResponse(BaseModel):
    """
    requires_password_change=True means the default password was used; the
    client must run first-time setup and no session is returned.
    """
    employee_id: str
    name: str
    email: str
    requires_password_change: bool
    session: Optional[SessionTokens] = None


class FirstTimeSetupRequest(BaseModel):
    email: EmailStr
    new_password: str
    confirm_password: str


class PasswordChangeRequest(BaseModel):
    new_password: str
    confirm_password: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class AuthActionResponse(BaseModel):
    success: bool = True
    message: str
