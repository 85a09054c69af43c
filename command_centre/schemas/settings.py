"""
Pydantic schemas for the admin Settings page.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel


class RolePermissions(BaseModel):
    id: str
    name: str
    permissions: Dict[str, Dict[str, bool]]


class RoleListResponse(BaseModel):
    roles: List[RolePermissions]


class SettingsUser(BaseModel):
    id: str
    name: str
    email: str
    role: str
    role_name: str
    avatar: str
    last_active: Optional[str] = None


class SettingsUserListResponse(BaseModel):
    users: List[SettingsUser]
    count: int


class RoleUpdateRequest(BaseModel):
    role: Literal["admin", "manager", "teamlead", "employee"]


class RoleUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    user: SettingsUser
    message: str
