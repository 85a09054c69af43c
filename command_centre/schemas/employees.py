"""
Pydantic schemas for employee endpoints.

An employee is two rows sharing one UUID (the auth user id):
- profiles: name, email, phone, role
- employees: department, job_role, joining_date, experience, ctc, utilization, avatar
"""

import re
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from command_centre.utils.constants import Department
from command_centre.utils.formatting import split_csv

UserRoleField = Literal["admin", "manager", "teamlead", "employee"]


class EmployeeCreateRequest(BaseModel):
    """
    Request to add an employee.

    Creates the auth user (email confirmed), the profile and the employee row.
    """
    email: EmailStr = Field(..., examples=["aarav.sharma@agency.com"])
    password: str = Field(..., min_length=8, description="Initial password (letters and digits)")
    name: str = Field(..., min_length=2, examples=["Aarav Sharma"])
    role: UserRoleField = Field("employee", description="Dashboard role")
    department: Department = Field("Development")
    job_role: str = Field("Employee", min_length=2, examples=["Frontend Developer"])
    joining_date: Optional[date] = Field(None, description="Defaults to today")
    experience: float = Field(0, ge=0, description="Years of experience")
    avatar: Optional[str] = None
    ctc: Optional[float] = Field(None, gt=0, description="Annual cost to company (INR)")
    utilization: Optional[float] = Field(None, ge=0, le=100)
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_is_strong(cls, value: str) -> str:
        if not re.search(r"[A-Za-z]", value) or not re.search(r"\d", value):
            raise ValueError("Password must contain at least one letter and one digit")
        return value


class EmployeeUpdateRequest(BaseModel):
    """
    Edit Employee form.

    All fields optional; at least one must be provided. `skills` is the
    comma-separated form value and replaces the employee's skill links.
    """
    name: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=10)
    department: Optional[Department] = None
    job_role: Optional[str] = Field(None, min_length=2)
    joining_date: Optional[date] = None
    experience: Optional[float] = Field(None, ge=0)
    skills: Optional[str] = Field(None, min_length=2, examples=["React, TypeScript"])
    ctc: Optional[float] = Field(None, gt=0)

    @field_validator("skills")
    @classmethod
    def skills_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not split_csv(value):
            raise ValueError("Please enter at least one skill.")
        return value


class SkillsReplaceRequest(BaseModel):
    """Replace the caller's own skills (My Profile page)."""
    skills: List[str] = Field(..., description="Skill names")

    @field_validator("skills")
    @classmethod
    def strip_names(cls, value: List[str]) -> List[str]:
        return [name.strip() for name in value if name and name.strip()]


class AssignSkillRequest(BaseModel):
    employee_id: str = Field(..., min_length=1)
    skill_id: str = Field(..., min_length=1)
    proficiency_level: Optional[int] = Field(None, ge=1, le=5)


class EmployeeResponse(BaseModel):
    """Flattened employee view used by the Employees page and profile."""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    department: str
    role: str = Field(..., description="Job role (e.g. 'Frontend Developer')")
    access_role: str = Field("employee", description="Dashboard role from profiles")
    joining_date: Optional[str] = None
    experience: float = 0
    skills: List[str] = Field(default_factory=list)
    utilization: float = 0
    ctc: Optional[float] = None
    projects: List[str] = Field(default_factory=list)
    avatar: str


class EmployeeListResponse(BaseModel):
    employees: List[EmployeeResponse]
    count: int


class EmployeeCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    user_id: str
    profile: Dict[str, Any]
    employee: Dict[str, Any]
    message: str


class EmployeeUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    employee: EmployeeResponse
    message: str


class AssignSkillResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    employee_skill: Dict[str, Any]


class SkillsReplaceResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    skills: List[str]
    message: str
