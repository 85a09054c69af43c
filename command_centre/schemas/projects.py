"""
Pydantic schemas for project endpoints.
"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from command_centre.utils.constants import Department, ProjectStatus


class ProjectCreateRequest(BaseModel):
    """
    Request to create a project.

    The New Project form collects a client name; projects have no client
    foreign key, so the client name is stored as the description unless an
    explicit description is given.
    """
    name: str = Field(..., min_length=2, examples=["Website Redesign"])
    description: Optional[str] = None
    client: Optional[str] = Field(None, min_length=2, examples=["ABC Retail"])
    category: Department = Field("Development")
    status: ProjectStatus = Field("inprogress")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_cost: Optional[float] = Field(None, ge=0, description="Estimated delivery cost (INR)")

    @model_validator(mode="after")
    def end_not_before_start(self) -> "ProjectCreateRequest":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class ProjectUpdateRequest(BaseModel):
    """Patch a project. At least one field is required."""
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    category: Optional[Department] = None
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    estimated_cost: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def end_not_before_start(self) -> "ProjectUpdateRequest":
        # Only checked when both dates are in the same patch
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class ProjectResponse(BaseModel):
    id: str
    name: str
    client: str = Field(..., description="Client name (stored as description), 'N/A' if empty")
    description: Optional[str] = None
    category: str
    status: str
    status_label: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    estimated_cost: Optional[float] = None
    created_at: Optional[str] = None


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
    count: int


class ProjectCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    project: ProjectResponse
    message: str


class ProjectUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    project: ProjectResponse
    message: str


class AssignProjectRequest(BaseModel):
    employee_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    role_in_project: Optional[str] = None


class AssignProjectResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    employee_project: Dict[str, Any]
    message: str = "Project successfully assigned."
