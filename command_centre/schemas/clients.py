"""
Pydantic schemas for client CRUD endpoints.

A client has three kinds of child records, each added from the client
profile page: feedback, visits and opportunities.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from command_centre.utils.constants import ClientStatus, Sentiment
from command_centre.utils.formatting import split_csv


# --- Client models ---

class ClientCreateRequest(BaseModel):
    """Request to add a client (Add Client form)."""
    name: str = Field(..., min_length=2, description="Company name", examples=["ABC Retail"])
    contact_person: str = Field(..., min_length=2, description="Primary contact", examples=["Rajiv Mehta"])
    email: EmailStr = Field(..., description="Contact email", examples=["contact@abcretail.com"])
    phone: str = Field(..., min_length=6, description="Contact phone", examples=["+91 9876543210"])
    address: str = Field(..., min_length=5, description="Postal address")
    status: ClientStatus = Field("prospect", description="Relationship status")


class ClientUpdateRequest(BaseModel):
    """
    Patch a client. Only provided fields are updated; at least one is required.
    """
    name: Optional[str] = Field(None, min_length=2)
    contact_person: Optional[str] = Field(None, min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=6)
    address: Optional[str] = Field(None, min_length=5)
    status: Optional[ClientStatus] = None


class ClientResponse(BaseModel):
    id: str = Field(..., description="Client UUID")
    name: str
    logo_initials: str = Field(..., description="Initials shown in place of a logo")
    contact_person: str
    email: str
    phone: str
    address: str
    status: ClientStatus
    active_projects: int = 0
    total_billed: float = 0.0
    total_paid: float = 0.0
    overdue: float = 0.0
    payment_progress: int = Field(0, description="Percent of billed amount already paid")
    created_at: Optional[str] = None


class ClientListResponse(BaseModel):
    clients: List[ClientResponse]
    count: int


class ClientCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    client: ClientResponse
    message: str = Field(..., examples=["Client added successfully"])


class ClientUpdateResponse(BaseModel):
    status: Literal["UPDATED"] = "UPDATED"
    client: ClientResponse
    message: str


# --- Feedback ---

class FeedbackCreateRequest(BaseModel):
    """Add Feedback form."""
    project: str = Field(..., min_length=1, description="Project the feedback is about")
    text: str = Field(..., min_length=10, description="Feedback text")
    sentiment: Sentiment = Field(..., description="positive | neutral | negative")
    feedback_date: Optional[date] = Field(None, description="Defaults to today")


class FeedbackResponse(BaseModel):
    id: str
    client_id: str
    feedback_date: str
    project: str
    text: str
    sentiment: Sentiment


# --- Visits ---

class VisitCreateRequest(BaseModel):
    """
    Schedule Visit form.

    attendees is entered as a comma-separated string and stored as a list.
    """
    purpose: str = Field(..., min_length=5)
    visit_date: date = Field(..., description="Visit date")
    attendees: str = Field(..., min_length=3, examples=["Rajiv Mehta, Neha Verma"])
    notes: Optional[str] = None

    @field_validator("attendees")
    @classmethod
    def attendees_not_blank(cls, value: str) -> str:
        if not split_csv(value):
            raise ValueError("Please add at least one attendee.")
        return value

    def attendee_list(self) -> List[str]:
        return split_csv(self.attendees)


class VisitResponse(BaseModel):
    id: str
    client_id: str
    visit_date: str
    purpose: str
    attendees: List[str]
    notes: Optional[str] = None


# --- Opportunities ---

class OpportunityCreateRequest(BaseModel):
    """Add Opportunity form. Values are in rupees."""
    title: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    estimated_value: float = Field(..., ge=1000, description="At least ₹1,000")
    probability: int = Field(..., ge=1, le=100, description="Win probability in percent")
    next_steps: str = Field(..., min_length=5)


class OpportunityResponse(BaseModel):
    id: str
    client_id: str
    title: str
    description: str
    estimated_value: float
    probability: int
    weighted_value: float = Field(..., description="estimated_value x probability / 100")
    next_steps: str


# --- Client profile (detail) ---

class ClientProfileResponse(BaseModel):
    client: ClientResponse
    feedback: List[FeedbackResponse]
    visits: List[VisitResponse]
    opportunities: List[OpportunityResponse]


class ChildCreateResponse(BaseModel):
    status: Literal["CREATED"] = "CREATED"
    message: str


class FeedbackCreateResponse(ChildCreateResponse):
    feedback: FeedbackResponse


class VisitCreateResponse(ChildCreateResponse):
    visit: VisitResponse


class OpportunityCreateResponse(ChildCreateResponse):
    opportunity: OpportunityResponse
