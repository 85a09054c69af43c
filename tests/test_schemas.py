"""
Tests for request validation rules.

Each form keeps the constraints of the dashboard forms; these tests pin the
boundaries.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from command_centre.schemas.clients import (
    ClientCreateRequest,
    FeedbackCreateRequest,
    OpportunityCreateRequest,
    VisitCreateRequest,
)
from command_centre.schemas.employees import EmployeeCreateRequest, EmployeeUpdateRequest
from command_centre.schemas.finance import BudgetCreateRequest
from command_centre.schemas.projects import ProjectCreateRequest
from command_centre.schemas.time_entries import TimeEntryCreateRequest


VALID_CLIENT = {
    "name": "ABC Retail",
    "contact_person": "Rajiv Mehta",
    "email": "contact@abcretail.com",
    "phone": "+91 9876543210",
    "address": "12 MG Road, Bengaluru",
}


class TestClientForms:
    def test_client_defaults_to_prospect(self):
        assert ClientCreateRequest(**VALID_CLIENT).status == "prospect"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("name", "A"),
            ("contact_person", "R"),
            ("email", "not-an-email"),
            ("phone", "12345"),
            ("address", "Road"),
        ],
    )
    def test_client_field_rules(self, field, value):
        with pytest.raises(ValidationError):
            ClientCreateRequest(**{**VALID_CLIENT, field: value})

    def test_client_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            ClientCreateRequest(**VALID_CLIENT, status="archived")

    def test_feedback_text_minimum(self):
        with pytest.raises(ValidationError):
            FeedbackCreateRequest(project="Website", text="Too short", sentiment="positive")
        ok = FeedbackCreateRequest(project="Website", text="Great delivery overall", sentiment="neutral")
        assert ok.feedback_date is None

    def test_visit_attendees_split(self):
        visit = VisitCreateRequest(
            purpose="Quarterly review",
            visit_date=date(2025, 7, 1),
            attendees=" Rajiv Mehta, , Neha Verma ",
        )
        assert visit.attendee_list() == ["Rajiv Mehta", "Neha Verma"]

    def test_visit_attendees_must_name_someone(self):
        with pytest.raises(ValidationError):
            VisitCreateRequest(purpose="Quarterly review", visit_date=date(2025, 7, 1), attendees=" , ,")

    def test_opportunity_bounds(self):
        base = {
            "title": "Retainer",
            "description": "Monthly SEO retainer",
            "estimated_value": 1000,
            "probability": 100,
            "next_steps": "Send proposal",
        }
        assert OpportunityCreateRequest(**base).probability == 100
        with pytest.raises(ValidationError):
            OpportunityCreateRequest(**{**base, "estimated_value": 999})
        with pytest.raises(ValidationError):
            OpportunityCreateRequest(**{**base, "probability": 0})


class TestEmployeeForms:
    def test_add_employee_defaults(self):
        request = EmployeeCreateRequest(email="a@agency.com", password="secret12", name="Aarav Sharma")
        assert request.role == "employee"
        assert request.department == "Development"
        assert request.job_role == "Employee"
        assert request.experience == 0

    @pytest.mark.parametrize("password", ["short1", "lettersonly", "12345678"])
    def test_add_employee_password_strength(self, password):
        with pytest.raises(ValidationError):
            EmployeeCreateRequest(email="a@agency.com", password=password, name="Aarav")

    def test_add_employee_utilization_range(self):
        with pytest.raises(ValidationError):
            EmployeeCreateRequest(email="a@agency.com", password="secret12", name="Aarav", utilization=101)

    def test_edit_employee_phone_and_skills(self):
        with pytest.raises(ValidationError):
            EmployeeUpdateRequest(phone="12345")
        with pytest.raises(ValidationError):
            EmployeeUpdateRequest(skills=" , ")
        assert EmployeeUpdateRequest(skills="React, Go").skills == "React, Go"


class TestProjectAndTimeForms:
    def test_project_end_before_start(self):
        with pytest.raises(ValidationError):
            ProjectCreateRequest(name="Website", start_date=date(2025, 5, 2), end_date=date(2025, 5, 1))

    def test_project_defaults(self):
        project = ProjectCreateRequest(name="Website")
        assert project.status == "inprogress"
        assert project.category == "Development"

    @pytest.mark.parametrize("hours", [0, -1, 24.5])
    def test_time_entry_hours_range(self, hours):
        with pytest.raises(ValidationError):
            TimeEntryCreateRequest(project_id="p-1", hours=hours)

    def test_time_entry_full_day(self):
        assert TimeEntryCreateRequest(project_id="p-1", hours=24).hours == 24


class TestBudgetForm:
    def test_budget_month_range(self):
        base = {
            "financial_year": 2025,
            "month": 4,
            "department": "Social",
            "budget_revenue": 100000,
            "budget_cost": 60000,
        }
        assert BudgetCreateRequest(**base).actual_cost is None
        with pytest.raises(ValidationError):
            BudgetCreateRequest(**{**base, "month": 13})
        with pytest.raises(ValidationError):
            BudgetCreateRequest(**{**base, "department": "Sales"})
