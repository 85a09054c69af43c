"""
Service layer for the Agency Command Centre backend.

Services hold the table access and aggregation logic:
- Take a Supabase client (member-scoped under RLS, or service-role for
  admin operations) plus plain arguments
- Return plain dicts shaped for the response models
- Raise on datastore failures; routes translate errors to HTTP responses

Routes are the HTTP layer; services never raise HTTPException.
"""

from .auth_service import (
    EmployeeNotFoundError,
    InvalidCredentialsError,
    PasswordPolicyError,
    change_password,
    first_time_setup,
    login,
    send_password_reset,
)
from .client_service import (
    add_feedback,
    add_opportunity,
    create_client,
    get_all_clients,
    get_client_by_id,
    get_client_feedback,
    get_client_opportunities,
    get_client_profile,
    get_client_visits,
    schedule_visit,
    update_client,
)
from .dashboard_service import build_overview, get_dashboard_data
from .email_service import EmailSendError, send_email
from .employee_service import (
    assign_skill,
    create_employee,
    get_all_employees,
    get_employee_by_id,
    replace_employee_skills,
    update_employee,
)
from .finance_service import (
    create_budget,
    get_budget_vs_actual,
    get_budgets,
    get_finance_summary,
    get_invoices,
    get_payment_aging,
    get_project_profitability,
    update_budget,
    update_invoice_status,
)
from .invitation_service import create_invitation
from .project_service import assign_project, create_project, get_all_projects, update_project
from .report_service import (
    build_client_report,
    build_employee_report,
    build_financial_report,
    build_project_report,
)
from .settings_service import get_users, list_roles, update_user_role
from .time_entry_service import (
    get_time_entries,
    log_time_entry,
    summarize_entries,
    total_hours_for_date,
)

__all__ = [
    # Auth
    "login",
    "first_time_setup",
    "send_password_reset",
    "change_password",
    "EmployeeNotFoundError",
    "InvalidCredentialsError",
    "PasswordPolicyError",
    # Clients
    "get_all_clients",
    "get_client_by_id",
    "get_client_profile",
    "create_client",
    "update_client",
    "get_client_feedback",
    "add_feedback",
    "get_client_visits",
    "schedule_visit",
    "get_client_opportunities",
    "add_opportunity",
    # Dashboard
    "get_dashboard_data",
    "build_overview",
    # Email
    "send_email",
    "EmailSendError",
    # Employees
    "get_all_employees",
    "get_employee_by_id",
    "create_employee",
    "update_employee",
    "replace_employee_skills",
    "assign_skill",
    # Finance
    "get_invoices",
    "update_invoice_status",
    "get_finance_summary",
    "get_payment_aging",
    "get_project_profitability",
    "get_budgets",
    "create_budget",
    "update_budget",
    "get_budget_vs_actual",
    # Invitations
    "create_invitation",
    # Projects
    "get_all_projects",
    "create_project",
    "update_project",
    "assign_project",
    # Reports
    "build_financial_report",
    "build_project_report",
    "build_employee_report",
    "build_client_report",
    # Settings
    "list_roles",
    "get_users",
    "update_user_role",
    # Time tracking
    "get_time_entries",
    "log_time_entry",
    "summarize_entries",
    "total_hours_for_date",
]
