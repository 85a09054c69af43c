"""
Pydantic schemas for the Reports & Analytics endpoints.
"""

from typing import List

from pydantic import BaseModel, Field


class ShareItem(BaseModel):
    name: str
    value: float
    share: int = Field(..., description="Percent of the report total")
    label: str = Field(..., description="Formatted value (e.g. '₹3,20,000' or '4')")


class MonthlyRevenue(BaseModel):
    month: str
    revenue: float
    expense: float


class FinancialReportResponse(BaseModel):
    financial_year: int
    month: str
    total_revenue: float
    total_revenue_label: str
    revenue_by_department: List[ShareItem]
    monthly: List[MonthlyRevenue]


class ProjectReportResponse(BaseModel):
    total_projects: int
    by_status: List[ShareItem]
    by_category: List[ShareItem]


class DepartmentUtilization(BaseModel):
    department: str
    headcount: int
    average_utilization: float


class EmployeeReportResponse(BaseModel):
    total_employees: int
    average_utilization: float
    by_department: List[DepartmentUtilization]


class ClientReportResponse(BaseModel):
    financial_year: int
    month: str
    revenue_by_client: List[ShareItem]
    clients_by_status: List[ShareItem]
