"""
Enumerations mirrored from the backing schema.

These match the CHECK constraints / enum types in Supabase. The datastore is
the authority; the copies here drive request validation and display labels.
"""

from typing import Literal

Department = Literal["Maintenance", "Development", "Social", "Performance"]
DEPARTMENTS: tuple[str, ...] = ("Maintenance", "Development", "Social", "Performance")
ALL_DEPARTMENTS = "All Departments"

ProjectStatus = Literal["inprogress", "billed", "awaitingPO", "awaitingPayment", "overdue"]
PROJECT_STATUS_LABELS = {
    "inprogress": "In Progress",
    "billed": "Billed",
    "awaitingPO": "Awaiting PO",
    "awaitingPayment": "Awaiting Payment",
    "overdue": "Overdue",
}

ClientStatus = Literal["active", "inactive", "prospect"]
Sentiment = Literal["positive", "neutral", "negative"]
InvoiceStatus = Literal["paid", "pending", "overdue"]

# Financial year runs April -> March (calendar month numbers, in FY order)
FINANCIAL_YEAR_MONTHS: tuple[int, ...] = (4, 5, 6, 7, 8, 9, 10, 11, 12, 1, 2, 3)
MONTH_ABBREVIATIONS = {
    1: "Jan", 2: "Feb", 3: "Mar", 4: "Apr", 5: "May", 6: "Jun",
    7: "Jul", 8: "Aug", 9: "Sep", 10: "Oct", 11: "Nov", 12: "Dec",
}

# Overdue invoice aging buckets: (label, min days past due, max days or None)
AGING_BUCKETS: tuple[tuple[str, int, int | None], ...] = (
    ("0-30", 0, 30),
    ("31-60", 31, 60),
    ("61+", 61, None),
)
TOP_OVERDUE_LIMIT = 5
