"""
Display arithmetic shared by the finance, report and dashboard endpoints.

Currency is Indian Rupees with Indian digit grouping (lakh/crore), no decimals.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


def _round_half_up(value: Number) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _group_indian(digits: str) -> str:
    """Group a digit string the Indian way: 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(amount: Number) -> str:
    """
    Format an amount as whole rupees with Indian grouping.

    >>> format_inr(850000)
    '₹8,50,000'
    >>> format_inr(-1200)
    '-₹1,200'
    """
    rounded = _round_half_up(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(rounded)))}"


def format_inr_thousands(amount: Number) -> str:
    """Compact chart tick label, e.g. 320000 -> '₹320K'."""
    thousands = _round_half_up(Decimal(str(amount)) / 1000)
    return f"₹{thousands}K"


def percentage(part: Number, whole: Number) -> int:
    """Rounded integer percent of part over whole (0 when whole is not positive)."""
    if not whole or whole <= 0:
        return 0
    return _round_half_up(Decimal(str(part)) * 100 / Decimal(str(whole)))


def profit_margin(revenue: Number, cost: Number) -> Optional[int]:
    """Rounded percent margin, or None when there is no revenue."""
    if not revenue or revenue <= 0:
        return None
    return percentage(Decimal(str(revenue)) - Decimal(str(cost)), revenue)


def initials(name: str) -> str:
    """'Aarav Sharma' -> 'AS'."""
    return "".join(part[0] for part in name.split() if part).upper()


def capitalize_label(value: Union[str, int, float]) -> str:
    text = str(value)
    return text[:1].upper() + text[1:]


def split_csv(text: Optional[str]) -> list[str]:
    """Split a comma-separated form value into trimmed, non-empty items."""
    if not text:
        return []
    return [item.strip() for item in text.split(",") if item.strip()]
