"""
Tests for display arithmetic and the password rules.
"""

import pytest

from command_centre.utils.formatting import (
    capitalize_label,
    format_inr,
    format_inr_thousands,
    initials,
    percentage,
    profit_margin,
    split_csv,
)
from command_centre.utils.passwords import validate_passwords


class TestFormatInr:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, "₹0"),
            (999, "₹999"),
            (1000, "₹1,000"),
            (850000, "₹8,50,000"),
            (12345678, "₹1,23,45,678"),
            (-1200, "-₹1,200"),
            (1499.5, "₹1,500"),
            (2.5, "₹3"),
        ],
    )
    def test_indian_grouping(self, amount, expected):
        assert format_inr(amount) == expected

    def test_thousands(self):
        assert format_inr_thousands(320000) == "₹320K"
        assert format_inr_thousands(1500) == "₹2K"


class TestPercentages:
    def test_percentage_rounds(self):
        assert percentage(1, 3) == 33
        assert percentage(2, 3) == 67
        assert percentage(50, 200) == 25

    def test_percentage_zero_whole(self):
        assert percentage(10, 0) == 0
        assert percentage(10, -5) == 0

    def test_profit_margin(self):
        assert profit_margin(100000, 60000) == 40
        assert profit_margin(100000, 150000) == -50

    def test_profit_margin_without_revenue(self):
        assert profit_margin(0, 5000) is None
        assert profit_margin(-10, 0) is None


class TestTextHelpers:
    def test_initials(self):
        assert initials("Aarav Sharma") == "AS"
        assert initials("  priya  k  menon ") == "PKM"
        assert initials("") == ""

    def test_capitalize_label(self):
        assert capitalize_label("prospect") == "Prospect"
        assert capitalize_label(42) == "42"
        assert capitalize_label("") == ""

    def test_split_csv(self):
        assert split_csv(" React, ,TypeScript ,") == ["React", "TypeScript"]
        assert split_csv(None) == []


class TestValidatePasswords:
    def test_mismatch_checked_first(self):
        result = validate_passwords("abc", "abd")
        assert not result.is_valid
        assert result.error == "Passwords do not match"

    def test_too_short(self):
        result = validate_passwords("abc12", "abc12")
        assert result.error == "Password must be at least 6 characters"

    def test_default_password_rejected(self):
        result = validate_passwords("welcome123", "welcome123")
        assert result.error == "Please choose a different password than the default one"

    def test_valid(self):
        result = validate_passwords("s3cure-pass", "s3cure-pass")
        assert result.is_valid
        assert result.error is None
