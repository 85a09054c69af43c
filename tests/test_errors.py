"""
Tests for the error detail helpers.
"""

from postgrest.exceptions import APIError

from command_centre.utils.errors import error_message, failure_details


def test_postgrest_message():
    exc = APIError({"message": "permission denied for table budgets", "code": "42501"})
    assert error_message(exc) == "permission denied for table budgets"


def test_plain_exception():
    assert error_message(Exception("connection reset")) == "connection reset"


def test_exception_without_text_uses_class_name():
    assert error_message(TimeoutError()) == "TimeoutError"


def test_failure_details_prefix():
    assert failure_details("Failed to update role", ValueError("bad uuid")) == "Failed to update role: bad uuid"
