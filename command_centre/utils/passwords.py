"""
Password rules for the first-time setup and password change flows.
"""

from dataclasses import dataclass
from typing import Optional

from command_centre.config import settings

MIN_PASSWORD_LENGTH = 6


@dataclass
class PasswordValidationResult:
    is_valid: bool
    error: Optional[str] = None


def validate_passwords(new_password: str, confirm_password: str) -> PasswordValidationResult:
    """
    Check a new password against its confirmation and the onboarding rules.

    Checks run in order: match, minimum length, not the default password.
    """
    if new_password != confirm_password:
        return PasswordValidationResult(is_valid=False, error="Passwords do not match")

    if len(new_password) < MIN_PASSWORD_LENGTH:
        return PasswordValidationResult(
            is_valid=False,
            error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    if new_password == settings.DEFAULT_EMPLOYEE_PASSWORD:
        return PasswordValidationResult(
            is_valid=False,
            error="Please choose a different password than the default one"
        )

    return PasswordValidationResult(is_valid=True)
