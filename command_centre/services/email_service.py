"""
Transactional email through the Resend REST API.
"""

import html
import logging
from typing import Any, Dict, List, Optional

import requests

from command_centre.config import settings

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 10


class EmailSendError(Exception):
    """Raised when Resend is not configured or rejects a message."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self), "status_code": self.status_code, "body": self.body}


def render_invitation_html(
    employee_name: str,
    employee_email: str,
    invited_by: str,
    company_name: str,
    signup_link: str,
    expires_in_days: int,
) -> str:
    """Build the invitation body: greeting, inviter, steps, call to action, validity note."""
    name = html.escape(employee_name)
    email = html.escape(employee_email)
    inviter = html.escape(invited_by)
    company = html.escape(company_name)
    link = html.escape(signup_link, quote=True)

    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #333; text-align: center;">Welcome to {company}!</h1>
  <p>Hello {name},</p>
  <p>Your employee account has been created by {inviter}.</p>
  <p>To complete your account setup:</p>
  <ol>
    <li>Open the link below</li>
    <li>Sign in with your email address: <strong>{email}</strong></li>
    <li>Choose a secure password</li>
  </ol>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{link}" style="background-color: #007bff; color: white; padding: 12px 24px; text-decoration: none; border-radius: 5px;">Complete Account Setup</a>
  </div>
  <p style="color: #666; font-size: 14px;">If the button doesn't work, paste this link into your browser:<br><a href="{link}">{link}</a></p>
  <p>Best regards,<br>The {company} Team</p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
  <p style="color: #999; font-size: 12px; text-align: center;">This invitation is valid for {expires_in_days} days.</p>
</div>
""".strip()


def send_email(to: List[str], subject: str, html_body: str) -> Dict[str, Any]:
    """
    POST a message to Resend.

    Returns:
        Resend's JSON response (contains the message id)

    Raises:
        EmailSendError: Missing API key, transport failure or non-2xx status
    """
    if not settings.RESEND_API_KEY:
        raise EmailSendError("Email service not configured (RESEND_API_KEY missing)")

    payload = {
        "from": settings.INVITATION_SENDER,
        "to": to,
        "subject": subject,
        "html": html_body,
    }
    headers = {
        "Authorization": f"Bearer {settings.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }

    try:
        resp = requests.post(
            settings.RESEND_API_URL,
            json=payload,
            headers=headers,
            timeout=REQUEST_TIMEOUT_SECONDS
        )
    except requests.RequestException as e:
        logger.error(f"Resend request failed: {e}")
        raise EmailSendError(f"Email request failed: {e}") from e

    if resp.status_code >= 300:
        try:
            body: Any = resp.json()
        except ValueError:
            body = resp.text
        logger.error(f"Resend rejected message to {to}: HTTP {resp.status_code}")
        raise EmailSendError("Email provider rejected the message", resp.status_code, body)

    logger.info(f"Email sent to {to}")
    try:
        return resp.json()
    except ValueError:
        logger.warning(f"Resend accepted message to {to} with a non-JSON body")
        return {"status_code": resp.status_code, "body": resp.text}
