"""
Email Service - account notifications.

No SMTP transport is configured; messages are written to the log so
development and tests can see what would have been sent.
"""

import logging

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class EmailService:

    def __init__(self):
        self.settings = get_settings()

    def send_account_deletion_confirmation(self, email: str) -> None:
        logger.info(
            "ACCOUNT DELETION EMAIL to=%s subject=%r: your ATS Tracker account and all "
            "personal data have been permanently deleted",
            email, "Account Deletion Confirmation - ATS Tracker",
        )

    def send_password_reset(self, email: str, token: str) -> str:
        """Log the reset link and return it."""
        link = f"{self.settings.frontend_url}/reset-password?token={token}"
        logger.info("PASSWORD RESET EMAIL to=%s link=%s", email, link)
        return link


def get_email_service() -> EmailService:
    return EmailService()
