"""
Reminder email dispatch over SMTP.

Splits a drafted reminder into subject and body and sends it through an
authenticated STARTTLS connection.
"""

import logging
import re
import smtplib
from email.mime.text import MIMEText
from email.utils import formataddr

from ..config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Invoice Reminder"
SUBJECT_RE = re.compile(r"^Subject:[ \t]*(.*)$", re.IGNORECASE | re.MULTILINE)


class EmailDeliveryError(Exception):
    """Raised when an email cannot be sent."""

    pass


def split_subject(reminder_text: str) -> tuple[str, str]:
    """
    Split reminder text into (subject, body).

    The first line starting with "Subject:" is the subject and is removed
    from the body; without one the default subject is used.
    """
    match = SUBJECT_RE.search(reminder_text)
    if not match or not match.group(1).strip():
        return DEFAULT_SUBJECT, reminder_text.strip()

    subject = match.group(1).strip()
    body = (reminder_text[: match.start()] + reminder_text[match.end():]).strip()
    return subject, body


class EmailService:
    """
    Service for sending plain-text emails.

    Args:
        host: SMTP server host.
        port: SMTP server port (STARTTLS).
        username: SMTP login, also used as the envelope sender.
        password: SMTP password or app password.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None,
        password: str | None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)

    def send(self, to: str, subject: str, text: str, sender_name: str | None = None) -> None:
        """
        Send a plain-text email.

        Raises:
            EmailDeliveryError: If SMTP is not configured or delivery fails.
        """
        if not self.configured:
            raise EmailDeliveryError("Email is not configured. Set EMAIL_USER and EMAIL_PASS.")

        msg = MIMEText(text, "plain", "utf-8")
        msg["From"] = formataddr((sender_name or "Your Business", self.username))
        msg["To"] = to
        msg["Subject"] = subject

        try:
            with smtplib.SMTP(self.host, self.port) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        logger.info("Email sent to %s (subject=%r)", to, subject)

    def send_reminder(
        self,
        to: str,
        reminder_text: str,
        sender_name: str | None = None,
    ) -> None:
        """Send a drafted reminder, taking the subject from its first line."""
        subject, body = split_subject(reminder_text)
        self.send(to, subject, body, sender_name=sender_name)


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service
    if _email_service is None:
        settings = get_settings()
        _email_service = EmailService(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_pass,
        )
    return _email_service
