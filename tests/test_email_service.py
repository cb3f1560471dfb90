"""Tests for reminder email dispatch."""

import smtplib
from email.utils import parseaddr

import pytest

from app.invoice_api.services import email_service
from app.invoice_api.services.email_service import (
    DEFAULT_SUBJECT,
    EmailDeliveryError,
    EmailService,
    split_subject,
)


class FakeSMTP:
    """Records SMTP interactions instead of connecting."""

    instances: list["FakeSMTP"] = []
    fail_login = False

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.started_tls = False
        self.logged_in = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        if FakeSMTP.fail_login:
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.messages.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    """Patch smtplib.SMTP inside the email service."""
    FakeSMTP.instances = []
    FakeSMTP.fail_login = False
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


class TestSplitSubject:
    """Tests for split_subject."""

    def test_subject_line_extracted(self):
        """Test the Subject line becomes the subject and leaves the body."""
        subject, body = split_subject("Subject: Payment due\n\nHi Acme,\n\nPlease pay.")
        assert subject == "Payment due"
        assert body == "Hi Acme,\n\nPlease pay."

    def test_default_subject(self):
        """Test text without a Subject line gets the default."""
        subject, body = split_subject("Hi Acme,\nPlease pay.")
        assert subject == DEFAULT_SUBJECT
        assert body == "Hi Acme,\nPlease pay."

    def test_empty_subject_uses_default(self):
        """Test a blank Subject line is not used."""
        subject, _ = split_subject("Subject:\nHi")
        assert subject == DEFAULT_SUBJECT


class TestEmailService:
    """Tests for EmailService.send and send_reminder."""

    def test_unconfigured_raises(self, fake_smtp):
        """Test sending without credentials fails before connecting."""
        service = EmailService("smtp.test", 587, None, None)
        with pytest.raises(EmailDeliveryError):
            service.send("a@b.test", "Hi", "Body")
        assert fake_smtp.instances == []

    def test_send_reminder(self, fake_smtp):
        """Test a reminder is sent over STARTTLS with its subject split off."""
        service = EmailService("smtp.test", 587, "me@studio.test", "app-pass")
        service.send_reminder("ap@acme.test", "Subject: Invoice due\n\nHi Acme,", sender_name="Studio Nine")

        smtp = fake_smtp.instances[0]
        assert (smtp.host, smtp.port) == ("smtp.test", 587)
        assert smtp.started_tls
        assert smtp.logged_in == ("me@studio.test", "app-pass")
        msg = smtp.messages[0]
        assert msg["Subject"] == "Invoice due"
        assert msg["To"] == "ap@acme.test"
        assert "Studio Nine" in msg["From"]
        assert msg.get_payload(decode=True).decode() == "Hi Acme,"

    def test_smtp_failure_wrapped(self, fake_smtp):
        """Test SMTP errors surface as EmailDeliveryError."""
        fake_smtp.fail_login = True
        service = EmailService("smtp.test", 587, "me@studio.test", "wrong")
        with pytest.raises(EmailDeliveryError):
            service.send("a@b.test", "Hi", "Body")

    def test_sender_name_with_quotes(self, fake_smtp):
        """Test a sender name containing quotes still yields a valid From address."""
        service = EmailService("smtp.test", 587, "me@studio.test", "app-pass")
        service.send("a@b.test", "Hi", "Body", sender_name='Studio "Nine"')

        msg = fake_smtp.instances[0].messages[0]
        assert parseaddr(msg["From"]) == ('Studio "Nine"', "me@studio.test")
