"""
SMTP delivery tests
"""
import threading

import pytest

from projectflow.services import email_service as email_module
from projectflow.services.email_service import EmailService


class FakeSMTP:
    """Records one SMTP session instead of opening a socket"""

    sessions = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.thread = threading.current_thread()
        self.logged_in = None
        self.mail = []
        FakeSMTP.sessions.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        pass

    def login(self, user, password):
        self.logged_in = user

    def sendmail(self, from_addr, to_addr, body):
        self.mail.append((from_addr, to_addr, body))


@pytest.fixture
def smtp(monkeypatch):
    FakeSMTP.sessions = []
    monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def configured_email():
    service = EmailService()
    service.smtp_host = "smtp.example.com"
    service.smtp_port = 587
    service.smtp_user = "mailer"
    service.smtp_pass = "app-password"
    service.from_email = "noreply@example.com"
    return service


@pytest.mark.asyncio
async def test_send_email_runs_smtp_off_the_event_loop(smtp, configured_email):
    """Test that the blocking SMTP exchange happens on a worker thread"""
    loop_thread = threading.current_thread()

    sent = await configured_email.send_email("alice@example.com", "Hello", "<p>Hi</p>", "Hi")

    assert sent is True
    session = smtp.sessions[0]
    assert session.thread is not loop_thread
    assert (session.host, session.port) == ("smtp.example.com", 587)
    assert session.logged_in == "mailer"
    from_addr, to_addr, body = session.mail[0]
    assert from_addr == "noreply@example.com"
    assert to_addr == "alice@example.com"
    assert "Subject: Hello" in body


@pytest.mark.asyncio
async def test_send_email_without_credentials_skips_smtp(smtp, configured_email):
    configured_email.smtp_pass = None

    sent = await configured_email.send_email("alice@example.com", "Hello", "<p>Hi</p>")

    assert sent is False
    assert smtp.sessions == []


@pytest.mark.asyncio
async def test_invitation_email_links_to_project(smtp, configured_email):
    configured_email.app_url = "https://app.example.com"

    await configured_email.send_project_invitation_email(
        to_email="bob@example.com",
        project_name="Acme",
        inviter_name="Owner Tester",
        role="member",
        project_id="1234",
    )

    _, to_addr, body = smtp.sessions[0].mail[0]
    assert to_addr == "bob@example.com"
    assert "Acme" in body
