"""
Email service for sending collaboration notifications
"""
import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import logging
from starlette.concurrency import run_in_threadpool

from projectflow.config import settings
from projectflow.templates.email_templates import (
    get_project_invitation_email, get_role_update_email, get_removal_email
)

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for sending notifications"""

    def __init__(self):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_pass = settings.smtp_pass
        self.from_email = settings.from_email
        self.from_name = settings.from_name
        self.app_url = settings.app_url.rstrip('/')

    def project_url(self, project_id) -> str:
        return f"{self.app_url}/projects/{project_id}"

    def _deliver(self, to_email: str, message: MIMEMultipart) -> None:
        """Blocking SMTP exchange; runs on a worker thread"""
        context = ssl.create_default_context()
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls(context=context)
            server.login(self.smtp_user, self.smtp_pass)
            server.sendmail(self.from_email, to_email, message.as_string())

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send an email; returns False when nothing was delivered"""
        if not self.smtp_user or not self.smtp_pass:
            logger.info(
                "Email not sent (no SMTP configuration)",
                extra={"to": to_email, "subject": subject}
            )
            logger.debug(text_content or html_content[:200])
            return False

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self.from_name} <{self.from_email}>"
        message["To"] = to_email

        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        await run_in_threadpool(self._deliver, to_email, message)

        logger.info(f"Email sent successfully to {to_email}", extra={"subject": subject})
        return True

    async def send_project_invitation_email(
        self,
        to_email: str,
        project_name: str,
        inviter_name: str,
        role: str,
        project_id
    ) -> bool:
        html, text = get_project_invitation_email(
            to_email, project_name, inviter_name, role, self.project_url(project_id)
        )
        subject = f"You've been invited to collaborate on {project_name}"
        return await self.send_email(to_email, subject, html, text)

    async def send_role_update_email(
        self,
        to_email: str,
        project_name: str,
        updater_name: str,
        new_role: str,
        project_id
    ) -> bool:
        html, text = get_role_update_email(
            to_email, project_name, updater_name, new_role, self.project_url(project_id)
        )
        subject = f"Your role has been updated in {project_name}"
        return await self.send_email(to_email, subject, html, text)

    async def send_removal_email(self, to_email: str, project_name: str, remover_name: str) -> bool:
        html, text = get_removal_email(to_email, project_name, remover_name)
        subject = f"You've been removed from {project_name}"
        return await self.send_email(to_email, subject, html, text)


email_service = EmailService()
