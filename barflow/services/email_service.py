"""Email service for venue notifications.

Renders Jinja2 templates and sends them through SendGrid (default) or
Office 365 SMTP.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from pathlib import Path
from typing import Optional, Tuple

from jinja2 import Environment, FileSystemLoader
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from barflow.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


def _autoescape(template_name: Optional[str]) -> bool:
    return bool(template_name) and template_name.endswith(".html.j2")


class EmailService:
    """Email service supporting SendGrid and Office 365 SMTP."""

    def __init__(
        self,
        provider: str = "sendgrid",
        from_email: Optional[str] = None,
        from_name: str = "BarFlow",
        sendgrid_api_key: Optional[str] = None,
        smtp_host: str = "smtp.office365.com",
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        template_dir: Path = TEMPLATE_DIR,
    ):
        self.provider = provider.lower()
        self.from_email = from_email
        self.from_name = from_name
        self.sendgrid_api_key = sendgrid_api_key
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.jinja = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=_autoescape,
        )

    def render(self, template: str, data: dict) -> Tuple[str, str]:
        """Render the plain text and HTML bodies of a template"""
        plain_content = self.jinja.get_template(f"{template}.txt.j2").render(**data)
        html_content = self.jinja.get_template(f"{template}.html.j2").render(**data)
        return plain_content, html_content

    def _send_with_sendgrid(
        self,
        to_email: str,
        subject: str,
        plain_content: str,
        html_content: str,
    ) -> dict:
        """Send email using SendGrid."""
        if not self.sendgrid_api_key or not self.from_email:
            return {"sent": False, "error": "SendGrid is not configured"}

        mail = Mail(
            from_email=(self.from_email, self.from_name),
            to_emails=to_email,
            subject=subject,
            plain_text_content=plain_content,
            html_content=html_content,
        )

        try:
            client = SendGridAPIClient(self.sendgrid_api_key)
            response = client.send(mail)
            sent = 200 <= response.status_code < 300
            if sent:
                logger.info(f"Email sent via SendGrid to {to_email}")
            return {"sent": sent, "status_code": response.status_code, "provider": "sendgrid"}
        except Exception as exc:
            logger.error(f"SendGrid email error: {exc}")
            return {"sent": False, "error": str(exc)}

    def _send_with_office365(
        self,
        to_email: str,
        subject: str,
        plain_content: str,
        html_content: str,
    ) -> dict:
        """Send email using Office 365 SMTP."""
        if not (self.from_email and self.smtp_username and self.smtp_password):
            return {"sent": False, "error": "Office 365 SMTP is not configured"}

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = to_email

        msg.attach(MIMEText(plain_content, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.from_email, [to_email], msg.as_string())
            logger.info(f"Email sent via Office 365 to {to_email}")
            return {"sent": True, "provider": "office365"}
        except Exception as exc:
            logger.error(f"Office 365 SMTP email error: {exc}")
            return {"sent": False, "error": str(exc)}

    def send_email(
        self,
        to_email: str,
        subject: str,
        plain_content: str,
        html_content: str,
    ) -> dict:
        """Send an email using the configured provider."""
        if self.provider == "office365":
            result = self._send_with_office365(to_email, subject, plain_content, html_content)
            if result.get("sent"):
                return result
            # Fall back to SendGrid if configured
            if self.sendgrid_api_key:
                fallback = self._send_with_sendgrid(to_email, subject, plain_content, html_content)
                return {"sent": fallback.get("sent", False), "error": result.get("error")}
            return result

        # Default to SendGrid
        return self._send_with_sendgrid(to_email, subject, plain_content, html_content)

    def send(self, to_email: str, subject: str, template: str, data: dict) -> dict:
        """Render a notification template and send it."""
        plain_content, html_content = self.render(template, data)
        return self.send_email(to_email, subject, plain_content, html_content)


# Singleton instance (initialized lazily)
_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create the email service singleton."""
    global _email_service

    if _email_service is None:
        _email_service = EmailService(
            provider=settings.email_provider,
            from_email=settings.email_from_email,
            from_name=settings.email_from_name,
            sendgrid_api_key=settings.sendgrid_api_key,
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
        )

    return _email_service
