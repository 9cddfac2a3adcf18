"""
Outbound email: SMTP transport and HTML templates
"""

import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr, formataddr
from typing import List, Union

import jinja2

from eventrsvp.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates", "email")

env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(TEMPLATES_DIR),
    autoescape=True,
)


class EmailSender:
    """Anything that can deliver one HTML message"""

    def send(self, to: Union[str, List[str]], subject: str, html: str) -> None:
        raise NotImplementedError


class SmtpEmailSender(EmailSender):
    """Delivers through the configured SMTP relay; raises on failure"""

    def __init__(
        self,
        server: str = None,
        port: int = None,
        username: str = None,
        password: str = None,
        use_tls: bool = None,
        from_address: str = None,
    ):
        self.server = server or settings.SMTP_SERVER
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USERNAME
        self.password = password if password is not None else settings.SMTP_PASSWORD
        self.use_tls = settings.SMTP_USE_TLS if use_tls is None else use_tls
        self.from_address = from_address or settings.EMAIL_FROM

    def send(self, to: Union[str, List[str]], subject: str, html: str) -> None:
        recipients = [to] if isinstance(to, str) else list(to)

        msg = MIMEMultipart("alternative")
        from_name, from_email = parseaddr(self.from_address)
        msg["From"] = formataddr((from_name, from_email))
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        with smtplib.SMTP(self.server, self.port, timeout=10) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(from_email, recipients, msg.as_string())

        logger.info(f"Sent '{subject}' to {len(recipients)} recipient(s)")


def get_email_sender() -> EmailSender:
    return SmtpEmailSender()


def render_verification_email(verify_url: str, name: str = "") -> str:
    return env.get_template("verification.html").render(
        name=name,
        verify_url=verify_url,
        ttl_hours=settings.VERIFICATION_TOKEN_TTL_HOURS,
    )


def render_notification_email(event_title: str, subject: str, body: str, event_url: str) -> str:
    return env.get_template("notification.html").render(
        event_title=event_title,
        subject=subject,
        body=body,
        event_url=event_url,
    )
