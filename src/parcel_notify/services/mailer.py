"""Outbound email over SMTP."""

import logging
from email.message import EmailMessage
from typing import Protocol

import aiosmtplib

from parcel_notify.exceptions import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Anything that can deliver an HTML email."""

    async def send(self, to: str, subject: str, html: str) -> None:
        ...


def build_message(sender: str, to: str, subject: str, html: str) -> EmailMessage:
    """Build a multipart message with a plain-text fallback."""
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML-capable email client.")
    message.add_alternative(html, subtype="html")
    return message


class SmtpMailer:
    """Sends mail through an authenticated SMTP server."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password and self.sender)

    async def send(self, to: str, subject: str, html: str) -> None:
        """Send one message.

        Raises:
            MailDeliveryError: If not configured or the server rejects it.
        """
        if not self.configured:
            raise MailDeliveryError("SMTP credentials not configured")

        message = build_message(self.sender, to, subject, html)

        logger.info(f"Sending email to {to}")
        try:
            # Implicit TLS on 465, STARTTLS on 587
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.port == 465,
                start_tls=self.port == 587,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPResponseException as e:
            raise MailDeliveryError(f"SMTP error {e.code}: {e.message}") from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"Email delivery failed: {e}") from e

        logger.info(f"Email sent to {to}")
