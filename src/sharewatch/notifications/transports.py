"""
Mail transports for Sharewatch.

Delivers rendered notifications through SMTP or the Gmail API, or records
them without sending in dry-run mode.
"""

from __future__ import annotations

import base64
import logging
import smtplib
import ssl
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any

from googleapiclient.errors import HttpError

from sharewatch.config import MailConfig
from sharewatch.errors import NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingMessage:
    """
    A message ready to be sent.

    Attributes:
        to: Recipient address
        subject: Subject line
        html_body: HTML body
        text_body: Plain text alternative
        reply_to: Reply-To address
        sender_display_name: Display name of the sender
        from_address: Sender mailbox
    """

    to: str
    subject: str
    html_body: str
    text_body: str = ""
    reply_to: str = ""
    sender_display_name: str = ""
    from_address: str = ""


def build_mime(message: OutgoingMessage) -> MIMEMultipart:
    """Build a multipart/alternative MIME message."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = message.subject
    msg["To"] = message.to
    if message.from_address:
        msg["From"] = formataddr((message.sender_display_name, message.from_address))
    if message.reply_to:
        msg["Reply-To"] = message.reply_to

    if message.text_body:
        msg.attach(MIMEText(message.text_body, "plain", "utf-8"))
    msg.attach(MIMEText(message.html_body, "html", "utf-8"))
    return msg


class MailTransport(ABC):
    """
    Abstract mail transport.

    send() returns normally on success and raises NotificationError on
    failure; transports never retry.
    """

    name: str = "base"

    @abstractmethod
    def send(self, message: OutgoingMessage) -> None:
        """
        Send a message.

        Args:
            message: Message to send

        Raises:
            NotificationError: If the message could not be delivered
        """
        ...


class SmtpTransport(MailTransport):
    """
    SMTP-based mail transport.

    Example config:
        {
            "smtp_host": "smtp.example.com",
            "smtp_port": 587,
            "smtp_user": "alerts@example.com",
            "smtp_password": "password",
            "use_tls": true,
        }
    """

    name = "smtp"

    def __init__(self, config: MailConfig) -> None:
        self._config = config

    def send(self, message: OutgoingMessage) -> None:
        """Send a message via SMTP."""
        msg = build_mime(message)
        try:
            with smtplib.SMTP(self._config.smtp_host, self._config.smtp_port) as server:
                if self._config.use_tls:
                    server.starttls(context=ssl.create_default_context())
                if self._config.smtp_user and self._config.smtp_password:
                    server.login(self._config.smtp_user, self._config.smtp_password)
                server.sendmail(message.from_address, [message.to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(
                f"SMTP delivery to {message.to} failed: {e}", recipient=message.to
            ) from e

        logger.info(f"Sent email to {message.to} via SMTP")


class GmailApiTransport(MailTransport):
    """Mail transport using the Gmail API users.messages.send."""

    name = "gmail"

    def __init__(self, service: Any) -> None:
        """
        Initialize the transport.

        Args:
            service: Gmail API service impersonating the sender mailbox
        """
        self._service = service

    def send(self, message: OutgoingMessage) -> None:
        """Send a message via the Gmail API."""
        raw_message = base64.urlsafe_b64encode(build_mime(message).as_bytes()).decode()

        try:
            sent = (
                self._service.users()
                .messages()
                .send(userId="me", body={"raw": raw_message})
                .execute()
            )
        except HttpError as e:
            raise NotificationError(
                f"Gmail delivery to {message.to} failed: {e}", recipient=message.to
            ) from e

        logger.info(f"Sent email to {message.to} (message_id: {sent.get('id')})")


class DryRunTransport(MailTransport):
    """Records messages instead of sending them."""

    name = "dry-run"

    def __init__(self) -> None:
        self.sent: list[OutgoingMessage] = []

    def send(self, message: OutgoingMessage) -> None:
        """Record a message."""
        self.sent.append(message)
        logger.info(f"[dry-run] Would send '{message.subject}' to {message.to}")


def create_transport(
    config: MailConfig,
    gmail_service: Any = None,
    dry_run: bool = False,
) -> MailTransport:
    """
    Factory function to create a transport from mail configuration.

    Args:
        config: Mail configuration
        gmail_service: Gmail API service, required for the gmail transport
        dry_run: Record messages instead of sending them

    Returns:
        Configured transport

    Raises:
        ValueError: If the transport is unknown or lacks its service
    """
    if dry_run:
        return DryRunTransport()
    if config.transport == "smtp":
        return SmtpTransport(config)
    if config.transport == "gmail":
        if gmail_service is None:
            raise ValueError("The gmail transport requires a Gmail API service")
        return GmailApiTransport(gmail_service)
    raise ValueError(
        f"Unknown mail transport: {config.transport}. Available: smtp, gmail"
    )
