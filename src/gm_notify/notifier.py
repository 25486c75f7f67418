"""Outbound notifications for order and listing events.

Delivery is best effort: callers go through ``notify_safely`` so a mail
outage is logged and never fails the request that triggered it.
"""

import logging
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Protocol

import aiosmtplib

from config.settings import settings
from src.gm_notify.messages import Message

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def notify(self, recipient_email: str, subject: str, body: str) -> None: ...


class SmtpNotifier:
    """Plain-text mail over SMTP (STARTTLS when ``use_tls``), one connection per message."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
        sender: str = "no-reply@grain-market.local",
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.sender = sender

    def build_message(self, recipient_email: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient_email
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=False)
        msg["Message-ID"] = make_msgid(domain=self.sender.rpartition("@")[2] or None)
        msg.set_content(body)
        return msg

    async def notify(self, recipient_email: str, subject: str, body: str) -> None:
        await aiosmtplib.send(
            self.build_message(recipient_email, subject, body),
            hostname=self.host,
            port=self.port,
            username=self.username,
            password=self.password,
            start_tls=self.use_tls,
            timeout=self.timeout,
        )
        logger.info("Mail sent to %s: %s", recipient_email, subject)


class LogNotifier:
    """Used when notifications are disabled: records what would have been sent."""

    async def notify(self, recipient_email: str, subject: str, body: str) -> None:
        logger.info("Notification (not sent) to %s: %s", recipient_email, subject)


def get_notifier() -> Notifier:
    if not settings.NOTIFICATIONS_ENABLED or not settings.SMTP_HOST:
        return LogNotifier()
    return SmtpNotifier(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
        sender=settings.MAIL_FROM,
    )


async def notify_safely(notifier: Notifier, recipient_email: str, message: Message) -> bool:
    """Send ``message``; returns False instead of raising on any delivery failure."""
    try:
        await notifier.notify(recipient_email, message.subject, message.body)
    except Exception:
        logger.exception("Failed to notify %s (%s)", recipient_email, message.subject)
        return False
    return True
