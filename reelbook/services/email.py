"""SMTP transport for outgoing mail."""

import logging
from email.message import EmailMessage

import aiosmtplib

from reelbook.core.config import settings

logger = logging.getLogger(__name__)


def build_message(to: str, subject: str, body: str, reply_to: str | None = None) -> EmailMessage:
    message = EmailMessage()
    message["From"] = f"{settings.app_name} <{settings.smtp_from}>"
    message["To"] = to
    message["Subject"] = subject
    if reply_to:
        message["Reply-To"] = reply_to
    message.set_content(body)
    return message


async def send_email(to: str, subject: str, body: str, reply_to: str | None = None) -> None:
    """Send a plain-text email.

    Raises aiosmtplib.SMTPException or OSError when delivery fails, and
    ValueError when a header value contains a line break.
    """
    await aiosmtplib.send(
        build_message(to, subject, body, reply_to),
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username or None,
        password=settings.smtp_password or None,
        start_tls=settings.smtp_start_tls,
        timeout=settings.smtp_timeout,
    )
    logger.debug("Email %r sent to %s", subject, to)
