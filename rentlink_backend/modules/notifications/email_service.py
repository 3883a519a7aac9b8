"""Outgoing email over SMTP."""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from ...config import settings
from ...core.logging import get_logger

logger = get_logger(__name__)


def build_message(to: str, subject: str, html: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = settings.email_sender
    message["To"] = to
    message.attach(MIMEText(html, "html"))
    return message


async def send_email(to: str | None, subject: str, html: str) -> bool:
    """Send an HTML email.

    Notifications are best effort: when email is disabled the message is
    only logged, and delivery errors are logged instead of raised.

    Returns:
        True if the message was handed to the SMTP server
    """
    if not to:
        logger.warning("Email skipped, no recipient", extra={"subject": subject})
        return False

    if not settings.email_enabled:
        logger.info("Email disabled, not sending", extra={"to": to, "subject": subject})
        return False

    try:
        await aiosmtplib.send(
            build_message(to, subject, html),
            hostname=settings.email_host,
            port=settings.email_port,
            username=settings.email_username,
            password=settings.email_password,
            start_tls=settings.email_use_tls,
        )
    except (aiosmtplib.SMTPException, OSError) as e:
        logger.error(
            "Failed to send email",
            extra={"to": to, "subject": subject, "error": str(e)},
        )
        return False

    logger.info("Email sent", extra={"to": to, "subject": subject})
    return True
