"""
Outbound email over SMTP using aiosmtplib.
Delivery can be switched off with EMAIL_ENABLED=false, in which case messages are only logged.
"""

from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional
import logging

import aiosmtplib

from rental_api.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Thin SMTP client used by the notification layer.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def _build_message(self, to_email: str, subject: str, html_body: str) -> MIMEMultipart:
        message = MIMEMultipart("mixed")
        message["Subject"] = subject
        message["From"] = formataddr((self.config.mail_sender_name, self.config.mail_sender_email))
        message["To"] = to_email

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(html_body, "html"))
        message.attach(body)
        return message

    async def _deliver(self, message: MIMEMultipart) -> bool:
        if not self.config.email_enabled:
            logger.info(f"Email delivery disabled, skipping '{message['Subject']}' to {message['To']}")
            return False

        await aiosmtplib.send(
            message,
            hostname=self.config.smtp_host,
            port=self.config.smtp_port,
            username=self.config.smtp_username or None,
            password=self.config.smtp_password or None,
            start_tls=self.config.smtp_start_tls,
        )
        logger.info(f"Sent email '{message['Subject']}' to {message['To']}")
        return True

    async def send_email(self, to_email: str, subject: str, html_body: str) -> bool:
        """
        Send an HTML email.

        Args:
            to_email: Recipient address
            subject: Subject line
            html_body: HTML content

        Returns:
            True if handed to the SMTP server, False if delivery is disabled

        Raises:
            aiosmtplib.SMTPException: If the SMTP exchange fails
        """
        message = self._build_message(to_email, subject, html_body)
        return await self._deliver(message)

    async def send_email_with_attachment(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        attachment: bytes,
        filename: str
    ) -> bool:
        """
        Send an HTML email with a single PDF attachment.
        """
        message = self._build_message(to_email, subject, html_body)
        part = MIMEApplication(attachment, _subtype="pdf")
        part.add_header("Content-Disposition", "attachment", filename=filename)
        message.attach(part)
        return await self._deliver(message)
