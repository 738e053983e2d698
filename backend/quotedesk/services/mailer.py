"""SMTP mailer: one multipart (text + HTML) message per call."""

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from quotedesk.config import Settings
from quotedesk.errors import NotificationError

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: list[str]
    subject: str
    html: str
    text: str
    reply_to: str | None = None


class Mailer:
    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        *,
        sender: str,
        sender_name: str = "",
        use_ssl: bool = False,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.sender_name = sender_name
        self.use_ssl = use_ssl
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "Mailer":
        return cls(
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_user,
            settings.smtp_password,
            sender=settings.sender_address,
            sender_name=settings.agency_name,
            use_ssl=settings.smtp_use_ssl,
            timeout=settings.smtp_timeout,
        )

    def build_message(self, email: OutgoingEmail) -> EmailMessage:
        if not email.to:
            raise NotificationError(detail="no recipients")

        msg = EmailMessage()
        msg["Subject"] = email.subject
        msg["From"] = formataddr((self.sender_name, self.sender))
        msg["To"] = ", ".join(email.to)
        msg["Reply-To"] = email.reply_to or self.sender
        msg["Message-ID"] = make_msgid(domain=self.sender.rpartition("@")[2] or None)
        msg["X-Priority"] = "3"
        if self.sender_name:
            msg["Organization"] = self.sender_name
            msg["X-Mailer"] = f"{self.sender_name} Website"

        msg.set_content(email.text)
        msg.add_alternative(email.html, subtype="html")
        return msg

    def send_sync(self, email: OutgoingEmail) -> str:
        """Send ``email`` and return its Message-ID. Blocks on the SMTP dialogue."""
        msg = self.build_message(email)
        try:
            if self.use_ssl:
                ctx = ssl.create_default_context()
                with smtplib.SMTP_SSL(self.host, self.port, context=ctx, timeout=self.timeout) as smtp:
                    smtp.login(self.user, self.password)
                    smtp.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                    smtp.starttls(context=ssl.create_default_context())
                    smtp.login(self.user, self.password)
                    smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email '{email.subject}' to {email.to}: {e}")
            raise NotificationError(detail=str(e)) from e

        logger.info(f"Email sent successfully: {msg['Message-ID']}")
        return msg["Message-ID"]

    async def send(self, email: OutgoingEmail) -> str:
        return await asyncio.to_thread(self.send_sync, email)
