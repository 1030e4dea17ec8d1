"""SMTP transport for outgoing notifications."""
from email.headerregistry import Address
from email.message import EmailMessage
from email.utils import formataddr
import logging
import smtplib
from typing import Optional

from keyserver.services.email.templates import EmailContent
from keyserver.services.errors import EmailTransportError
from keyserver.settings import settings

logger = logging.getLogger(__name__)


class SMTPTransport:
    """Hands rendered emails to an SMTP server."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        starttls: bool = False,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.user = user
        self.password = password
        self.starttls = starttls

    @classmethod
    def from_settings(cls) -> "SMTPTransport":
        """Build a transport from application settings."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.mail_sender,
            user=settings.smtp_user,
            password=settings.smtp_pass,
            starttls=settings.smtp_starttls,
        )

    def build_message(self, name: str, address: str, content: EmailContent) -> EmailMessage:
        """Build the MIME message for a recipient."""
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = formataddr((name, address)) if name else str(Address(addr_spec=address))
        message["Subject"] = content.subject
        message.set_content(content.text)
        return message

    def send(self, name: str, address: str, content: EmailContent) -> None:
        """
        Send one email. Blocking, run it in a worker thread.

        :raises EmailTransportError: when the server rejects or is unreachable.
        """
        message = self.build_message(name, address, content)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                if self.starttls:
                    smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Sending email via %s:%s failed: %s", self.host, self.port, e)
            raise EmailTransportError("Sending email failed") from e
        logger.info("Sent '%s' email", content.subject)
