"""SMTP implementation of the Notifier protocol."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from ..domain.interfaces.notifier import DeliveryStatus, Notifier

logger = logging.getLogger(__name__)


class SmtpNotifier(Notifier):
    """Sends HTML email through an SMTP relay.

    Delivery is skipped, not failed, when host or credentials are missing.
    """

    def __init__(
        self,
        host: Optional[str],
        user: Optional[str],
        password: Optional[str],
        sender: str = "noreply@example.com",
        port: int = 587,
        timeout: float = 30.0,
    ):
        self.host = host
        self.user = user
        self.password = password
        self.sender = sender
        self.port = port
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    async def deliver(self, recipient: str, subject: str, body: str) -> DeliveryStatus:
        if not self.configured:
            logger.info(f"SMTP not configured, skipping mail to {recipient}")
            return DeliveryStatus.SKIPPED

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient
        msg.set_content(body)
        msg.add_alternative(f"<pre>{body}</pre>", subtype="html")

        try:
            await asyncio.to_thread(self._send, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send mail to {recipient}: {e}")
            return DeliveryStatus.ERROR

        logger.info(f"Sent '{subject}' to {recipient}")
        return DeliveryStatus.OK

    def _send(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self.user, self.password)
            smtp.send_message(msg)
