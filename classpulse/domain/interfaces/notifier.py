"""Notifier protocol for outbound report delivery."""

from enum import Enum
from typing import Protocol, runtime_checkable


class DeliveryStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    ERROR = "error"


@runtime_checkable
class Notifier(Protocol):
    """Delivers a message to a recipient, e.g. by email."""

    async def deliver(self, recipient: str, subject: str, body: str) -> DeliveryStatus:
        """Deliver a message.

        Args:
            recipient: Address of the recipient.
            subject: Message subject line.
            body: Message body.

        Returns:
            DeliveryStatus: ``SKIPPED`` when delivery is not configured,
            ``ERROR`` when the transport failed.
        """
        ...
