"""Best-effort real-time fan-out of snapshots to live subscribers."""

import asyncio
import itertools
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..entities.class_session import utc_now
from ..entities.snapshot import Snapshot, SnapshotPayload
from .classroom_store import GLOBAL_CHANNEL, ClassroomStore

logger = logging.getLogger(__name__)


@dataclass
class RelayMetrics:
    """Counters for the relay. Drops are counted, never raised."""

    published: int = 0
    delivered: int = 0
    dropped_malformed: int = 0
    dropped_overflow: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(eq=False)
class Subscription:
    """A listener on the broadcast topic with its own bounded mailbox."""

    id: str
    mailbox: asyncio.Queue = field(repr=False)


class SnapshotRelay:
    """Publish/subscribe channel for snapshots.

    All sessions share one broadcast domain; listeners filter on the
    ``sessionId``/``studentId`` fields of the payload. There is no backlog:
    a subscriber only sees what is published while it is subscribed.
    Publishing never suspends, so snapshots from one connection reach every
    mailbox in the order they were published.
    """

    def __init__(self, store: ClassroomStore, mailbox_size: int = 256):
        self._store = store
        self._mailbox_size = mailbox_size
        self._subscribers: Dict[str, Subscription] = {}
        self._ids = itertools.count(1)
        self.metrics = RelayMetrics()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, connection_id: Optional[str] = None) -> Subscription:
        subscription = Subscription(
            id=connection_id or f"conn-{next(self._ids)}",
            mailbox=asyncio.Queue(maxsize=self._mailbox_size),
        )
        self._subscribers[subscription.id] = subscription
        logger.info(f"Subscriber {subscription.id} joined ({len(self._subscribers)} listening)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a listener. Unknown or already removed listeners are ignored."""
        current = self._subscribers.get(subscription.id)
        if current is not subscription:
            return
        del self._subscribers[subscription.id]
        logger.info(f"Subscriber {subscription.id} left ({len(self._subscribers)} listening)")

    def drop_malformed(self, reason: str) -> None:
        """Count a frame that never became a snapshot."""
        self.metrics.dropped_malformed += 1
        logger.debug(f"Dropped malformed snapshot payload: {reason}")

    def publish(self, payload: Any) -> Optional[Snapshot]:
        """Stamp a snapshot payload and fan it out to every current subscriber.

        Args:
            payload: Raw snapshot dict from a client, or a ``SnapshotPayload``.

        Returns:
            The stamped snapshot, or None if the payload was malformed and
            dropped.
        """
        try:
            if isinstance(payload, SnapshotPayload):
                parsed = payload
            else:
                parsed = SnapshotPayload.model_validate(payload)
        except ValidationError as e:
            self.drop_malformed(f"{e.error_count()} field error(s)")
            return None

        snapshot = parsed.to_snapshot(received_at=utc_now())
        self._record_live(snapshot)
        self.metrics.published += 1

        for subscription in list(self._subscribers.values()):
            try:
                subscription.mailbox.put_nowait(snapshot)
                self.metrics.delivered += 1
            except asyncio.QueueFull:
                self.metrics.dropped_overflow += 1
                logger.warning(f"Mailbox full for subscriber {subscription.id}, dropping snapshot")

        return snapshot

    def live_table(self, session_id: Optional[str] = None) -> Dict[str, Snapshot]:
        """Most recent snapshot per student, for one session or for the whole topic."""
        return dict(self._store.live.get(session_id or GLOBAL_CHANNEL, {}))

    def _record_live(self, snapshot: Snapshot) -> None:
        self._store.live[GLOBAL_CHANNEL][snapshot.student_id] = snapshot
        if snapshot.session_id and snapshot.session_id in self._store.live:
            self._store.live[snapshot.session_id][snapshot.student_id] = snapshot
