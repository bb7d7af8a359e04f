"""Datastore protocol.

This interface can be implemented by different storage backends to give
sessions and snapshots durability beyond the process lifetime. The core works
without one.
"""

from typing import Protocol, runtime_checkable

from ..entities.class_session import ClassSession
from ..entities.snapshot import Snapshot


@runtime_checkable
class Datastore(Protocol):

    async def save_session(self, session: ClassSession) -> None:
        """Create or replace a session record.

        Args:
            session: The session entity to save.
        """
        ...

    async def append_snapshot(self, snapshot: Snapshot, sequence: int) -> None:
        """Append a snapshot to its session's durable history.

        Args:
            snapshot: The received snapshot. ``session_id`` is always set.
            sequence: Receipt position of the snapshot within its session.
        """
        ...
