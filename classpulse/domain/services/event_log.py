"""Append-only, receipt-ordered snapshot history per session."""

import logging
from datetime import datetime
from itertools import islice
from typing import Iterator, List, Optional, Union

from pydantic import ValidationError

from ..entities.class_session import utc_now
from ..entities.snapshot import Snapshot, StudentState
from ..errors import InternalError, SessionClosed, SessionNotFound, SnapshotValidationError
from ..interfaces.datastore import Datastore
from .classroom_store import ClassroomStore

logger = logging.getLogger(__name__)


class SnapshotSequence:
    """Lazy, restartable view over the first ``length`` snapshots of a partition.

    The partition only ever grows, so the prefix stays stable while appends
    continue behind it.
    """

    def __init__(self, partition: List[Snapshot], length: int):
        self._partition = partition
        self._length = length

    def __iter__(self) -> Iterator[Snapshot]:
        return islice(self._partition, self._length)

    def __len__(self) -> int:
        return self._length


class EventLog:
    """Record of truth for snapshots, backing the aggregator."""

    def __init__(self, store: ClassroomStore, datastore: Optional[Datastore] = None):
        self._store = store
        self._datastore = datastore

    async def append(
        self,
        session_id: str,
        student_id: str,
        attention: int,
        state: Union[StudentState, str],
        timestamp: Optional[datetime] = None,
    ) -> Snapshot:
        """Append a snapshot to an open session.

        Records are kept in arrival order, not by the client's timestamp.

        Raises:
            SessionNotFound: If the session does not exist.
            SessionClosed: If the session has ended.
            SnapshotValidationError: If attention is outside 0-100 or the
                state is unknown.
            InternalError: If the datastore rejected the write. The log is
                left unchanged.
        """
        if session_id not in self._store.sessions:
            raise SessionNotFound(session_id)

        async with self._store.partition_lock(session_id):
            if not self._store.sessions[session_id].is_open:
                raise SessionClosed(session_id)

            try:
                snapshot = Snapshot(
                    student_id=student_id,
                    session_id=session_id,
                    client_timestamp=timestamp,
                    attention=attention,
                    state=state,
                    received_at=utc_now(),
                )
            except ValidationError as e:
                raise SnapshotValidationError(f"Invalid snapshot: {e.error_count()} field error(s)") from e

            partition = self._store.events[session_id]

            if self._datastore is not None:
                try:
                    await self._datastore.append_snapshot(snapshot, len(partition))
                except Exception as e:
                    logger.error(
                        f"Datastore failed to append snapshot for session {session_id}: {e}",
                        exc_info=True,
                    )
                    raise InternalError() from e

            partition.append(snapshot)

        logger.debug(f"Appended snapshot for {student_id} to session {session_id}")
        return snapshot

    def read_all(self, session_id: str) -> SnapshotSequence:
        """Snapshots of a session in receipt order.

        Raises:
            SessionNotFound: If the session does not exist.
        """
        if session_id not in self._store.sessions:
            raise SessionNotFound(session_id)
        partition = self._store.events[session_id]
        return SnapshotSequence(partition, len(partition))
