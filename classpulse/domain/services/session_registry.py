"""Session lifecycle: the single source of truth for which sessions exist."""

import logging
import time
from typing import Callable, List, Optional

from ..entities.class_session import ClassSession, utc_now
from ..entities.identity import Identity
from ..errors import InternalError, SessionNotFound
from ..interfaces.datastore import Datastore
from .classroom_store import ClassroomStore

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 5


class TimeOrderedIdFactory:
    """Generates ``sess_<epoch-ms>`` identifiers that strictly increase."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    def __call__(self) -> str:
        millis = max(int(self._clock() * 1000), self._last + 1)
        self._last = millis
        return f"sess_{millis}"


class SessionRegistry:
    """Opens, closes and looks up sessions.

    States are Open and Closed. A session is Open from creation; ``close`` is
    the only transition and repeating it is harmless.
    """

    def __init__(
        self,
        store: ClassroomStore,
        datastore: Optional[Datastore] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._store = store
        self._datastore = datastore
        self._id_factory = id_factory or TimeOrderedIdFactory()

    @property
    def datastore(self) -> Optional[Datastore]:
        return self._datastore

    async def open(self, course_id: str, owner: Identity) -> ClassSession:
        """Create a new open session owned by ``owner``.

        Raises:
            InternalError: If no free identifier could be generated or the
                datastore rejected the session.
        """
        async with self._store.registry_lock:
            session_id = self._next_id()
            session = ClassSession(
                id=session_id,
                course_id=course_id,
                owner_id=owner.id,
                owner_email=owner.email,
                started_at=utc_now(),
            )
            await self._persist(session)
            self._store.allocate(session)

        logger.info(f"Opened session {session.id} for course {course_id} (owner {owner.id})")
        return session

    async def close(self, session_id: str) -> ClassSession:
        """Close a session. Closing an already closed session is a no-op.

        Raises:
            SessionNotFound: If the session does not exist.
        """
        async with self._store.registry_lock:
            session = self.get(session_id)
            if not session.is_open:
                logger.debug(f"Session {session_id} already closed at {session.ended_at}")
                return session

            # Waits out any append already past its open check.
            async with self._store.partition_lock(session_id):
                closed = session.closed_at(utc_now())
                await self._persist(closed)
                self._store.sessions[session_id] = closed

        logger.info(f"Closed session {session_id}")
        return closed

    def get(self, session_id: str) -> ClassSession:
        """Look up a session.

        Raises:
            SessionNotFound: If the session does not exist.
        """
        session = self._store.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def list_sessions(self) -> List[ClassSession]:
        """All known sessions, in creation order."""
        return list(self._store.sessions.values())

    def _next_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = self._id_factory()
            if candidate not in self._store.sessions:
                return candidate
            logger.debug(f"Session id collision on {candidate}, retrying")
        raise InternalError("Could not allocate a session identifier")

    async def _persist(self, session: ClassSession) -> None:
        if self._datastore is None:
            return
        try:
            await self._datastore.save_session(session)
        except Exception as e:
            logger.error(f"Datastore failed to save session {session.id}: {e}", exc_info=True)
            raise InternalError() from e
