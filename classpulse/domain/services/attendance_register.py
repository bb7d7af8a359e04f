"""Attendance tracking per session."""

import logging
from datetime import datetime
from typing import List, Optional

from ..entities.attendance import AttendanceRecord
from ..entities.class_session import utc_now
from ..errors import SessionNotFound
from .classroom_store import ClassroomStore

logger = logging.getLogger(__name__)


class AttendanceRegister:

    def __init__(self, store: ClassroomStore):
        self._store = store

    async def mark(
        self,
        session_id: str,
        student_id: str,
        status: str = "present",
        timestamp: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Record that a student was seen, keeping the first-seen time.

        Raises:
            SessionNotFound: If the session does not exist.
        """
        if session_id not in self._store.sessions:
            raise SessionNotFound(session_id)

        seen_at = timestamp or utc_now()
        async with self._store.partition_lock(session_id):
            table = self._store.attendance[session_id]
            previous = table.get(student_id)
            record = AttendanceRecord(
                student_id=student_id,
                status=status or "present",
                first_seen_at=previous.first_seen_at if previous else seen_at,
                last_seen_at=seen_at,
            )
            table[student_id] = record

        logger.debug(f"Attendance for {student_id} in {session_id}: {record.status}")
        return record

    def records(self, session_id: str) -> List[AttendanceRecord]:
        """Raises SessionNotFound for unknown sessions."""
        if session_id not in self._store.sessions:
            raise SessionNotFound(session_id)
        return list(self._store.attendance[session_id].values())
