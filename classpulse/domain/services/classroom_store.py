"""Process-scoped in-memory state shared by the classroom services."""

import asyncio
from typing import Dict, List

from ..entities.attendance import AttendanceRecord
from ..entities.class_session import ClassSession
from ..entities.snapshot import Snapshot

# Live table key for snapshots published without a known session.
GLOBAL_CHANNEL = "*"


class ClassroomStore:
    """Holds the session table and the per-session partitions.

    One instance is created per process and handed to every service at
    construction. Mutations go through the locks below; readers take copies
    or bounded slices and never see a partially written record.
    """

    def __init__(self):
        self.sessions: Dict[str, ClassSession] = {}
        self.events: Dict[str, List[Snapshot]] = {}
        self.live: Dict[str, Dict[str, Snapshot]] = {GLOBAL_CHANNEL: {}}
        self.attendance: Dict[str, Dict[str, AttendanceRecord]] = {}

        self.registry_lock = asyncio.Lock()
        self._partition_locks: Dict[str, asyncio.Lock] = {}

    def allocate(self, session: ClassSession) -> None:
        """Register a new session and its empty partitions."""
        self.events[session.id] = []
        self.live[session.id] = {}
        self.attendance[session.id] = {}
        self._partition_locks[session.id] = asyncio.Lock()
        self.sessions[session.id] = session

    def partition_lock(self, session_id: str) -> asyncio.Lock:
        return self._partition_locks[session_id]

    def clear(self) -> None:
        """Drop all sessions and partitions."""
        self.sessions.clear()
        self.events.clear()
        self.attendance.clear()
        self._partition_locks.clear()
        self.live.clear()
        self.live[GLOBAL_CHANNEL] = {}
