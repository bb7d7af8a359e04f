"""Classroom controller coordinating the core services for the API layer."""

import logging
import time
from datetime import datetime
from typing import List, Optional

from fastapi import WebSocket

from ..domain.entities import (
    AttendanceRecord,
    ClassAlert,
    ClassSession,
    DailyReportEntry,
    Identity,
    Role,
    SessionSummary,
    Snapshot,
)
from ..domain.interfaces import AuthProvider, DeliveryStatus
from ..domain.services import (
    Aggregator,
    AttendanceRegister,
    EventLog,
    ReportScheduler,
    SessionRegistry,
    SnapshotRelay,
)
from .live_handler import LiveConnectionHandler

logger = logging.getLogger(__name__)


class ClassroomController:
    """
    Controller for coordinating classroom operations.

    This controller is injected with all core services and collaborators and
    handles the business logic for each endpoint, keeping the API layer thin.
    """

    def __init__(
        self,
        auth_provider: AuthProvider,
        registry: SessionRegistry,
        relay: SnapshotRelay,
        event_log: EventLog,
        aggregator: Aggregator,
        attendance: AttendanceRegister,
        scheduler: ReportScheduler,
    ):
        self.auth_provider = auth_provider
        self.registry = registry
        self.relay = relay
        self.event_log = event_log
        self.aggregator = aggregator
        self.attendance = attendance
        self.scheduler = scheduler
        self._started = time.monotonic()

        logger.info("ClassroomController initialized with services")

    async def handle_live_connection(self, websocket: WebSocket) -> None:
        logger.info(f"Handling new live connection from {websocket.client}")
        handler = LiveConnectionHandler(relay=self.relay)
        await handler.handle_websocket(websocket)

    async def open_session(self, course_id: str, caller: Identity) -> ClassSession:
        return await self.registry.open(course_id, caller)

    async def close_session(self, session_id: str) -> ClassSession:
        return await self.registry.close(session_id)

    def get_session(self, session_id: str) -> ClassSession:
        return self.registry.get(session_id)

    async def record_snapshot(
        self,
        session_id: str,
        student_id: str,
        attention: int,
        state: str,
        timestamp: Optional[datetime] = None,
    ) -> Snapshot:
        return await self.event_log.append(session_id, student_id, attention, state, timestamp)

    def summarize(self, session_id: str) -> SessionSummary:
        return self.aggregator.summarize(session_id)

    def class_alert(self, session_id: Optional[str] = None) -> ClassAlert:
        """Advisory for one session, or for the whole live topic when no session is given.

        Raises:
            SessionNotFound: If ``session_id`` names an unknown session.
        """
        if session_id:
            self.registry.get(session_id)
        return self.aggregator.alert(self.relay.live_table(session_id))

    async def mark_attendance(
        self,
        session_id: str,
        student_id: str,
        status: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> AttendanceRecord:
        return await self.attendance.mark(session_id, student_id, status or "present", timestamp)

    def attendance_records(self, session_id: str) -> List[AttendanceRecord]:
        return self.attendance.records(session_id)

    async def daily_report(self, caller: Identity) -> tuple[List[DailyReportEntry], Optional[DeliveryStatus]]:
        """Aggregate every session and mail the report to the caller if they are a teacher.

        Returns:
            The report and the delivery status, or None when no mail was attempted.
        """
        report = self.aggregator.daily_aggregate()
        mail = None
        if caller.role == Role.TEACHER.value and caller.email:
            mail = await self.scheduler.deliver_report(caller.email, report)
        return report, mail

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "ok",
            "uptime": round(time.monotonic() - self._started, 3),
            "providers": {
                "auth_provider": type(self.auth_provider).__name__,
                "datastore": type(self.registry.datastore).__name__ if self.registry.datastore else None,
                "scheduler": "running" if self.scheduler.running else "stopped",
            },
            "relay": {
                "subscribers": self.relay.subscriber_count,
                **self.relay.metrics.as_dict(),
            },
        }
