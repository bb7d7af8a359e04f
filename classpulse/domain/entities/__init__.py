"""Domain entities for the classroom attention tracker."""

from .attendance import AttendanceRecord
from .class_session import ClassSession, SessionStatus, utc_now
from .identity import Identity, Role
from .live_messages import Pong, SnapshotBroadcast
from .snapshot import Snapshot, SnapshotPayload, StudentState
from .summary import (
    ClassAlert,
    DailyReportEntry,
    DailyReportRow,
    SessionSummary,
    StudentSummary,
)

__all__ = [
    # Session entities
    "ClassSession",
    "SessionStatus",
    "utc_now",
    # Snapshot entities
    "Snapshot",
    "SnapshotPayload",
    "StudentState",
    # Aggregates
    "StudentSummary",
    "SessionSummary",
    "DailyReportRow",
    "DailyReportEntry",
    "ClassAlert",
    # Attendance
    "AttendanceRecord",
    # Identity
    "Identity",
    "Role",
    # Live channel messages
    "Pong",
    "SnapshotBroadcast",
]
