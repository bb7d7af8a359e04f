"""Domain services for the classroom attention tracker."""

from .aggregator import Aggregator
from .attendance_register import AttendanceRegister
from .classroom_store import GLOBAL_CHANNEL, ClassroomStore
from .event_log import EventLog, SnapshotSequence
from .report_scheduler import ReportScheduler
from .session_registry import SessionRegistry
from .snapshot_relay import RelayMetrics, SnapshotRelay, Subscription

__all__ = [
    "Aggregator",
    "AttendanceRegister",
    "ClassroomStore",
    "EventLog",
    "GLOBAL_CHANNEL",
    "RelayMetrics",
    "ReportScheduler",
    "SessionRegistry",
    "SnapshotRelay",
    "SnapshotSequence",
    "Subscription",
]
