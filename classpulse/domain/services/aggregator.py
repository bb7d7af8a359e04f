"""Per-student summaries, class alerts and the daily report."""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Tuple

from ..entities.snapshot import Snapshot, StudentState
from ..entities.summary import (
    ClassAlert,
    DailyReportEntry,
    DailyReportRow,
    SessionSummary,
    StudentSummary,
)
from .event_log import EventLog
from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)

BORED_ADVISORY = "Students appear bored. Try interaction or activity."
CONFUSED_ADVISORY = "Many appear confused. Re-explain the concept."
ATTENTIVE_ADVISORY = "Great! Class is highly attentive."

# (state, percentage that must be exceeded, advisory), checked in this order.
ALERT_POLICY: Tuple[Tuple[str, int, str], ...] = (
    (StudentState.BORED.value, 80, BORED_ADVISORY),
    (StudentState.CONFUSED.value, 50, CONFUSED_ADVISORY),
    (StudentState.ATTENTIVE.value, 90, ATTENTIVE_ADVISORY),
)


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer ``numerator / denominator`` rounded half away from zero."""
    if denominator == 0:
        return 0
    sign = -1 if (numerator < 0) != (denominator < 0) else 1
    numerator, denominator = abs(numerator), abs(denominator)
    return sign * ((2 * numerator + denominator) // (2 * denominator))


def advisory_for(percentages: Mapping[str, int]) -> str:
    """First advisory in ``ALERT_POLICY`` whose threshold is exceeded, or "".

    Thresholds overlap, so evaluation order matters.
    """
    for state, threshold, text in ALERT_POLICY:
        if percentages.get(state, 0) > threshold:
            return text
    return ""


class _Accumulator:
    __slots__ = ("total", "count", "states")

    def __init__(self):
        self.total = 0
        self.count = 0
        self.states: Counter = Counter()

    def add(self, snapshot: Snapshot) -> None:
        self.total += snapshot.attention
        self.count += 1
        self.states[snapshot.state] += 1

    @property
    def mean(self) -> int:
        return round_half_up(self.total, self.count)


def _group_by_student(snapshots: Iterable[Snapshot]) -> Dict[str, _Accumulator]:
    groups: Dict[str, _Accumulator] = {}
    for snapshot in snapshots:
        groups.setdefault(snapshot.student_id, _Accumulator()).add(snapshot)
    return groups


class Aggregator:
    """Read-only computations over the event log and the live tables."""

    def __init__(self, registry: SessionRegistry, event_log: EventLog):
        self._registry = registry
        self._event_log = event_log

    def summarize(self, session_id: str) -> SessionSummary:
        """Summarize every student of a session.

        Raises:
            SessionNotFound: If the session does not exist.
        """
        session = self._registry.get(session_id)
        groups = _group_by_student(self._event_log.read_all(session_id))
        summary = [
            StudentSummary(
                student_id=student_id,
                mean_attention=acc.mean,
                histogram=dict(acc.states),
            )
            for student_id, acc in groups.items()
        ]
        return SessionSummary(session=session, summary=summary)

    @staticmethod
    def alert(live_table: Mapping[str, Snapshot]) -> ClassAlert:
        """Advisory for the most recent snapshot of each student.

        Percentages are relative to the number of distinct students in the
        table and rounded half away from zero.
        """
        counts = Counter(snapshot.state for snapshot in live_table.values())
        total = len(live_table)
        percentages = {state: round_half_up(count * 100, total) for state, count in counts.items()}
        return ClassAlert(
            alert=advisory_for(percentages),
            students=total,
            counts={state.value: counts[state.value] for state in StudentState},
        )

    def daily_aggregate(self) -> List[DailyReportEntry]:
        """Mean attention per student for every known session, open or closed."""
        report = []
        for session in self._registry.list_sessions():
            groups = _group_by_student(self._event_log.read_all(session.id))
            report.append(
                DailyReportEntry(
                    session_id=session.id,
                    course_id=session.course_id,
                    owner_email=session.owner_email,
                    rows=[
                        DailyReportRow(student_id=student_id, mean_attention=acc.mean)
                        for student_id, acc in groups.items()
                    ],
                )
            )
        logger.info(f"Daily aggregate computed over {len(report)} session(s)")
        return report
