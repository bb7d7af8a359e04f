"""Daily report job: aggregate every session and mail each session owner."""

import asyncio
import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from ..entities.class_session import utc_now
from ..entities.summary import DailyReportEntry
from ..interfaces.notifier import DeliveryStatus, Notifier
from .aggregator import Aggregator

logger = logging.getLogger(__name__)

REPORT_SUBJECT = "Daily Class Report"


def next_run_at(now: datetime, hour: int, minute: int = 0, last_run_date: Optional[date] = None) -> datetime:
    """Next ``hour:minute`` UTC strictly after ``now``.

    A day that already has a run (``last_run_date`` or earlier) is skipped, so
    a wakeup that lands a moment before the target cannot fire twice.
    """
    now = now.astimezone(timezone.utc)
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    while target <= now or (last_run_date is not None and target.date() <= last_run_date):
        target += timedelta(days=1)
    return target


def seconds_until_next_run(
    now: datetime, hour: int, minute: int = 0, last_run_date: Optional[date] = None
) -> float:
    """Seconds from ``now`` until the next ``hour:minute`` UTC."""
    return (next_run_at(now, hour, minute, last_run_date) - now).total_seconds()


def render_report(entries: List[DailyReportEntry]) -> str:
    return json.dumps([entry.model_dump(mode="json", by_alias=True) for entry in entries])


class ReportScheduler:
    """Fires once per calendar day at a fixed UTC time.

    The job only reads, so cancelling it mid-run cannot corrupt the event log.
    Notifier failures are logged and not retried.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        notifier: Notifier,
        hour: int = 18,
        minute: int = 0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._aggregator = aggregator
        self._notifier = notifier
        self.hour = hour
        self.minute = minute
        self._clock = clock
        self._task: Optional[asyncio.Task] = None
        self._last_run_date: Optional[date] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            logger.warning("Report scheduler already running")
            return
        self._task = asyncio.create_task(self._run_forever(), name="daily-report")
        logger.info(f"Report scheduler started, firing daily at {self.hour:02d}:{self.minute:02d} UTC")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Report scheduler stopped")

    async def _run_forever(self) -> None:
        while True:
            now = self._clock()
            target = next_run_at(now, self.hour, self.minute, self._last_run_date)
            delay = (target - now).total_seconds()
            logger.debug(f"Next daily report at {target.isoformat()} (in {delay:.0f}s)")
            await asyncio.sleep(delay)
            self._last_run_date = target.date()
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Daily report run failed: {e}", exc_info=True)

    async def run_once(self) -> Dict[str, DeliveryStatus]:
        """Aggregate all sessions and deliver one report per session owner.

        Returns:
            Delivery status per recipient.
        """
        report = self._aggregator.daily_aggregate()
        by_owner: Dict[str, List[DailyReportEntry]] = {}
        for entry in report:
            if not entry.owner_email:
                logger.debug(f"Session {entry.session_id} has no owner email, not reported")
                continue
            by_owner.setdefault(entry.owner_email, []).append(entry)

        outcomes = {}
        for recipient, entries in by_owner.items():
            outcomes[recipient] = await self.deliver_report(recipient, entries)
        return outcomes

    async def deliver_report(self, recipient: str, entries: List[DailyReportEntry]) -> DeliveryStatus:
        """Hand a report to the notifier, swallowing any failure."""
        try:
            status = await self._notifier.deliver(recipient, REPORT_SUBJECT, render_report(entries))
        except Exception as e:
            logger.error(f"Report delivery to {recipient} failed: {e}", exc_info=True)
            return DeliveryStatus.ERROR

        if status == DeliveryStatus.ERROR:
            logger.error(f"Report delivery to {recipient} reported an error")
        else:
            logger.info(f"Report delivery to {recipient}: {DeliveryStatus(status).value}")
        return DeliveryStatus(status)
