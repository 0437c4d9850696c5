"""APScheduler-backed session running the due check and the reminder check.

One session owns one owner's in-memory schedule snapshot. ``start()`` runs
both checks once, immediately, then registers the interval jobs;
``stop()`` shuts the scheduler down.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.interval import IntervalTrigger

from models.recurring_schedule import RecurringSchedule
from models.transaction import Transaction
from services.recurring_service import DueRunOutcome, RecurringService
from services.reminder_service import Reminder, ReminderService
from utils.constants import DUE_CHECK_INTERVAL_SECONDS, REMINDER_CHECK_INTERVAL_SECONDS
from utils.date_helpers import now as current_time

logger = logging.getLogger(__name__)

DUE_JOB_ID = "due_check"
REMINDER_JOB_ID = "reminder_check"


class SchedulerSession:
    def __init__(
        self,
        recurring_service: RecurringService,
        reminder_service: ReminderService,
        owner_id: str,
        scheduler: BaseScheduler | None = None,
        on_generated: Optional[Callable[[list[Transaction]], None]] = None,
        clock: Callable[[], datetime] = current_time,
        due_interval: int = DUE_CHECK_INTERVAL_SECONDS,
        reminder_interval: int = REMINDER_CHECK_INTERVAL_SECONDS,
    ) -> None:
        self._recurring = recurring_service
        self._reminders = reminder_service
        self._owner_id = owner_id
        self._scheduler_factory = (lambda: scheduler) if scheduler is not None else BackgroundScheduler
        self._scheduler: BaseScheduler | None = None
        self._on_generated = on_generated
        self._clock = clock
        self._due_interval = due_interval
        self._reminder_interval = reminder_interval
        self._lock = threading.Lock()
        self._schedules: list[RecurringSchedule] = []
        self.last_outcome: DueRunOutcome | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    @property
    def schedules(self) -> list[RecurringSchedule]:
        with self._lock:
            return list(self._schedules)

    def start(self) -> None:
        if self._scheduler is not None:
            logger.info("SchedulerSession already started; ignoring duplicate start.")
            return

        self.reload()
        self.run_due_check()
        self.run_reminder_check()

        scheduler = self._scheduler_factory()
        scheduler.add_job(
            self.run_due_check,
            trigger=IntervalTrigger(seconds=self._due_interval),
            id=DUE_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._add_reminder_job(scheduler)
        scheduler.start()
        self._scheduler = scheduler
        logger.info("SchedulerSession started for owner %s", self._owner_id)

    def stop(self) -> None:
        if self._scheduler is None:
            return
        try:
            self._scheduler.shutdown(wait=False)
            logger.info("SchedulerSession stopped.")
        finally:
            self._scheduler = None

    def schedule_reminders(self) -> None:
        """Re-register the reminder job and run one check now.

        Any existing reminder job is replaced rather than duplicated.
        """
        if self._scheduler is not None:
            self._add_reminder_job(self._scheduler)
        self.run_reminder_check()

    def reload(self) -> None:
        """Replace the in-memory snapshot with the store's current state."""
        schedules = self._recurring.get_all(self._owner_id)
        with self._lock:
            self._schedules = schedules

    def run_due_check(self) -> DueRunOutcome:
        with self._lock:
            outcome = self._recurring.apply_due(self._schedules, self._clock())
            self._schedules = outcome.schedules
        self.last_outcome = outcome
        if not outcome.ok:
            logger.warning(
                "Due check left %d schedule(s) unsaved: %s",
                len(outcome.failures), ", ".join(f.schedule_id for f in outcome.failures),
            )
        if outcome.inserted and self._on_generated is not None:
            self._on_generated(outcome.inserted)
        return outcome

    def run_reminder_check(self) -> list[Reminder]:
        try:
            return self._reminders.check_and_send(self.schedules, self._clock())
        except Exception:
            logger.exception("Bill reminder check failed")
            return []

    def _add_reminder_job(self, scheduler: BaseScheduler) -> None:
        scheduler.add_job(
            self.run_reminder_check,
            trigger=IntervalTrigger(seconds=self._reminder_interval),
            id=REMINDER_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
