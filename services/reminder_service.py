import json
import logging
from dataclasses import dataclass
from datetime import date, datetime

from database.db_manager import DatabaseManager
from database.sent_reminder_dao import SentReminderDAO
from models.recurring_schedule import RecurringSchedule
from models.reminder_settings import ReminderSettings
from services.notification_service import NotificationTransport
from services.recurring_engine import days_until_due, project_upcoming
from utils.constants import (
    PUSH_TARGET_KEY, REMINDER_HORIZON_DAYS, REMINDER_SETTINGS_KEY, REMINDER_TEMPLATES,
)
from utils.currency import format_currency, format_plain
from utils.date_helpers import as_date, format_date, now as current_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reminder:
    schedule_id: str
    due_date: date
    days_until_due: int
    title: str
    body: str
    data: dict

    @property
    def key(self) -> str:
        return f"{self.schedule_id}:{format_date(self.due_date)}:{self.days_until_due}"


class ReminderService:
    def __init__(
        self,
        db: DatabaseManager,
        transport: NotificationTransport,
        ledger: SentReminderDAO | None = None,
    ):
        self._db = db
        self._transport = transport
        self._ledger = ledger

    # ── Settings ─────────────────────────────────────────────────────────────

    def get_settings(self) -> ReminderSettings:
        raw = self._db.get_setting(REMINDER_SETTINGS_KEY, "")
        if not raw:
            return ReminderSettings()
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("reminder settings must be an object")
            return ReminderSettings.from_dict(data)
        except (ValueError, TypeError, KeyError) as exc:
            logger.warning("Error loading bill reminder settings, using defaults: %s", exc)
            return ReminderSettings()

    def save_settings(self, settings: ReminderSettings) -> None:
        self._db.set_setting(REMINDER_SETTINGS_KEY, json.dumps(settings.to_dict()))

    # ── Checks ───────────────────────────────────────────────────────────────

    def get_due_reminders(
        self,
        schedules: list[RecurringSchedule],
        now: datetime,
        settings: ReminderSettings | None = None,
    ) -> list[Reminder]:
        """Reminders whose offset bucket matches an enabled reminder type."""
        settings = settings or self.get_settings()
        offsets = settings.reminder_types.enabled_offsets()
        symbol = self._db.get_setting("currency_symbol", "$")
        reminders = []
        for occurrence in project_upcoming(schedules, REMINDER_HORIZON_DAYS, now):
            days = days_until_due(occurrence.due_date, now)
            if days not in offsets:
                continue
            schedule = occurrence.schedule
            title, phrase = REMINDER_TEMPLATES[days]
            reminders.append(Reminder(
                schedule_id=schedule.id,
                due_date=occurrence.due_date,
                days_until_due=days,
                title=title,
                body=f"{schedule.description} ({format_currency(schedule.amount, symbol)}) {phrase}",
                data={
                    "recurringId": schedule.id,
                    "dueDate": format_date(occurrence.due_date),
                    "amount": format_plain(schedule.amount),
                    "category": schedule.category,
                },
            ))
        return reminders

    def check_and_send(
        self,
        schedules: list[RecurringSchedule],
        now: datetime | None = None,
    ) -> list[Reminder]:
        """Dispatch reminders for schedules due in an enabled offset bucket.

        Returns the reminders handed to the transport. Delivery errors are
        logged and otherwise ignored.
        """
        ref = now or current_time()
        settings = self.get_settings()
        if not settings.enabled:
            return []

        target = self._db.get_setting(PUSH_TARGET_KEY, "")
        if not target:
            logger.warning("Push notifications not available for bill reminders")
            return []

        already_sent: set[str] = set()
        if self._ledger is not None:
            self._ledger.purge_expired(as_date(ref))
            already_sent = self._ledger.sent_keys(as_date(ref))

        dispatched = []
        for reminder in self.get_due_reminders(schedules, ref, settings):
            if reminder.key in already_sent:
                continue
            try:
                self._transport.send(target, reminder.title, reminder.body, reminder.data)
            except Exception:
                logger.exception("Error sending bill reminder for schedule %s", reminder.schedule_id)
                continue
            logger.info("Bill reminder sent: %s", reminder.title)
            dispatched.append(reminder)
            if self._ledger is not None:
                self._ledger.record(reminder.key, reminder.due_date)
        return dispatched
