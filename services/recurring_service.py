import dataclasses
import logging
import sqlite3
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from database.schedule_dao import ScheduleDAO
from database.transaction_dao import TransactionDAO
from models.frequency import Frequency, Weekly, frequency_from_fields, to_fields
from models.recurring_schedule import RecurringSchedule
from models.transaction import Transaction
from services.recurring_engine import (
    UpcomingOccurrence, build_schedule_from_transaction, compute_next_due_date,
    process_due, project_upcoming,
)
from utils.constants import KINDS, UPCOMING_HORIZON_DAYS
from utils.date_helpers import now as current_time

logger = logging.getLogger(__name__)

# Edits to these fields move the schedule onto a new timeline.
_TIMELINE_FIELDS = {"frequency", "start_date"}


@dataclass(frozen=True)
class DueFailure:
    schedule_id: str
    reason: str


@dataclass
class DueRunOutcome:
    """Result of one due-processing pass over an owner's schedules.

    `schedules` is the in-memory state after processing, whether or not it
    was persisted. `failures` lists schedules whose writes were rejected.
    """
    schedules: list[RecurringSchedule]
    inserted: list[Transaction] = field(default_factory=list)
    failures: list[DueFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class RecurringService:
    def __init__(self, schedule_dao: ScheduleDAO, tx_dao: TransactionDAO):
        self._dao = schedule_dao
        self._tx_dao = tx_dao

    def get_all(self, owner_id: str) -> list[RecurringSchedule]:
        return self._dao.list(owner_id)

    def get_active(self, owner_id: str) -> list[RecurringSchedule]:
        return [s for s in self._dao.list(owner_id) if s.is_active]

    def get_by_id(self, schedule_id: str) -> RecurringSchedule | None:
        return self._dao.get_by_id(schedule_id)

    def create(
        self,
        owner_id: str,
        amount,
        description: str,
        category: str,
        kind: str,
        account_ref: str,
        frequency: str,
        start_date: date,
        day_of_week: int | None = None,
        day_of_month: int | None = None,
        end_date: date | None = None,
        notes: str = "",
        tags: tuple[str, ...] = (),
    ) -> RecurringSchedule:
        amount = self._validate(amount, description, kind, account_ref, start_date, end_date)
        freq = self._build_frequency(frequency, day_of_week, day_of_month)
        stamp = current_time()
        schedule = RecurringSchedule(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            amount=amount,
            description=description.strip(),
            category=category,
            kind=kind,
            account_ref=account_ref,
            frequency=freq,
            start_date=start_date,
            end_date=end_date,
            next_due_date=compute_next_due_date(start_date, freq),
            is_active=True,
            notes=notes,
            tags=tuple(tags),
            created_at=stamp,
            updated_at=stamp,
        )
        created = self._dao.create(schedule)
        logger.info("Created %s schedule %s (%s)", freq.name, created.id, created.description)
        return created

    def create_from_transaction(
        self,
        owner_id: str,
        tx: Transaction,
        frequency: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> RecurringSchedule:
        """Make an existing expense or income repeat."""
        schedule = build_schedule_from_transaction(
            tx, frequency, owner_id, start_date, end_date, now=current_time()
        )
        self._validate(
            schedule.amount, schedule.description, schedule.kind, schedule.account_ref,
            schedule.start_date, schedule.end_date,
        )
        return self._dao.create(schedule)

    def update(
        self,
        schedule_id: str,
        *,
        frequency: str | None = None,
        day_of_week: int | None = None,
        day_of_month: int | None = None,
        **changes,
    ) -> RecurringSchedule:
        """Apply an owner edit.

        Changing the frequency, its anchor or the start date moves the next
        due date onto the new timeline, never earlier than it already was;
        other edits keep it.
        """
        current = self._dao.get_by_id(schedule_id)
        if current is None:
            raise KeyError(schedule_id)
        if "next_due_date" in changes and changes["next_due_date"] < current.next_due_date:
            raise ValueError("Next due date cannot move earlier than "
                             f"{current.next_due_date.isoformat()}.")

        if frequency is not None or day_of_week is not None or day_of_month is not None:
            name, dow, dom = to_fields(current.frequency)
            changes["frequency"] = self._build_frequency(
                frequency or name,
                day_of_week if day_of_week is not None else dow,
                day_of_month if day_of_month is not None else dom,
            )

        candidate = dataclasses.replace(current, **changes)
        candidate = dataclasses.replace(candidate, amount=self._validate(
            candidate.amount, candidate.description, candidate.kind,
            candidate.account_ref, candidate.start_date, candidate.end_date,
        ))
        changes["amount"] = candidate.amount

        timeline_moved = any(
            k in changes and changes[k] != getattr(current, k) for k in _TIMELINE_FIELDS
        )
        if timeline_moved and "next_due_date" not in changes:
            changes["next_due_date"] = self._rebased_due_date(current, candidate)
        changes["updated_at"] = current_time()
        return self._dao.update(schedule_id, **changes)

    @staticmethod
    def _rebased_due_date(current: RecurringSchedule, edited: RecurringSchedule) -> date:
        """First date on the edited timeline that is not before the current due date.

        Stepping starts after the later of the start date and the last
        generated occurrence, so periods already generated are not reissued.
        """
        baseline = edited.start_date
        if current.last_generated_date is not None and current.last_generated_date > baseline:
            baseline = current.last_generated_date
        due = compute_next_due_date(baseline, edited.frequency)
        while due < current.next_due_date:
            due = compute_next_due_date(due, edited.frequency)
        return due

    def set_active(self, schedule_id: str, is_active: bool) -> RecurringSchedule:
        return self._dao.update(schedule_id, is_active=is_active, updated_at=current_time())

    def toggle_active(self, schedule_id: str) -> RecurringSchedule:
        current = self._dao.get_by_id(schedule_id)
        if current is None:
            raise KeyError(schedule_id)
        return self.set_active(schedule_id, not current.is_active)

    def delete(self, schedule_id: str):
        if self._dao.get_by_id(schedule_id) is None:
            raise KeyError(schedule_id)
        self._dao.delete(schedule_id)
        logger.info("Deleted schedule %s", schedule_id)

    def get_upcoming(
        self,
        schedules: list[RecurringSchedule],
        horizon_days: int = UPCOMING_HORIZON_DAYS,
        now: datetime | None = None,
    ) -> list[UpcomingOccurrence]:
        return project_upcoming(schedules, horizon_days, now or current_time())

    def apply_due(
        self,
        schedules: list[RecurringSchedule],
        now: datetime | None = None,
    ) -> DueRunOutcome:
        """Run due processing over `schedules` and persist the result.

        For each changed schedule the generated transaction is inserted first
        and the schedule written second. Transaction inserts are keyed on
        (schedule id, due date), so a pass that is repeated after a failed
        schedule write does not duplicate the occurrence.
        """
        ref = now or current_time()
        result = process_due(schedules, ref)
        generated_by_id = {g.schedule_id: g for g in result.generated}
        before = {s.id: s for s in schedules}
        outcome = DueRunOutcome(schedules=result.updated_schedules)

        for schedule in result.updated_schedules:
            if schedule is before.get(schedule.id):
                continue
            try:
                generated = generated_by_id.get(schedule.id)
                if generated is not None:
                    outcome.inserted.append(self._tx_dao.insert(generated))
                    logger.debug(
                        "Generated %s for schedule %s", generated.idempotency_key, schedule.id
                    )
                self._dao.update(
                    schedule.id,
                    next_due_date=schedule.next_due_date,
                    last_generated_date=schedule.last_generated_date,
                    is_active=schedule.is_active,
                    updated_at=schedule.updated_at,
                )
            except (sqlite3.Error, KeyError) as exc:
                logger.error("Could not persist due run for schedule %s: %s", schedule.id, exc)
                outcome.failures.append(DueFailure(schedule.id, str(exc)))

        if outcome.inserted or outcome.failures:
            logger.info(
                "Due run: %d generated, %d failed", len(outcome.inserted), len(outcome.failures)
            )
        return outcome

    # ── Validation ───────────────────────────────────────────────────────────

    def _build_frequency(
        self, frequency: str, day_of_week: int | None, day_of_month: int | None
    ) -> Frequency:
        freq = frequency_from_fields(frequency, day_of_week, day_of_month)
        if isinstance(freq, Weekly):
            if freq.day is not None and not 0 <= freq.day <= 6:
                raise ValueError("Day of week must be between 0 (Sunday) and 6 (Saturday).")
        elif freq.day is not None and not 1 <= freq.day <= 31:
            raise ValueError("Day of month must be between 1 and 31.")
        return freq

    def _validate(self, amount, description, kind, account_ref, start_date, end_date) -> Decimal:
        if not description or not description.strip():
            raise ValueError("Description cannot be empty.")
        if kind not in KINDS:
            raise ValueError("Type must be income or expense.")
        if not account_ref:
            raise ValueError("An account is required.")
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise ValueError("Amount must be a number.") from None
        if not value.is_finite() or value <= 0:
            raise ValueError("Amount must be positive.")
        if not isinstance(start_date, date):
            raise ValueError("Invalid start date.")
        if end_date is not None and end_date < start_date:
            raise ValueError("End date cannot be before start date.")
        return value
