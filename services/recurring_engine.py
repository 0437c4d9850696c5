"""Pure scheduling logic for recurring transactions.

Nothing in this module touches a store. ``process_due`` and
``project_upcoming`` take a list of schedules and a reference instant and
return new values; callers persist the results.

Dates are calendar dates. A due date is treated as the start of its day when
compared against an instant, so a schedule due on 2024-03-01 is due at any
time on or after 2024-03-01 00:00.
"""
import dataclasses
import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from models.frequency import Frequency, Weekly, frequency_from_fields
from models.generated_transaction import GeneratedTransaction
from models.recurring_schedule import RecurringSchedule
from models.transaction import Transaction
from utils.constants import FREQUENCY_LABELS, RECURRING_TAG
from utils.date_helpers import (
    add_months, as_date, as_datetime, days_between, js_weekday, parse_date, start_of_day,
)


@dataclass(frozen=True)
class DueResult:
    generated: list[GeneratedTransaction]
    updated_schedules: list[RecurringSchedule]


@dataclass(frozen=True)
class UpcomingOccurrence:
    schedule: RecurringSchedule
    due_date: date


# ── Date arithmetic ──────────────────────────────────────────────────────────

def compute_next_due_date(from_date: date, frequency: Frequency) -> date:
    """Return the next due date strictly after from_date."""
    if isinstance(frequency, Weekly):
        nxt = from_date + timedelta(days=7)
        if frequency.day is not None:
            nxt += timedelta(days=(frequency.day - js_weekday(nxt)) % 7)
        return nxt
    return add_months(from_date, frequency.months, frequency.day)


def is_expired(schedule: RecurringSchedule, now: date | datetime) -> bool:
    """True once the calendar day of `now` is past the schedule's end date."""
    return schedule.end_date is not None and as_date(now) > schedule.end_date


# ── Due processing ───────────────────────────────────────────────────────────

def process_due(schedules: list[RecurringSchedule], now: date | datetime) -> DueResult:
    """Generate at most one occurrence per due schedule.

    A schedule that is many periods behind advances a single step per call;
    repeated calls walk it forward.
    """
    ref = as_datetime(now)
    generated: list[GeneratedTransaction] = []
    updated: list[RecurringSchedule] = []

    for schedule in schedules:
        if not schedule.is_active:
            updated.append(schedule)
        elif is_expired(schedule, ref):
            updated.append(dataclasses.replace(schedule, is_active=False, updated_at=ref))
        elif ref >= start_of_day(schedule.next_due_date):
            due = schedule.next_due_date
            generated.append(_generate(schedule, due))
            updated.append(dataclasses.replace(
                schedule,
                next_due_date=compute_next_due_date(due, schedule.frequency),
                last_generated_date=due,
                updated_at=ref,
            ))
        else:
            updated.append(schedule)

    return DueResult(generated=generated, updated_schedules=updated)


def _generate(schedule: RecurringSchedule, occurred_on: date) -> GeneratedTransaction:
    tags = tuple(schedule.tags)
    if RECURRING_TAG not in tags:
        tags += (RECURRING_TAG,)
    return GeneratedTransaction(
        schedule_id=schedule.id,
        amount=schedule.amount,
        description=schedule.description,
        category=schedule.category,
        kind=schedule.kind,
        account_ref=schedule.account_ref,
        occurred_on=occurred_on,
        tags=tags,
        notes=schedule.notes,
    )


# ── Horizon projection ───────────────────────────────────────────────────────

def project_upcoming(
    schedules: list[RecurringSchedule],
    horizon_days: int,
    now: date | datetime,
) -> list[UpcomingOccurrence]:
    """Every occurrence falling in the window [now, now + horizon_days).

    The window opens at the start of now's day so an occurrence due today is
    included whatever the time of day. Schedules are never modified.
    """
    ref = as_datetime(now)
    window_start = start_of_day(ref)
    window_end = ref + timedelta(days=horizon_days)
    result: list[UpcomingOccurrence] = []

    for schedule in schedules:
        if not schedule.is_active or is_expired(schedule, ref):
            continue
        current = schedule.next_due_date
        while start_of_day(current) < window_end:
            if schedule.end_date is not None and current > schedule.end_date:
                break
            if start_of_day(current) >= window_start:
                result.append(UpcomingOccurrence(schedule=schedule, due_date=current))
            current = compute_next_due_date(current, schedule.frequency)

    result.sort(key=lambda o: (o.due_date, o.schedule.id))
    return result


def days_until_due(due_date: date, now: date | datetime) -> int:
    """Whole days from now until the start of due_date, rounded up."""
    return math.ceil(days_between(as_datetime(now), start_of_day(due_date)))


# ── Helpers for owners and display ───────────────────────────────────────────

def build_schedule_from_transaction(
    tx: Transaction,
    frequency_name: str,
    owner_id: str,
    start: date | None = None,
    end: date | None = None,
    now: datetime | None = None,
) -> RecurringSchedule:
    """Turn an existing transaction into a schedule repeating from `start`.

    Weekly schedules anchor on the start's weekday, the others on its day of
    month. The first due date is one period after `start`.
    """
    stamp = now or datetime.now()
    start = start or parse_date(tx.date) or stamp.date()
    frequency = frequency_from_fields(frequency_name, js_weekday(start), start.day)
    return RecurringSchedule(
        id=uuid.uuid4().hex,
        owner_id=owner_id,
        amount=tx.amount,
        description=tx.description,
        category=tx.category,
        kind=tx.kind,
        account_ref=tx.account_ref,
        frequency=frequency,
        start_date=start,
        end_date=end,
        next_due_date=compute_next_due_date(start, frequency),
        is_active=True,
        tags=tuple(t for t in tx.tags if t != RECURRING_TAG),
        notes="",
        created_at=stamp,
        updated_at=stamp,
    )


def frequency_label(frequency: Frequency) -> str:
    return FREQUENCY_LABELS[frequency.name]


def describe_next_occurrence(schedule: RecurringSchedule, now: date | datetime) -> str:
    days = days_until_due(schedule.next_due_date, now)
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    if days <= 7:
        return f"Due in {days} days"
    if days <= 30:
        return f"Due in {math.ceil(days / 7)} weeks"
    return f"Due in {math.ceil(days / 30)} months"
