from datetime import date, datetime
from decimal import Decimal

from models.frequency import Frequency, Monthly
from models.recurring_schedule import RecurringSchedule


def make_schedule(
    id: str = "s1",
    frequency: Frequency = Monthly(1),
    next_due_date: date = date(2024, 3, 1),
    **overrides,
) -> RecurringSchedule:
    values = dict(
        id=id,
        owner_id="owner-1",
        amount=Decimal("15.99"),
        description="Streaming",
        category="Entertainment",
        kind="expense",
        account_ref="acct-1",
        frequency=frequency,
        start_date=date(2024, 1, 1),
        next_due_date=next_due_date,
        is_active=True,
        created_at=datetime(2024, 1, 1, 9, 0),
        updated_at=datetime(2024, 1, 1, 9, 0),
    )
    values.update(overrides)
    return RecurringSchedule(**values)
