from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from models.frequency import Frequency, Weekly


@dataclass(frozen=True)
class RecurringSchedule:
    id: str
    owner_id: str
    amount: Decimal
    description: str
    category: str
    kind: str               # 'expense' | 'income'
    account_ref: str
    frequency: Frequency
    start_date: date
    next_due_date: date
    is_active: bool = True
    end_date: Optional[date] = None
    last_generated_date: Optional[date] = None
    notes: str = ""
    tags: tuple[str, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def anchor_day_of_week(self) -> Optional[int]:
        return self.frequency.day if isinstance(self.frequency, Weekly) else None

    @property
    def anchor_day_of_month(self) -> Optional[int]:
        return None if isinstance(self.frequency, Weekly) else self.frequency.day
