from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from utils.date_helpers import format_date


@dataclass(frozen=True)
class GeneratedTransaction:
    """One realised occurrence of a schedule, handed to the transaction store."""
    schedule_id: str
    amount: Decimal
    description: str
    category: str
    kind: str               # 'expense' | 'income'
    account_ref: str
    occurred_on: date
    tags: tuple[str, ...] = ()
    notes: str = ""

    @property
    def idempotency_key(self) -> str:
        return f"{self.schedule_id}:{format_date(self.occurred_on)}"
