from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class Transaction:
    id: str
    account_ref: str
    kind: str               # 'income' | 'expense'
    amount: Decimal
    category: str
    description: str
    date: str               # 'YYYY-MM-DD'
    recurring_id: Optional[str] = None
    tags: tuple[str, ...] = ()
    notes: str = ""
    created_at: str = ""
