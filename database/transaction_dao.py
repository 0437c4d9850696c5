import json
import uuid
from decimal import Decimal
from typing import Optional

from database.db_manager import DatabaseManager
from models.generated_transaction import GeneratedTransaction
from models.transaction import Transaction
from utils.date_helpers import format_date


class TransactionDAO:
    """Transaction store. One row per (recurring_id, date) occurrence."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            account_ref=row["account_ref"],
            kind=row["kind"],
            amount=Decimal(row["amount"]),
            category=row["category"],
            description=row["description"],
            date=row["date"],
            recurring_id=row["recurring_id"],
            tags=tuple(json.loads(row["tags"] or "[]")),
            notes=row["notes"],
            created_at=row["created_at"],
        )

    def get_all(self) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM transactions ORDER BY date ASC, id ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: str) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM transactions WHERE id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_schedule(self, schedule_id: str) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM transactions WHERE recurring_id = ? ORDER BY date ASC",
            (schedule_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_occurrence(self, schedule_id: str, date_str: str) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM transactions WHERE recurring_id = ? AND date = ?",
            (schedule_id, date_str),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def insert(self, generated: GeneratedTransaction) -> Transaction:
        """Insert a generated occurrence, returning the stored row.

        Inserting an occurrence that already exists for the same schedule and
        date is a no-op that returns the existing row.
        """
        date_str = format_date(generated.occurred_on)
        conn = self._db.get_connection()
        conn.execute(
            """INSERT OR IGNORE INTO transactions
               (id, account_ref, kind, amount, category, description, date,
                recurring_id, tags, notes)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                uuid.uuid4().hex, generated.account_ref, generated.kind,
                str(generated.amount), generated.category, generated.description,
                date_str, generated.schedule_id, json.dumps(list(generated.tags)),
                generated.notes,
            ),
        )
        conn.commit()
        return self.get_occurrence(generated.schedule_id, date_str)

    def delete(self, tx_id: str):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
        conn.commit()
