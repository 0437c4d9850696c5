import json
from dataclasses import fields, replace
from decimal import Decimal
from typing import Optional

from database.db_manager import DatabaseManager
from models.frequency import frequency_from_fields, to_fields
from models.recurring_schedule import RecurringSchedule
from utils.date_helpers import format_date, format_timestamp, parse_date, parse_timestamp

_COLUMNS = (
    "id", "owner_id", "amount", "description", "category", "kind", "account_ref",
    "frequency", "day_of_week", "day_of_month", "start_date", "end_date",
    "is_active", "next_due_date", "last_generated_date", "notes", "tags",
    "created_at", "updated_at",
)

_MODEL_FIELDS = {f.name for f in fields(RecurringSchedule)}


class ScheduleDAO:
    """Schedule store backed by the recurring_schedules table."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> RecurringSchedule:
        return RecurringSchedule(
            id=row["id"],
            owner_id=row["owner_id"],
            amount=Decimal(row["amount"]),
            description=row["description"],
            category=row["category"],
            kind=row["kind"],
            account_ref=row["account_ref"],
            frequency=frequency_from_fields(
                row["frequency"], row["day_of_week"], row["day_of_month"]
            ),
            start_date=parse_date(row["start_date"]),
            end_date=parse_date(row["end_date"]) if row["end_date"] else None,
            is_active=bool(row["is_active"]),
            next_due_date=parse_date(row["next_due_date"]),
            last_generated_date=(
                parse_date(row["last_generated_date"]) if row["last_generated_date"] else None
            ),
            notes=row["notes"],
            tags=tuple(json.loads(row["tags"] or "[]")),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )

    def _to_row(self, schedule: RecurringSchedule) -> dict:
        frequency, day_of_week, day_of_month = to_fields(schedule.frequency)
        return {
            "id": schedule.id,
            "owner_id": schedule.owner_id,
            "amount": str(schedule.amount),
            "description": schedule.description,
            "category": schedule.category,
            "kind": schedule.kind,
            "account_ref": schedule.account_ref,
            "frequency": frequency,
            "day_of_week": day_of_week,
            "day_of_month": day_of_month,
            "start_date": format_date(schedule.start_date),
            "end_date": format_date(schedule.end_date) if schedule.end_date else None,
            "is_active": 1 if schedule.is_active else 0,
            "next_due_date": format_date(schedule.next_due_date),
            "last_generated_date": (
                format_date(schedule.last_generated_date) if schedule.last_generated_date else None
            ),
            "notes": schedule.notes,
            "tags": json.dumps(list(schedule.tags)),
            "created_at": format_timestamp(schedule.created_at) if schedule.created_at else "",
            "updated_at": format_timestamp(schedule.updated_at) if schedule.updated_at else "",
        }

    def list(self, owner_id: str) -> list[RecurringSchedule]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM recurring_schedules WHERE owner_id = ? ORDER BY created_at, id",
            (owner_id,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, schedule_id: str) -> Optional[RecurringSchedule]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM recurring_schedules WHERE id = ?", (schedule_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, schedule: RecurringSchedule) -> RecurringSchedule:
        row = self._to_row(schedule)
        conn = self._db.get_connection()
        conn.execute(
            f"INSERT INTO recurring_schedules ({', '.join(_COLUMNS)}) "
            f"VALUES ({', '.join('?' for _ in _COLUMNS)})",
            tuple(row[c] for c in _COLUMNS),
        )
        conn.commit()
        return self.get_by_id(schedule.id)

    def save(self, schedule: RecurringSchedule) -> RecurringSchedule:
        """Insert or fully replace a schedule row."""
        row = self._to_row(schedule)
        conn = self._db.get_connection()
        conn.execute(
            f"INSERT OR REPLACE INTO recurring_schedules ({', '.join(_COLUMNS)}) "
            f"VALUES ({', '.join('?' for _ in _COLUMNS)})",
            tuple(row[c] for c in _COLUMNS),
        )
        conn.commit()
        return self.get_by_id(schedule.id)

    def update(self, schedule_id: str, **changes) -> RecurringSchedule:
        """Apply a partial update given as RecurringSchedule field names.

        Raises KeyError when the schedule does not exist.
        """
        unknown = set(changes) - _MODEL_FIELDS
        if unknown:
            raise ValueError(f"Unknown schedule fields: {', '.join(sorted(unknown))}")
        current = self.get_by_id(schedule_id)
        if current is None:
            raise KeyError(schedule_id)
        merged = self._to_row(replace(current, **changes))
        columns = [c for c in _COLUMNS if c != "id"]
        conn = self._db.get_connection()
        conn.execute(
            f"UPDATE recurring_schedules SET {', '.join(f'{c}=?' for c in columns)} WHERE id=?",
            tuple(merged[c] for c in columns) + (schedule_id,),
        )
        conn.commit()
        return self.get_by_id(schedule_id)

    def delete(self, schedule_id: str):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM recurring_schedules WHERE id = ?", (schedule_id,))
        conn.commit()