"""Export and import an owner's recurring schedules as JSON."""
import logging
from datetime import datetime
from decimal import Decimal

from database.schedule_dao import ScheduleDAO
from models.frequency import frequency_from_fields, to_fields
from models.recurring_schedule import RecurringSchedule
from utils.date_helpers import format_date, format_timestamp, parse_date, parse_timestamp

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1


class DataService:
    def __init__(self, schedule_dao: ScheduleDAO):
        self._dao = schedule_dao

    # ── Export ────────────────────────────────────────────────────────────────

    def export_json(self, owner_id: str) -> dict:
        """Return a full export dict (caller writes to disk)."""
        return {
            "export_version": EXPORT_VERSION,
            "exported_at": format_timestamp(datetime.now()),
            "recurring": [self._schedule_to_dict(s) for s in self._dao.list(owner_id)],
        }

    def _schedule_to_dict(self, s: RecurringSchedule) -> dict:
        frequency, day_of_week, day_of_month = to_fields(s.frequency)
        return {
            "id": s.id,
            "amount": str(s.amount),
            "description": s.description,
            "category": s.category,
            "type": s.kind,
            "accountId": s.account_ref,
            "frequency": frequency,
            "dayOfWeek": day_of_week,
            "dayOfMonth": day_of_month,
            "startDate": format_date(s.start_date),
            "endDate": format_date(s.end_date) if s.end_date else None,
            "isActive": s.is_active,
            "nextDueDate": format_date(s.next_due_date),
            "lastGenerated": format_date(s.last_generated_date) if s.last_generated_date else None,
            "notes": s.notes,
            "tags": list(s.tags),
            "createdAt": format_timestamp(s.created_at) if s.created_at else None,
            "updatedAt": format_timestamp(s.updated_at) if s.updated_at else None,
        }

    # ── Import ────────────────────────────────────────────────────────────────

    def import_json(self, owner_id: str, data: dict) -> int:
        """Upsert every schedule in `data` under owner_id. Returns the count.

        Raises ValueError on an unsupported export version or a malformed record;
        nothing is written in that case.
        """
        version = data.get("export_version")
        if version != EXPORT_VERSION:
            raise ValueError(f"Unsupported export version: {version!r}")
        schedules = [self._dict_to_schedule(owner_id, rec) for rec in data.get("recurring", [])]
        for schedule in schedules:
            self._dao.save(schedule)
        logger.info("Imported %d schedule(s) for owner %s", len(schedules), owner_id)
        return len(schedules)

    def _dict_to_schedule(self, owner_id: str, rec: dict) -> RecurringSchedule:
        try:
            start = parse_date(rec["startDate"])
            next_due = parse_date(rec["nextDueDate"])
            if start is None or next_due is None:
                raise ValueError("startDate and nextDueDate must be YYYY-MM-DD")
            return RecurringSchedule(
                id=str(rec["id"]),
                owner_id=owner_id,
                amount=Decimal(str(rec["amount"])),
                description=rec.get("description", ""),
                category=rec.get("category", ""),
                kind=rec.get("type", "expense"),
                account_ref=str(rec["accountId"]),
                frequency=frequency_from_fields(
                    rec["frequency"], rec.get("dayOfWeek"), rec.get("dayOfMonth")
                ),
                start_date=start,
                end_date=parse_date(rec.get("endDate") or ""),
                is_active=bool(rec.get("isActive", True)),
                next_due_date=next_due,
                last_generated_date=parse_date(rec.get("lastGenerated") or ""),
                notes=rec.get("notes") or "",
                tags=tuple(rec.get("tags") or ()),
                created_at=parse_timestamp(rec.get("createdAt") or ""),
                updated_at=parse_timestamp(rec.get("updatedAt") or ""),
            )
        except (KeyError, TypeError, ArithmeticError) as exc:
            raise ValueError(f"Malformed recurring record {rec.get('id')!r}: {exc}") from exc
