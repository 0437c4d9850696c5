from datetime import date

from database.db_manager import DatabaseManager
from utils.date_helpers import format_date


class SentReminderDAO:
    """Ledger of dispatched reminder keys. A key is kept until its due date passes."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def record(self, key: str, due_date: date) -> None:
        conn = self._db.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO sent_reminders(key, expires) VALUES (?, ?)",
            (key, format_date(due_date)),
        )
        conn.commit()

    def purge_expired(self, today: date) -> int:
        conn = self._db.get_connection()
        cur = conn.execute(
            "DELETE FROM sent_reminders WHERE expires < ?", (format_date(today),)
        )
        conn.commit()
        return cur.rowcount

    def sent_keys(self, today: date) -> set[str]:
        rows = self._db.get_connection().execute(
            "SELECT key FROM sent_reminders WHERE expires >= ?", (format_date(today),)
        ).fetchall()
        return {row["key"] for row in rows}
