import logging
import os
import signal
import sys
import threading

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.schedule_dao import ScheduleDAO
from database.transaction_dao import TransactionDAO
from database.sent_reminder_dao import SentReminderDAO

from services.recurring_service import RecurringService
from services.reminder_service import ReminderService
from services.notification_service import LogTransport
from services.scheduler_session import SchedulerSession

from models.transaction import Transaction
from utils.app_config import get_db_folder, get_log_level, get_owner_id
from utils.constants import APP_NAME, DEFAULT_OWNER_ID

logger = logging.getLogger(APP_NAME)


def _report_generated(transactions: list[Transaction]):
    count = len(transactions)
    logger.info("Generated %d new transaction%s", count, "s" if count > 1 else "")


def main():
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=get_db_folder())

    # ── DAOs ─────────────────────────────────────────────────────────────────
    schedule_dao = ScheduleDAO(db)
    tx_dao = TransactionDAO(db)
    sent_reminder_dao = SentReminderDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    recurring_svc = RecurringService(schedule_dao, tx_dao)
    reminder_svc = ReminderService(db, LogTransport(), ledger=sent_reminder_dao)

    session = SchedulerSession(
        recurring_svc,
        reminder_svc,
        owner_id=get_owner_id(DEFAULT_OWNER_ID),
        on_generated=_report_generated,
    )

    stop_event = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop_event.set())
    signal.signal(signal.SIGTERM, lambda *_: stop_event.set())

    session.start()
    try:
        stop_event.wait()
    finally:
        session.stop()
        db.close()


if __name__ == "__main__":
    main()
