import unittest
from datetime import date, datetime

from apscheduler.schedulers.background import BackgroundScheduler

from database.db_manager import DatabaseManager
from database.schedule_dao import ScheduleDAO
from database.transaction_dao import TransactionDAO
from helpers import make_schedule
from services.notification_service import LogTransport
from services.recurring_service import RecurringService
from services.reminder_service import ReminderService
from services.scheduler_session import DUE_JOB_ID, REMINDER_JOB_ID, SchedulerSession


class TestSchedulerSession(unittest.TestCase):
    def setUp(self):
        self.db = DatabaseManager(":memory:")
        self.db.initialize()
        self.schedule_dao = ScheduleDAO(self.db)
        self.tx_dao = TransactionDAO(self.db)
        self.transport = LogTransport()
        self.generated = []
        self.now = datetime(2024, 3, 1, 10, 0)
        self.scheduler = BackgroundScheduler()
        self.session = SchedulerSession(
            RecurringService(self.schedule_dao, self.tx_dao),
            ReminderService(self.db, self.transport),
            owner_id="owner-1",
            scheduler=self.scheduler,
            on_generated=self.generated.extend,
            clock=lambda: self.now,
        )

    def tearDown(self):
        self.session.stop()
        self.db.close()

    def test_start_runs_both_checks_and_registers_jobs(self):
        self.schedule_dao.create(make_schedule(id="due", next_due_date=date(2024, 3, 1)))
        self.schedule_dao.create(make_schedule(id="soon", next_due_date=date(2024, 3, 2)))
        self.session.start()

        self.assertTrue(self.session.running)
        self.assertIsNotNone(self.scheduler.get_job(DUE_JOB_ID))
        self.assertIsNotNone(self.scheduler.get_job(REMINDER_JOB_ID))
        self.assertEqual([tx.recurring_id for tx in self.generated], ["due"])
        # "due" advanced to April before reminders ran, so only "soon" is reminded.
        self.assertEqual([t[3]["recurringId"] for t in self.transport.sent], ["soon"])

    def test_snapshot_follows_due_processing(self):
        self.schedule_dao.create(make_schedule(next_due_date=date(2024, 3, 1)))
        self.session.start()
        self.assertEqual(self.session.schedules[0].next_due_date, date(2024, 4, 1))

        self.now = datetime(2024, 4, 1, 0, 5)
        outcome = self.session.run_due_check()
        self.assertEqual(len(outcome.inserted), 1)
        self.assertEqual(self.session.schedules[0].next_due_date, date(2024, 5, 1))
        self.assertEqual(self.schedule_dao.get_by_id("s1").next_due_date, date(2024, 5, 1))

    def test_duplicate_start_is_ignored(self):
        self.session.start()
        self.session.start()
        self.assertEqual(len(self.scheduler.get_jobs()), 2)

    def test_schedule_reminders_replaces_existing_job(self):
        self.session.start()
        self.session.schedule_reminders()
        self.session.schedule_reminders()
        ids = sorted(job.id for job in self.scheduler.get_jobs())
        self.assertEqual(ids, [DUE_JOB_ID, REMINDER_JOB_ID])

    def test_stop_is_idempotent(self):
        self.session.start()
        self.session.stop()
        self.session.stop()
        self.assertFalse(self.session.running)

    def test_reload_picks_up_new_schedules(self):
        self.session.start()
        self.assertEqual(self.session.schedules, [])
        self.schedule_dao.create(make_schedule(next_due_date=date(2024, 5, 1)))
        self.session.reload()
        self.assertEqual([s.id for s in self.session.schedules], ["s1"])


if __name__ == "__main__":
    unittest.main()
