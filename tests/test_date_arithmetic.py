import unittest
from datetime import date, timedelta

from models.frequency import (
    Monthly, Quarterly, Weekly, Yearly, frequency_from_fields, to_fields,
)
from services.recurring_engine import compute_next_due_date, frequency_label
from utils.date_helpers import js_weekday


class TestComputeNextDueDate(unittest.TestCase):
    def test_weekly_without_anchor_adds_seven_days(self):
        self.assertEqual(compute_next_due_date(date(2024, 3, 6), Weekly()), date(2024, 3, 13))

    def test_weekly_anchor_matching_weekday_is_not_shifted(self):
        # 2024-03-06 is a Wednesday (3)
        self.assertEqual(compute_next_due_date(date(2024, 3, 6), Weekly(3)), date(2024, 3, 13))

    def test_weekly_anchor_snaps_forward(self):
        # +7 lands on Wednesday 2024-03-13, next Friday is the 15th
        self.assertEqual(compute_next_due_date(date(2024, 3, 6), Weekly(5)), date(2024, 3, 15))

    def test_weekly_anchor_earlier_in_week_wraps_to_following_week(self):
        # +7 lands on Wednesday 2024-03-13, next Monday is the 18th
        self.assertEqual(compute_next_due_date(date(2024, 3, 6), Weekly(1)), date(2024, 3, 18))
        self.assertEqual(js_weekday(date(2024, 3, 18)), 1)

    def test_monthly_clamps_to_leap_february(self):
        self.assertEqual(
            compute_next_due_date(date(2024, 1, 31), Monthly(31)), date(2024, 2, 29)
        )

    def test_monthly_anchor_restores_after_short_month(self):
        self.assertEqual(
            compute_next_due_date(date(2024, 2, 29), Monthly(31)), date(2024, 3, 31)
        )

    def test_monthly_anchor_31_on_30_day_month(self):
        self.assertEqual(
            compute_next_due_date(date(2024, 3, 31), Monthly(31)), date(2024, 4, 30)
        )

    def test_monthly_without_anchor_clamps_day(self):
        self.assertEqual(compute_next_due_date(date(2023, 1, 31), Monthly()), date(2023, 2, 28))

    def test_monthly_crosses_year(self):
        self.assertEqual(compute_next_due_date(date(2024, 12, 15), Monthly(15)), date(2025, 1, 15))

    def test_quarterly_adds_three_months(self):
        self.assertEqual(
            compute_next_due_date(date(2024, 11, 30), Quarterly(30)), date(2025, 2, 28)
        )

    def test_yearly_from_leap_day(self):
        self.assertEqual(compute_next_due_date(date(2024, 2, 29), Yearly(29)), date(2025, 2, 28))
        self.assertEqual(compute_next_due_date(date(2027, 2, 28), Yearly(29)), date(2028, 2, 29))

    def test_results_strictly_increase(self):
        for freq in (Weekly(), Weekly(0), Weekly(6), Monthly(31), Quarterly(1), Yearly(31)):
            current = date(2024, 1, 31)
            for _ in range(30):
                nxt = compute_next_due_date(current, freq)
                self.assertGreater(nxt, current, f"{freq} did not advance from {current}")
                current = nxt

    def test_weekly_always_at_least_seven_days(self):
        start = date(2024, 3, 3)
        for offset in range(7):
            for anchor in range(7):
                d = start + timedelta(days=offset)
                nxt = compute_next_due_date(d, Weekly(anchor))
                self.assertGreaterEqual((nxt - d).days, 7)
                self.assertLess((nxt - d).days, 14)
                self.assertEqual(js_weekday(nxt), anchor)


class TestFrequencyFields(unittest.TestCase):
    def test_inactive_anchor_is_dropped(self):
        self.assertEqual(frequency_from_fields("weekly", 2, 15), Weekly(2))
        self.assertEqual(frequency_from_fields("yearly", 2, 15), Yearly(15))

    def test_to_fields(self):
        self.assertEqual(to_fields(Weekly(4)), ("weekly", 4, None))
        self.assertEqual(to_fields(Quarterly(10)), ("quarterly", None, 10))

    def test_unknown_frequency(self):
        with self.assertRaises(ValueError):
            frequency_from_fields("daily")

    def test_labels(self):
        self.assertEqual(frequency_label(Quarterly()), "Quarterly")


if __name__ == "__main__":
    unittest.main()
