import unittest
from datetime import datetime, timedelta, timezone

from powerposition.clock import FixedClock, SystemClock, load_timezone


class SystemClockTests(unittest.TestCase):
    def setUp(self):
        self.clock = SystemClock()

    def test_utc_now_is_current_and_aware(self):
        now = self.clock.utc_now()
        self.assertEqual(now.utcoffset(), timedelta(0))
        self.assertLess(abs(now - datetime.now(timezone.utc)), timedelta(seconds=1))

    def test_local_now_is_utc_or_one_hour_ahead(self):
        local = self.clock.local_now()
        offset = local.utcoffset()
        self.assertIn(offset, (timedelta(0), timedelta(hours=1)))

    def test_winter_noon_stays_at_noon(self):
        local = self.clock.to_local(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(local.hour, 12)

    def test_summer_noon_is_one_hour_ahead(self):
        local = self.clock.to_local(datetime(2024, 7, 15, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(local.hour, 13)

    def test_naive_input_treated_as_utc(self):
        local = self.clock.to_local(datetime(2024, 7, 15, 12, 0))
        self.assertEqual(local.hour, 13)

    def test_other_timezone(self):
        clock = SystemClock('America/New_York')
        local = clock.to_local(datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(local.hour, 7)

    def test_unknown_timezone_rejected(self):
        with self.assertRaises(ValueError):
            load_timezone('Mars/Olympus_Mons')


class FixedClockTests(unittest.TestCase):
    def test_returns_pinned_instant_in_both_frames(self):
        clock = FixedClock(datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc))

        self.assertEqual(clock.utc_now(), datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc))
        self.assertEqual(clock.local_now().hour, 10)
        self.assertEqual(clock.local_now().date().isoformat(), '2024-06-15')

    def test_advance(self):
        clock = FixedClock(datetime(2024, 12, 31, 23, 30))
        clock.advance(timedelta(hours=1))

        self.assertEqual(clock.local_now().date().isoformat(), '2025-01-01')
        self.assertEqual(clock.local_now().hour, 0)


if __name__ == '__main__':
    unittest.main()
