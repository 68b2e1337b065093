import os
import sys
import unittest
from datetime import datetime, time, timedelta

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from utils.errors import ValidationError  # noqa: E402
from utils.pickup import (  # noqa: E402
    earliest_pickup,
    earliest_pickup_time,
    is_valid_pickup_time,
    parse_pickup_time,
)


def at(hour, minute, second=0):
    return datetime(2025, 11, 1, hour, minute, second)


class EarliestPickupTestCase(unittest.TestCase):
    def test_examples(self):
        cases = {
            at(10, 0): "10:20",
            at(10, 2): "10:25",
            at(10, 16): "10:40",
            at(10, 20): "10:40",
            at(10, 40): "11:00",
            at(10, 59): "11:20",
        }
        for now, expected in cases.items():
            with self.subTest(now=now):
                self.assertEqual(earliest_pickup_time(now), expected)

    def test_seconds_push_to_next_boundary(self):
        self.assertEqual(earliest_pickup_time(at(10, 0, 30)), "10:25")

    def test_always_at_least_prep_window_on_a_boundary(self):
        start = at(8, 0)
        for offset in range(0, 24 * 60, 7):
            now = start + timedelta(minutes=offset, seconds=offset % 60)
            with self.subTest(now=now):
                earliest = earliest_pickup(now)
                self.assertGreaterEqual(earliest, now + timedelta(minutes=20))
                self.assertLess(earliest, now + timedelta(minutes=25))
                self.assertEqual(earliest.minute % 5, 0)
                self.assertEqual(earliest.second, 0)


class PickupValidationTestCase(unittest.TestCase):
    def test_rejects_earlier_accepts_equal_or_later(self):
        now = at(10, 0)
        self.assertFalse(is_valid_pickup_time("10:19", now))
        self.assertTrue(is_valid_pickup_time("10:20", now))
        self.assertTrue(is_valid_pickup_time("13:45", now))

    def test_threshold_is_prep_window_not_rounded_suggestion(self):
        # the suggested time is rounded up; validation is not
        now = at(10, 2)
        self.assertEqual(earliest_pickup_time(now), "10:25")
        self.assertFalse(is_valid_pickup_time("10:21", now))
        self.assertTrue(is_valid_pickup_time("10:22", now))
        self.assertTrue(is_valid_pickup_time("10:23", now))

    def test_earliest_time_is_always_valid(self):
        for now in (at(9, 3), at(12, 16, 59), at(18, 55)):
            with self.subTest(now=now):
                self.assertTrue(is_valid_pickup_time(earliest_pickup_time(now), now))

    def test_malformed_values_are_invalid(self):
        for value in ("", "   ", "noon", "25:00", "10-30", None):
            with self.subTest(value=value):
                self.assertFalse(is_valid_pickup_time(value, at(10, 0)))

    def test_same_day_comparison_near_midnight(self):
        # 23:50 + 20 minutes lands tomorrow; every same-day time is too early
        now = at(23, 50)
        self.assertEqual(earliest_pickup_time(now), "00:10")
        self.assertFalse(is_valid_pickup_time("00:10", now))
        self.assertFalse(is_valid_pickup_time("23:59", now))

    def test_parse_pickup_time(self):
        self.assertEqual(parse_pickup_time(" 09:05 "), time(9, 5))
        with self.assertRaises(ValidationError):
            parse_pickup_time("")
        with self.assertRaises(ValidationError):
            parse_pickup_time("9.05")


if __name__ == "__main__":
    unittest.main()
