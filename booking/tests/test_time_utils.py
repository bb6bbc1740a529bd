# booking/tests/test_time_utils.py

from datetime import time

from django.test import SimpleTestCase

from booking.services.time_utils import (
    TimeParseError,
    add_minutes,
    end_time_for,
    minutes_to_time,
    time_to_minutes,
    to_label,
    to_time,
)


class TimeToMinutesTests(SimpleTestCase):
    def test_parses_zero_padded_labels(self):
        self.assertEqual(time_to_minutes("00:00"), 0)
        self.assertEqual(time_to_minutes("09:30"), 570)
        self.assertEqual(time_to_minutes("23:59"), 1439)

    def test_accepts_seconds_and_time_objects(self):
        self.assertEqual(time_to_minutes("09:30:00"), 570)
        self.assertEqual(time_to_minutes(time(9, 30)), 570)

    def test_rejects_malformed_values(self):
        for bad in ["", "9", "ab:cd", "24:00", "12:60", "-1:00", "1:2:3:4", None, 930]:
            with self.subTest(value=bad):
                with self.assertRaises(TimeParseError):
                    time_to_minutes(bad)

    def test_parse_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            time_to_minutes("nope")


class MinuteArithmeticTests(SimpleTestCase):
    def test_minutes_to_time_pads(self):
        self.assertEqual(minutes_to_time(0), "00:00")
        self.assertEqual(minutes_to_time(545), "09:05")

    def test_add_minutes(self):
        self.assertEqual(add_minutes("09:00", 45), "09:45")
        self.assertEqual(add_minutes("09:45", 75), "11:00")

    def test_add_minutes_wraps_past_midnight(self):
        self.assertEqual(add_minutes("23:30", 60), "00:30")
        self.assertEqual(minutes_to_time(1440), "00:00")

    def test_end_time_for_missing_duration(self):
        self.assertEqual(end_time_for("10:00", None), "10:00")
        self.assertEqual(end_time_for("10:00", 30), "10:30")

    def test_label_and_time_conversions(self):
        self.assertEqual(to_label(time(9, 5)), "09:05")
        self.assertEqual(to_label("9:05"), "09:05")
        self.assertEqual(to_time("14:15"), time(14, 15))
