# booking/tests/test_slot_utils.py

from datetime import date

from django.test import SimpleTestCase, TestCase

from booking.services.slot_utils import (
    DEFAULT_TIME_SLOTS,
    generate_time_slots,
    get_business_hours,
    get_candidate_slots,
    parse_date_param,
)
from configmgr.models import SystemSetting


class SlotGridTests(SimpleTestCase):
    def test_default_grid(self):
        self.assertEqual(len(DEFAULT_TIME_SLOTS), 47)
        self.assertEqual(DEFAULT_TIME_SLOTS[0], "09:00")
        self.assertEqual(DEFAULT_TIME_SLOTS[1], "09:15")
        self.assertEqual(DEFAULT_TIME_SLOTS[-1], "20:30")

    def test_custom_grid(self):
        self.assertEqual(generate_time_slots("10:00", "11:00", 30), ["10:00", "10:30", "11:00"])

    def test_rejects_non_positive_step(self):
        with self.assertRaises(ValueError):
            generate_time_slots(step_minutes=0)

    def test_parse_date_param(self):
        self.assertEqual(parse_date_param("2025-03-04"), date(2025, 3, 4))
        self.assertEqual(parse_date_param("2025-03-04T10:00:00"), date(2025, 3, 4))
        with self.assertRaises(ValueError):
            parse_date_param("04/03/2025")


class BusinessHoursTests(TestCase):
    def test_defaults_without_settings(self):
        self.assertEqual(get_business_hours(), ("09:00", "20:30", 15))
        self.assertEqual(get_candidate_slots(), list(DEFAULT_TIME_SLOTS))

    def test_settings_override_grid(self):
        SystemSetting.objects.create(key="BUSINESS_OPEN", value="10:00")
        SystemSetting.objects.create(key="BUSINESS_LAST_SLOT", value="12:00")
        SystemSetting.objects.create(key="SLOT_INTERVAL_MINUTES", value="60")

        self.assertEqual(get_candidate_slots(), ["10:00", "11:00", "12:00"])

    def test_malformed_settings_fall_back(self):
        SystemSetting.objects.create(key="BUSINESS_OPEN", value="ten")
        with self.assertLogs("booking.services.slot_utils", level="WARNING"):
            self.assertEqual(get_business_hours(), ("09:00", "20:30", 15))

    def test_inverted_hours_fall_back(self):
        SystemSetting.objects.create(key="BUSINESS_OPEN", value="18:00")
        SystemSetting.objects.create(key="BUSINESS_LAST_SLOT", value="09:00")
        with self.assertLogs("booking.services.slot_utils", level="WARNING"):
            self.assertEqual(get_business_hours(), ("09:00", "20:30", 15))


class SystemSettingTests(TestCase):
    def test_values_for_skips_missing_keys(self):
        SystemSetting.objects.create(key="BUSINESS_OPEN", value="08:30")
        self.assertEqual(
            SystemSetting.values_for(["BUSINESS_OPEN", "BUSINESS_LAST_SLOT"]),
            {"BUSINESS_OPEN": "08:30"},
        )
