# booking/tests/test_availability.py
#
# Pure availability checks: no database.

from django.test import SimpleTestCase

from booking.services.availability_engine import (
    BookingInterval,
    ServiceInstance,
    available_start_times,
    is_slot_available,
    schedule_consecutive,
    start_times_for_staff,
)
from booking.services.slot_utils import DEFAULT_TIME_SLOTS

STAFF = 7
OTHER = 8


def booking(start, end, staff=STAFF):
    return BookingInterval(staff_id=staff, start=start, end=end)


class IsSlotAvailableTests(SimpleTestCase):
    def setUp(self):
        self.existing = [booking("10:00", "10:30")]

    def test_unassigned_staff_is_never_blocked(self):
        self.assertTrue(is_slot_available("10:00", None, self.existing, 30))
        self.assertTrue(is_slot_available("10:00", "", self.existing, 30))

    def test_no_existing_bookings(self):
        self.assertTrue(is_slot_available("10:00", STAFF, [], 30))

    def test_back_to_back_is_not_a_conflict(self):
        self.assertTrue(is_slot_available("10:30", STAFF, self.existing, 30))
        self.assertTrue(is_slot_available("09:30", STAFF, self.existing, 30))

    def test_every_kind_of_overlap_is_a_conflict(self):
        cases = {
            "contains existing": ("09:45", 60),
            "inside existing": ("10:10", 10),
            "overlaps start edge": ("09:45", 30),
            "overlaps end edge": ("10:15", 30),
            "identical": ("10:00", 30),
        }
        for label, (start, duration) in cases.items():
            with self.subTest(label):
                self.assertFalse(is_slot_available(start, STAFF, self.existing, duration))

    def test_other_staff_bookings_are_ignored(self):
        self.assertTrue(is_slot_available("10:00", OTHER, self.existing, 30))

    def test_staff_ids_compare_across_types(self):
        self.assertFalse(is_slot_available("10:00", str(STAFF), self.existing, 30))

    def test_fails_closed_on_bad_input(self):
        self.assertFalse(is_slot_available("10:x0", STAFF, self.existing, 30))
        self.assertFalse(is_slot_available("11:00", STAFF, self.existing, None))
        self.assertFalse(is_slot_available("11:00", STAFF, [booking("bad", "10:30")], 30))

    def test_agrees_with_interval_intersection(self):
        existing = [booking("09:00", "09:45"), booking("13:00", "14:00")]
        for slot in DEFAULT_TIME_SLOTS:
            start = int(slot[:2]) * 60 + int(slot[3:])
            end = start + 30
            overlaps = (start < 585 and 540 < end) or (start < 840 and 780 < end)
            with self.subTest(slot=slot):
                self.assertEqual(is_slot_available(slot, STAFF, existing, 30), not overlaps)


class AvailableStartTimesTests(SimpleTestCase):
    def setUp(self):
        self.slots = list(DEFAULT_TIME_SLOTS)

    def instance(self, duration, instance_id):
        return ServiceInstance(service_id=1, duration_minutes=duration, instance_id=instance_id)

    def test_no_services_returns_all_slots_in_order(self):
        self.assertEqual(available_start_times([], {}, [booking("09:00", "12:00")], self.slots), self.slots)

    def test_single_service_around_morning_booking(self):
        existing = [booking("09:00", "09:45")]
        svc = self.instance(30, "a")

        result = available_start_times([svc], {"a": STAFF}, existing, self.slots)

        for blocked in ("09:00", "09:15", "09:30"):
            self.assertNotIn(blocked, result)
        self.assertIn("09:45", result)
        self.assertEqual(result, self.slots[3:])
        self.assertFalse(is_slot_available("08:45", STAFF, existing, 30))

    def test_two_services_free_day_returns_every_slot(self):
        instances = [self.instance(30, "a"), self.instance(45, "b")]
        result = available_start_times(instances, {"a": STAFF, "b": STAFF}, [], self.slots)
        self.assertEqual(result, self.slots)

    def test_two_services_fully_booked_day_returns_nothing(self):
        instances = [self.instance(30, "a"), self.instance(45, "b")]
        existing = [booking("08:00", "22:00")]
        self.assertEqual(available_start_times(instances, {"a": STAFF, "b": STAFF}, existing, self.slots), [])

    def test_unassigned_instance_rejects_every_slot(self):
        instances = [self.instance(30, "a"), self.instance(45, "b")]
        self.assertEqual(available_start_times(instances, {"a": STAFF}, [], self.slots), [])
        self.assertEqual(available_start_times(instances, {"a": STAFF, "b": ""}, [], self.slots), [])

    def test_missing_duration_rejects_every_slot(self):
        instances = [self.instance(None, "a")]
        self.assertEqual(available_start_times(instances, {"a": STAFF}, [], self.slots), [])

    def test_chain_checks_each_stylist_at_its_own_time(self):
        # OTHER is busy 10:30-11:00 and takes the second leg.
        instances = [self.instance(30, "a"), self.instance(30, "b")]
        existing = [booking("10:30", "11:00", staff=OTHER)]
        result = available_start_times(instances, {"a": STAFF, "b": OTHER}, existing, self.slots)

        self.assertIn("09:30", result)
        self.assertNotIn("10:00", result)
        self.assertNotIn("10:15", result)
        self.assertIn("10:30", result)

    def test_is_idempotent(self):
        instances = [self.instance(30, "a"), self.instance(45, "b")]
        assignments = {"a": STAFF, "b": OTHER}
        existing = [booking("12:00", "13:00"), booking("15:00", "15:30", staff=OTHER)]
        first = available_start_times(instances, assignments, existing, self.slots)
        second = available_start_times(instances, assignments, existing, self.slots)
        self.assertEqual(first, second)

    def test_skips_malformed_candidate_labels(self):
        svc = self.instance(30, "a")
        self.assertEqual(available_start_times([svc], {"a": STAFF}, [], ["09:00", "nope"]), ["09:00"])

    def test_chain_past_midnight_is_not_compared_on_wrapped_labels(self):
        # Second leg runs 00:30-01:00 the next day; the 00:00 booking is today.
        instances = [self.instance(60, "a"), self.instance(30, "b")]
        existing = [booking("00:00", "00:45")]
        result = available_start_times(instances, {"a": STAFF, "b": STAFF}, existing, ["23:30"])
        self.assertEqual(result, ["23:30"])


class ScheduleConsecutiveTests(SimpleTestCase):
    def test_lays_services_end_to_start(self):
        a = ServiceInstance(service_id=1, duration_minutes=30, instance_id="a")
        b = ServiceInstance(service_id=1, duration_minutes=45, instance_id="b")

        plan = schedule_consecutive("09:45", [a, b], {"a": STAFF, "b": OTHER})

        self.assertEqual(
            [(i.instance_id, s, start, end) for i, s, start, end in plan],
            [("a", STAFF, "09:45", "10:15"), ("b", OTHER, "10:15", "11:00")],
        )

    def test_same_service_twice_gets_distinct_instances(self):
        first = ServiceInstance(service_id=3, duration_minutes=15)
        second = ServiceInstance(service_id=3, duration_minutes=15)
        self.assertNotEqual(first.instance_id, second.instance_id)


class StartTimesForStaffTests(SimpleTestCase):
    def test_checks_total_duration_as_one_block(self):
        existing = [booking("10:00", "10:30")]
        result = start_times_for_staff(STAFF, 75, existing, list(DEFAULT_TIME_SLOTS))

        for blocked in ("09:00", "09:15", "09:30", "09:45", "10:00", "10:15"):
            self.assertNotIn(blocked, result)
        self.assertEqual(result[0], "10:30")

    def test_unassigned_staff_gets_every_slot(self):
        existing = [booking("10:00", "10:30")]
        self.assertEqual(start_times_for_staff(None, 75, existing, ["10:00", "10:15"]), ["10:00", "10:15"])
