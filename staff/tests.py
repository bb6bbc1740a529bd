from datetime import date, time
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from booking.models import Staff
from staff.models import StaffAbsence, StaffShift
from staff.services.roster import (
    day_of_week_for,
    has_shift_conflict,
    shifts_for_date,
    shifts_for_range,
    validate_shift,
    working_staff,
    working_staff_for_date,
)

TUESDAY = date(2025, 6, 10)
SUNDAY = date(2025, 6, 8)


def member(pk):
    return SimpleNamespace(id=pk)


def shift(staff_id, day_of_week=None, specific_date=None):
    return SimpleNamespace(staff_id=staff_id, day_of_week=day_of_week, specific_date=specific_date)


def absence(staff_id, absence_date):
    return SimpleNamespace(staff_id=staff_id, absence_date=absence_date)


class WorkingStaffTests(SimpleTestCase):
    def setUp(self):
        self.staff = [member(1), member(2), member(3)]

    def test_day_of_week_starts_on_sunday(self):
        self.assertEqual(day_of_week_for(SUNDAY), 0)
        self.assertEqual(day_of_week_for(TUESDAY), 2)
        self.assertEqual(day_of_week_for(date(2025, 6, 14)), 6)

    def test_recurring_and_specific_shifts_count(self):
        shifts = [shift(1, day_of_week=2), shift(3, specific_date=TUESDAY), shift(2, day_of_week=3)]
        result = working_staff(TUESDAY, self.staff, shifts, [])
        self.assertEqual([m.id for m in result], [1, 3])

    def test_absence_removes_staff(self):
        shifts = [shift(1, day_of_week=2), shift(2, day_of_week=2)]
        absences = [absence(2, TUESDAY), absence(1, SUNDAY)]
        result = working_staff(TUESDAY, self.staff, shifts, absences)
        self.assertEqual([m.id for m in result], [1])

    def test_specific_date_shift_on_another_day_does_not_count(self):
        shifts = [shift(1, specific_date=SUNDAY)]
        self.assertEqual(working_staff(TUESDAY, self.staff, shifts, []), [])

    def test_nobody_rostered_means_nobody_working(self):
        self.assertEqual(working_staff(TUESDAY, self.staff, [], []), [])

    def test_keeps_input_order(self):
        staff = [member(3), member(1)]
        shifts = [shift(1, day_of_week=2), shift(3, day_of_week=2)]
        self.assertEqual([m.id for m in working_staff(TUESDAY, staff, shifts, [])], [3, 1])


class RosterDatabaseTests(TestCase):
    def setUp(self):
        self.anna = Staff.objects.create(name="Anna")
        self.ben = Staff.objects.create(name="Ben")
        self.cleo = Staff.objects.create(name="Cleo", active=False)
        self.weekly = StaffShift.objects.create(
            staff=self.anna, day_of_week=2, start_time=time(9), end_time=time(17)
        )
        self.one_off = StaffShift.objects.create(
            staff=self.ben, specific_date=TUESDAY, start_time=time(12), end_time=time(20)
        )
        StaffShift.objects.create(staff=self.cleo, day_of_week=2, start_time=time(9), end_time=time(17))

    def test_working_staff_for_date_skips_inactive(self):
        self.assertEqual(list(working_staff_for_date(TUESDAY)), [self.anna, self.ben])

    def test_working_staff_for_date_respects_absence(self):
        StaffAbsence.objects.create(staff=self.anna, absence_date=TUESDAY)
        self.assertEqual(list(working_staff_for_date(TUESDAY)), [self.ben])

    def test_shifts_for_range_expands_recurring(self):
        occurrences = shifts_for_range(date(2025, 6, 9), date(2025, 6, 24), staff_id=self.anna.pk)
        self.assertEqual(
            [o.effective_date for o in occurrences],
            [date(2025, 6, 10), date(2025, 6, 17), date(2025, 6, 24)],
        )
        self.assertTrue(all(o.is_recurring for o in occurrences))

    def test_shifts_for_date_sorted_by_start(self):
        occurrences = shifts_for_date(TUESDAY)
        self.assertEqual(occurrences[-1].shift, self.one_off)
        self.assertFalse(occurrences[-1].is_recurring)

    def test_has_shift_conflict(self):
        self.assertTrue(has_shift_conflict(self.anna.pk, TUESDAY, "16:00", "18:00"))
        self.assertFalse(has_shift_conflict(self.anna.pk, TUESDAY, "17:00", "18:00"))
        self.assertFalse(
            has_shift_conflict(self.anna.pk, TUESDAY, "10:00", "12:00", exclude_shift_id=self.weekly.pk)
        )


class ValidateShiftTests(TestCase):
    def setUp(self):
        self.anna = Staff.objects.create(name="Anna")
        StaffShift.objects.create(staff=self.anna, day_of_week=1, start_time=time(9), end_time=time(17))
        StaffShift.objects.create(staff=self.anna, specific_date=TUESDAY, start_time=time(9), end_time=time(12))

    def assertRejected(self, message, **kwargs):
        params = {"staff_id": self.anna.pk, "start_time": "09:00", "end_time": "17:00"}
        params.update(kwargs)
        with self.assertRaisesMessage(ValueError, message):
            validate_shift(**params)

    def test_required_fields(self):
        self.assertRejected("Staff ID is required", staff_id=None, day_of_week=3)
        self.assertRejected("Start time is required", start_time="", day_of_week=3)

    def test_exactly_one_of_weekday_or_date(self):
        self.assertRejected("Either day of week or specific date")
        self.assertRejected("Cannot set both", day_of_week=3, specific_date=SUNDAY)

    def test_end_after_start(self):
        self.assertRejected("End time must be after start time", day_of_week=3, end_time="09:00")

    def test_duplicates(self):
        self.assertRejected("already has a recurring shift", day_of_week=1)
        self.assertRejected("already has a shift scheduled", specific_date=TUESDAY)

    def test_valid_shift_and_self_exclusion(self):
        validate_shift(self.anna.pk, "09:00", "17:00", day_of_week=3)
        existing = StaffShift.objects.get(day_of_week=1)
        validate_shift(self.anna.pk, "10:00", "16:00", day_of_week=1, exclude_shift_id=existing.pk)

    def test_specific_date_shift_must_not_overlap_recurring_one(self):
        monday = date(2025, 6, 9)
        self.assertRejected("Shift overlaps another shift", specific_date=monday, start_time="10:00", end_time="12:00")
        validate_shift(self.anna.pk, "17:00", "20:00", specific_date=monday)

    def test_recurring_shift_must_not_overlap_specific_date_one(self):
        self.assertRejected("Shift overlaps another shift", day_of_week=2, start_time="10:00", end_time="14:00")
        validate_shift(self.anna.pk, "12:00", "17:00", day_of_week=2)


class RosterApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.anna = Staff.objects.create(name="Anna")

    def test_create_shift_and_reject_duplicate(self):
        payload = {"staff": self.anna.id, "day_of_week": 2, "start_time": "09:00", "end_time": "17:00"}
        self.assertEqual(self.client.post("/api/roster/shifts/", payload, format="json").status_code, 201)
        resp = self.client.post("/api/roster/shifts/", payload, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_overlapping_shift_is_rejected(self):
        StaffShift.objects.create(staff=self.anna, day_of_week=2, start_time=time(9), end_time=time(17))
        payload = {"staff": self.anna.id, "specific_date": TUESDAY.isoformat(), "start_time": "16:00", "end_time": "19:00"}
        resp = self.client.post("/api/roster/shifts/", payload, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(StaffShift.objects.filter(specific_date=TUESDAY).exists())

    def test_shift_list_for_date(self):
        StaffShift.objects.create(staff=self.anna, day_of_week=2, start_time=time(9), end_time=time(17))
        resp = self.client.get("/api/roster/shifts/", {"date": TUESDAY.isoformat()})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()[0]["effective_date"], "2025-06-10")
        self.assertEqual(resp.json()[0]["start_time"], "09:00")
        self.assertEqual(self.client.get("/api/roster/shifts/", {"date": SUNDAY.isoformat()}).json(), [])

    def test_duplicate_absence_is_rejected(self):
        payload = {"staff": self.anna.id, "absence_date": TUESDAY.isoformat(), "absence_type": "Annual Leave"}
        self.assertEqual(self.client.post("/api/roster/absences/", payload, format="json").status_code, 201)
        self.assertEqual(self.client.post("/api/roster/absences/", payload, format="json").status_code, 400)
