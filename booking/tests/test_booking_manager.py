# booking/tests/test_booking_manager.py

from datetime import date, time

from django.test import TestCase

from booking.models import Booking, Client, Service, Staff
from booking.services.availability_engine import AvailabilityEngine, new_service_instance
from booking.services.booking_manager import BookingManager

DAY = date(2025, 6, 10)


class BookingManagerTests(TestCase):
    def setUp(self):
        self.manager = BookingManager()
        self.cut = Service.objects.create(name="Cut", duration_minutes=30, regular_price="40")
        self.colour = Service.objects.create(name="Colour", duration_minutes=45, regular_price="90+")
        self.anna = Staff.objects.create(name="Anna")
        self.ben = Staff.objects.create(name="Ben")
        self.client_row = Client.objects.create(full_name="Jo Smith", phone="0400 000 000")

    def book(self, start, services=None, staff=None, **kwargs):
        return self.manager.create_booking(
            services=services or [self.cut],
            date=DAY,
            start_time=start,
            staff=staff if staff is not None else self.anna,
            client=self.client_row,
            **kwargs,
        )

    # ----- create_booking -----
    def test_create_sets_end_time_and_total(self):
        booking = self.book("10:00", services=[self.cut, self.colour])

        self.assertEqual(booking.start_time, time(10, 0))
        self.assertEqual(booking.end_time, time(11, 15))
        self.assertEqual(booking.total_price, "130+")
        self.assertEqual(booking.name, "Jo Smith")
        self.assertEqual(booking.services.count(), 2)
        self.assertEqual(booking.status, Booking.STATUS_PENDING)

    def test_overlap_for_same_staff_is_rejected(self):
        self.book("10:00")
        with self.assertRaises(ValueError):
            self.book("10:15")
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_and_other_staff_are_allowed(self):
        self.book("10:00")
        self.book("10:30")
        self.book("10:00", staff=self.ben)
        self.assertEqual(Booking.objects.count(), 3)

    def test_cancelled_bookings_do_not_block(self):
        first = self.book("10:00")
        self.manager.cancel_booking(first)
        self.book("10:00")
        self.assertEqual(Booking.objects.exclude(status=Booking.STATUS_CANCELLED).count(), 1)

    def test_unassigned_booking_is_never_blocked(self):
        self.book("10:00")
        booking = self.manager.create_booking(services=[self.cut], date=DAY, start_time="10:00", name="Walk-in")
        self.assertIsNone(booking.staff_id)

    def test_requires_services_and_a_contact(self):
        with self.assertRaises(ValueError):
            self.manager.create_booking(services=[], date=DAY, start_time="10:00", name="X")
        with self.assertRaises(ValueError):
            self.manager.create_booking(services=[self.cut], date=DAY, start_time="10:00")

    def test_bad_time_is_a_value_error(self):
        with self.assertRaises(ValueError):
            self.book("25:00")

    # ----- consecutive -----
    def test_consecutive_creates_one_booking_per_service(self):
        a, b = new_service_instance(self.cut), new_service_instance(self.colour)

        created = self.manager.create_consecutive_bookings(
            service_instances=[a, b],
            staff_assignments={a.instance_id: self.anna.pk, b.instance_id: self.ben.pk},
            services_by_id={self.cut.pk: self.cut, self.colour.pk: self.colour},
            date=DAY,
            start_time="09:45",
            client=self.client_row,
        )

        self.assertEqual(len(created), 2)
        self.assertEqual((created[0].staff_id, created[0].start_time, created[0].end_time),
                         (self.anna.pk, time(9, 45), time(10, 15)))
        self.assertEqual((created[1].staff_id, created[1].start_time, created[1].end_time),
                         (self.ben.pk, time(10, 15), time(11, 0)))
        self.assertEqual(created[1].total_price, "90+")

    def test_consecutive_rejects_blocked_chain(self):
        self.book("10:30", staff=self.ben)
        a, b = new_service_instance(self.cut), new_service_instance(self.colour)

        with self.assertRaises(ValueError):
            self.manager.create_consecutive_bookings(
                service_instances=[a, b],
                staff_assignments={a.instance_id: self.anna.pk, b.instance_id: self.ben.pk},
                services_by_id={self.cut.pk: self.cut, self.colour.pk: self.colour},
                date=DAY,
                start_time="10:00",
                client=self.client_row,
            )
        self.assertEqual(Booking.objects.count(), 1)

    def test_available_start_times_uses_saved_bookings(self):
        self.book("09:00", services=[self.colour])
        instance = new_service_instance(self.cut)

        slots = self.manager.available_start_times(DAY, [instance], {instance.instance_id: self.anna.pk})

        self.assertNotIn("09:30", slots)
        self.assertEqual(slots[0], "09:45")

    # ----- move / status / cancel -----
    def test_move_excludes_the_booking_itself(self):
        booking = self.book("10:00")
        self.manager.move_booking(booking, start_time="10:15")
        booking.refresh_from_db()
        self.assertEqual((booking.start_time, booking.end_time), (time(10, 15), time(10, 45)))

    def test_move_into_conflict_is_rejected(self):
        self.book("11:00")
        booking = self.book("10:00")
        with self.assertRaises(ValueError):
            self.manager.move_booking(booking, start_time="10:45")

    def test_move_to_other_staff_and_unassign(self):
        booking = self.book("10:00")
        self.manager.move_booking(booking, staff=self.ben)
        self.assertEqual(booking.staff_id, self.ben.pk)
        self.manager.move_booking(booking, staff=None)
        booking.refresh_from_db()
        self.assertIsNone(booking.staff_id)

    def test_cancel_stamps_time_and_reason(self):
        booking = self.book("10:00")
        self.manager.cancel_booking(booking, reason="Sick")
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.STATUS_CANCELLED)
        self.assertIsNotNone(booking.cancellation_time)
        self.assertIn("Sick", booking.notes)
        with self.assertRaises(ValueError):
            self.manager.cancel_booking(booking)

    def test_update_status(self):
        booking = self.book("10:00")
        self.manager.update_status(booking, Booking.STATUS_CHECKED_IN)
        self.assertEqual(Booking.objects.get(pk=booking.pk).status, "checked-in")
        with self.assertRaises(ValueError):
            self.manager.update_status(booking, "lost")

    def test_bookings_for_day_excludes_cancelled(self):
        kept = self.book("10:00")
        gone = self.book("11:00")
        self.manager.cancel_booking(gone)

        intervals = AvailabilityEngine().bookings_for_day(DAY)

        self.assertEqual([i.booking_id for i in intervals], [kept.pk])
        self.assertEqual((intervals[0].start, intervals[0].end), ("10:00", "10:30"))
