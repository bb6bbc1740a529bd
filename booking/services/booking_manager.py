"""
booking_manager.py
------------------
Coordinates booking creation, rescheduling and status changes.

- create_booking: one booking for one or more services, optional staff.
- create_consecutive_bookings: one booking per service instance, chained
  back-to-back from a start time (each instance may have its own stylist).
- move_booking: drag-and-drop reschedule to another time/day/stylist.
- update_status / cancel_booking: front-desk lifecycle.

Every path re-checks staff availability against the bookings saved for that
day (AvailabilityEngine). A blocked request raises ValueError with a message
that the API returns as a 400.
"""

import logging

from django.db import transaction
from django.utils import timezone

from ..models import Booking
from .availability_engine import (
    AvailabilityEngine,
    available_start_times,
    is_slot_available,
    schedule_consecutive,
)
from .pricing import as_stored_text, total_price
from .slot_utils import get_candidate_slots
from .time_utils import TimeParseError, end_time_for, to_label, to_time

logger = logging.getLogger(__name__)

VALID_STATUSES = {choice for choice, _label in Booking.STATUS_CHOICES}


def _staff_id(staff):
    if staff is None:
        return None
    return getattr(staff, "pk", staff)


class BookingManager:
    def __init__(self):
        self.availability = AvailabilityEngine()

    @transaction.atomic
    def create_booking(
        self,
        services,
        date,
        start_time,
        staff=None,
        client=None,
        name="",
        phone="",
        num_clients=1,
        notes="",
        status=Booking.STATUS_PENDING,
    ):
        """
        Create a booking after checking for overlap.

        Args:
            services: list of Service instances (at least one)
            date: datetime.date of the appointment
            start_time: "HH:MM" or datetime.time
            staff: Staff instance or id (None = unassigned, never blocked)
            client: Client instance (optional; walk-ins use name/phone)

        Raises:
            ValueError: no services, bad time, or the stylist is busy.
        """
        services = list(services)
        if not services:
            raise ValueError("Please select at least one service.")
        if client is None and not (phone or "").strip() and not (name or "").strip():
            raise ValueError("Please either select a client or enter a name or phone number.")
        if status not in VALID_STATUSES:
            raise ValueError(f"Unknown booking status '{status}'.")

        try:
            start_label = to_label(start_time)
        except TimeParseError as e:
            raise ValueError(str(e)) from e

        duration = sum(s.duration_minutes or 0 for s in services)
        staff_id = _staff_id(staff)

        if staff_id is not None:
            ok = self.availability.is_slot_available_for_staff(staff_id, date, start_label, duration)
            if not ok:
                logger.info("Rejected booking: staff %s busy on %s at %s", staff_id, date, start_label)
                raise ValueError("Selected time overlaps with an existing booking for this staff.")

        booking = Booking.objects.create(
            client=client,
            name=name or (client.full_name if client else ""),
            phone=phone or (client.phone if client else ""),
            staff_id=staff_id,
            date=date,
            start_time=to_time(start_label),
            end_time=to_time(end_time_for(start_label, duration)),
            num_clients=num_clients,
            status=status,
            total_price=as_stored_text(total_price(services)),
            notes=notes,
        )
        booking.services.set(services)
        logger.info("Created booking #%s for %s at %s", booking.pk, date, start_label)
        return booking

    @transaction.atomic
    def create_consecutive_bookings(
        self,
        service_instances,
        staff_assignments,
        services_by_id,
        date,
        start_time,
        client=None,
        name="",
        phone="",
        notes="",
        status=Booking.STATUS_PENDING,
    ):
        """
        Book several services back-to-back, one Booking per service instance.

        Args:
            service_instances: ordered availability_engine.ServiceInstance list
            staff_assignments: instance_id -> staff id
            services_by_id: service id -> Service, to attach and price each booking
            date / start_time: when the first service starts

        Returns:
            list of created bookings, in service order.

        Raises:
            ValueError: when start_time is not a valid consecutive start.
        """
        try:
            start_label = to_label(start_time)
        except TimeParseError as e:
            raise ValueError(str(e)) from e

        existing = self.availability.bookings_for_day(date)
        allowed = available_start_times(service_instances, staff_assignments, existing, [start_label])
        if not allowed:
            raise ValueError("The selected services cannot be booked back-to-back from that time.")

        created = []
        for instance, staff_id, start, end in schedule_consecutive(
            start_label, service_instances, staff_assignments
        ):
            service = services_by_id[instance.service_id]
            booking = Booking.objects.create(
                client=client,
                name=name or (client.full_name if client else ""),
                phone=phone or (client.phone if client else ""),
                staff_id=staff_id,
                date=date,
                start_time=to_time(start),
                end_time=to_time(end),
                status=status,
                total_price=as_stored_text(total_price([service])),
                notes=notes,
            )
            booking.services.set([service])
            created.append(booking)

        logger.info(
            "Created %d consecutive bookings on %s from %s", len(created), date, start_label
        )
        return created

    def available_start_times(self, date, service_instances, staff_assignments, candidate_slots=None):
        """Start times on `date` where the service chain fits."""
        if candidate_slots is None:
            candidate_slots = get_candidate_slots()
        return self.availability.find_available_start_times(
            date, service_instances, staff_assignments, candidate_slots
        )

    def available_start_times_for_staff(self, date, staff, services, candidate_slots=None):
        """Start times on `date` where `services` fit as one booking with `staff`."""
        duration = sum(s.duration_minutes or 0 for s in services)
        return self.availability.find_start_times_for_staff(
            date, _staff_id(staff), duration, candidate_slots
        )

    @transaction.atomic
    def move_booking(self, booking, date=None, start_time=None, staff=...):
        """
        Reschedule a booking, keeping its duration.
        `staff=...` (the default) keeps the current stylist; None unassigns.
        """
        if booking.status == Booking.STATUS_CANCELLED:
            raise ValueError("Cannot move a cancelled booking.")

        new_date = date or booking.date
        try:
            new_start = to_label(start_time) if start_time is not None else to_label(booking.start_time)
        except TimeParseError as e:
            raise ValueError(str(e)) from e
        new_staff_id = booking.staff_id if staff is ... else _staff_id(staff)
        duration = booking.duration_minutes

        existing = self.availability.bookings_for_day(new_date, exclude_booking_id=booking.pk)
        if not is_slot_available(new_start, new_staff_id, existing, duration):
            raise ValueError("Selected time overlaps with an existing booking for this staff.")

        booking.date = new_date
        booking.start_time = to_time(new_start)
        booking.end_time = to_time(end_time_for(new_start, duration))
        booking.staff_id = new_staff_id
        booking.save(update_fields=["date", "start_time", "end_time", "staff"])
        logger.info("Moved booking #%s to %s %s", booking.pk, new_date, new_start)
        return booking

    @transaction.atomic
    def update_status(self, booking, status):
        if status not in VALID_STATUSES:
            raise ValueError(f"Unknown booking status '{status}'.")
        if status == Booking.STATUS_CANCELLED:
            return self.cancel_booking(booking)

        booking.status = status
        booking.save(update_fields=["status"])
        return booking

    @transaction.atomic
    def cancel_booking(self, booking, reason=""):
        """
        Mark a booking cancelled and stamp cancellation_time.
        The row is kept so the history stays visible.
        """
        if booking.status == Booking.STATUS_CANCELLED:
            raise ValueError("This booking is already cancelled.")

        booking.status = Booking.STATUS_CANCELLED
        booking.cancellation_time = timezone.now()
        if reason:
            booking.notes = (booking.notes or "") + f"\n[Cancel reason] {reason}"
        booking.save(update_fields=["status", "cancellation_time", "notes"])
        logger.info("Cancelled booking #%s", booking.pk)
        return booking
