"""
availability_engine.py
----------------------
Decides whether a staff member is free at a given time, and which start
times let several services be booked back-to-back.

Two layers:
1) Pure functions (is_slot_available, start_times_for_staff,
   available_start_times, schedule_consecutive) that work only on the data passed in. They never
   raise for structurally present input: anything ambiguous (bad time label,
   missing staff or duration) is reported as "not available".
2) AvailabilityEngine, which loads the day's bookings from the database and
   feeds them to the pure functions.

Overlap rule:
    Intervals are half-open, [start, end). Two intervals [a, b) and [c, d)
    conflict iff a < d and c < b. A booking that starts exactly when another
    ends is NOT a conflict; consecutive services rely on this.

This is a pre-flight check for the booking screens. Two devices can still
pass it at the same moment and both save.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from .time_utils import TimeParseError, minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingInterval:
    """An existing booking as seen by the availability checks."""

    staff_id: object
    start: str
    end: str
    status: str = "pending"
    booking_id: Optional[int] = None


@dataclass(frozen=True)
class ServiceInstance:
    """
    One selected occurrence of a service inside a booking request.
    The same service may be selected twice; instance_id tells them apart.
    """

    service_id: object
    duration_minutes: Optional[int]
    name: str = ""
    instance_id: str = field(default_factory=lambda: uuid.uuid4().hex)


def new_service_instance(service) -> ServiceInstance:
    """Build a ServiceInstance (with a fresh instance id) from a Service row."""
    return ServiceInstance(
        service_id=service.id,
        duration_minutes=service.duration_minutes,
        name=service.name,
    )


def _blank(staff_id) -> bool:
    return staff_id is None or str(staff_id).strip() == ""


def _same_staff(a, b) -> bool:
    # Ids arrive as ints from the ORM and as strings from query params.
    return str(a).strip() == str(b).strip()


def _valid_duration(duration) -> bool:
    return isinstance(duration, int) and not isinstance(duration, bool) and duration >= 0


def _interval_is_free(new_start, new_end, staff_id, existing_bookings) -> bool:
    # Minutes since midnight; new_end may run past 1440 and is never wrapped.
    for booking in existing_bookings:
        if not _same_staff(booking.staff_id, staff_id):
            continue
        try:
            existing_start = time_to_minutes(booking.start)
            existing_end = time_to_minutes(booking.end)
        except TimeParseError:
            logger.warning("Booking %s has an unreadable time range", booking.booking_id)
            return False
        if new_start < existing_end and existing_start < new_end:
            return False
    return True


def is_slot_available(candidate_start, staff_id, existing_bookings, duration_minutes) -> bool:
    """
    True if [candidate_start, candidate_start + duration) does not overlap any
    of `staff_id`'s bookings in `existing_bookings`.

    - No staff selected, or no bookings that day: always available.
    - Bad time labels or a missing duration: unavailable (fail closed).
    """
    if _blank(staff_id) or not existing_bookings:
        return True

    if not _valid_duration(duration_minutes):
        return False

    try:
        new_start = time_to_minutes(candidate_start)
    except TimeParseError:
        return False

    return _interval_is_free(new_start, new_start + duration_minutes, staff_id, existing_bookings)


def _chain_fits(start_minutes, service_instances, staff_assignments, existing_bookings) -> bool:
    cursor = start_minutes
    for instance in service_instances:
        staff_id = staff_assignments.get(instance.instance_id)
        duration = instance.duration_minutes
        if _blank(staff_id) or not _valid_duration(duration):
            return False
        if not _interval_is_free(cursor, cursor + duration, staff_id, existing_bookings):
            return False
        cursor += duration
    return True


def available_start_times(
    service_instances: Sequence[ServiceInstance],
    staff_assignments: Mapping[str, object],
    existing_bookings: Sequence[BookingInterval],
    candidate_slots: Iterable[str],
) -> list[str]:
    """
    Filter candidate_slots down to the start times from which every service
    instance can run back-to-back, each with its assigned staff member free.

    Args:
        service_instances: ordered services to chain
        staff_assignments: instance_id -> staff id
        existing_bookings: the day's bookings (already limited to that day)
        candidate_slots: "HH:MM" labels in chronological order

    Returns:
        list of "HH:MM" labels, in the same order as candidate_slots.
        An empty list means nothing fits.
    """
    slots = list(candidate_slots)
    if not service_instances:
        return slots

    available = []
    for slot in slots:
        try:
            start = time_to_minutes(slot)
        except TimeParseError:
            continue
        if _chain_fits(start, service_instances, staff_assignments, existing_bookings):
            available.append(slot)
    return available


def start_times_for_staff(staff_id, duration_minutes, existing_bookings, candidate_slots) -> list[str]:
    """
    Start times where one booking of `duration_minutes` fits for `staff_id`.

    This is the single-booking check used by create_booking: all the
    selected services run as one block with one stylist. Unassigned staff is
    never blocked, so every candidate comes back.
    """
    return [
        slot
        for slot in candidate_slots
        if is_slot_available(slot, staff_id, existing_bookings, duration_minutes)
    ]


def schedule_consecutive(start, service_instances, staff_assignments):
    """
    Lay out the chained services from `start`.

    Returns:
        list of (instance, staff_id, start_label, end_label) tuples.
    """
    plan = []
    cursor = time_to_minutes(start)
    for instance in service_instances:
        duration = instance.duration_minutes or 0
        plan.append(
            (
                instance,
                staff_assignments.get(instance.instance_id),
                minutes_to_time(cursor),
                minutes_to_time(cursor + duration),
            )
        )
        cursor += duration
    return plan


class AvailabilityEngine:
    """Database-facing wrapper: loads a day's bookings and asks the pure checks."""

    def bookings_for_day(self, day, exclude_booking_id=None) -> list[BookingInterval]:
        from ..models import Booking

        qs = Booking.objects.filter(date=day).exclude(status=Booking.STATUS_CANCELLED)
        if exclude_booking_id is not None:
            qs = qs.exclude(pk=exclude_booking_id)

        return [
            BookingInterval(
                staff_id=b.staff_id,
                start=b.start_time.strftime("%H:%M"),
                end=b.end_time.strftime("%H:%M"),
                status=b.status,
                booking_id=b.id,
            )
            for b in qs.order_by("start_time")
        ]

    def is_slot_available_for_staff(
        self, staff_id, day, start_time, duration_minutes, exclude_booking_id=None
    ) -> bool:
        bookings = self.bookings_for_day(day, exclude_booking_id=exclude_booking_id)
        return is_slot_available(start_time, staff_id, bookings, duration_minutes)

    def find_available_start_times(self, day, service_instances, staff_assignments, candidate_slots=None):
        from .slot_utils import get_candidate_slots

        if candidate_slots is None:
            candidate_slots = get_candidate_slots()

        bookings = self.bookings_for_day(day)
        return available_start_times(service_instances, staff_assignments, bookings, candidate_slots)

    def find_start_times_for_staff(self, day, staff_id, duration_minutes, candidate_slots=None):
        from .slot_utils import get_candidate_slots

        if candidate_slots is None:
            candidate_slots = get_candidate_slots()

        bookings = self.bookings_for_day(day)
        return start_times_for_staff(staff_id, duration_minutes, bookings, candidate_slots)
