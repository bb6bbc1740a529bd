"""
roster.py
---------
Who works when.

- working_staff(): pure set computation over staff, shifts and absences.
  A staff member works on a date if one of their shifts is either for that
  specific date or recurring on that weekday, and they have no absence on
  that date. Order follows the staff list passed in.
- shifts_for_date() / shifts_for_range(): expand recurring shifts onto real
  dates for the roster screen.
- validate_shift(): the rules applied before a shift is saved.

Weekday convention: recurring shifts store 0=Sunday .. 6=Saturday.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from django.db.models import Q

from booking.services.time_utils import time_to_minutes


def day_of_week_for(day: date) -> int:
    """Python's Monday=0 weekday converted to the roster's Sunday=0."""
    return (day.weekday() + 1) % 7


def _shift_matches(shift, day: date, weekday: int) -> bool:
    if shift.specific_date is not None:
        return shift.specific_date == day
    return shift.day_of_week is not None and shift.day_of_week == weekday


def working_staff(target_date: date, staff, shifts, absences) -> list:
    """
    Staff eligible for bookings on target_date.

    Args:
        target_date: the calendar day
        staff: iterable of objects with .id
        shifts: iterable with .staff_id, .day_of_week, .specific_date
        absences: iterable with .staff_id, .absence_date

    Returns:
        list of staff (same order as given) with a matching shift and no
        absence on that day.
    """
    weekday = day_of_week_for(target_date)
    on_shift = {s.staff_id for s in shifts if _shift_matches(s, target_date, weekday)}
    away = {a.staff_id for a in absences if a.absence_date == target_date}
    working_ids = on_shift - away
    return [member for member in staff if member.id in working_ids]


def working_staff_for_date(target_date: date):
    """Database wrapper over working_staff() for active staff."""
    from booking.models import Staff
    from staff.models import StaffAbsence, StaffShift

    weekday = day_of_week_for(target_date)
    staff = Staff.objects.filter(active=True).order_by("id")
    shifts = StaffShift.objects.filter(
        Q(specific_date=target_date) | Q(specific_date__isnull=True, day_of_week=weekday)
    )
    absences = StaffAbsence.objects.filter(absence_date=target_date)
    return working_staff(target_date, staff, shifts, absences)


@dataclass
class ShiftOccurrence:
    """A shift placed on a concrete date."""

    shift: object
    effective_date: date
    is_recurring: bool

    @property
    def staff_id(self):
        return self.shift.staff_id

    @property
    def start_time(self):
        return self.shift.start_time

    @property
    def end_time(self):
        return self.shift.end_time


def _base_queryset(staff_id=None):
    from staff.models import StaffShift

    qs = StaffShift.objects.select_related("staff")
    if staff_id:
        qs = qs.filter(staff_id=staff_id)
    return qs


def shifts_for_range(start: date, end: date, staff_id=None) -> list[ShiftOccurrence]:
    """
    Specific-date shifts inside [start, end] plus every recurring shift
    repeated on each matching weekday. Sorted by date, then start time.
    """
    occurrences = [
        ShiftOccurrence(shift, shift.specific_date, False)
        for shift in _base_queryset(staff_id).filter(
            specific_date__gte=start, specific_date__lte=end
        )
    ]

    recurring = list(
        _base_queryset(staff_id).filter(specific_date__isnull=True, day_of_week__isnull=False)
    )
    if recurring:
        day = start
        while day <= end:
            weekday = day_of_week_for(day)
            occurrences.extend(
                ShiftOccurrence(shift, day, True) for shift in recurring if shift.day_of_week == weekday
            )
            day += timedelta(days=1)

    occurrences.sort(key=lambda o: (o.effective_date, o.start_time))
    return occurrences


def shifts_for_date(day: date, staff_id=None) -> list[ShiftOccurrence]:
    return shifts_for_range(day, day, staff_id=staff_id)


def has_shift_conflict(staff_id, day: date, start_time, end_time, exclude_shift_id=None) -> bool:
    """True if the staff member already has a shift overlapping [start, end) on day."""
    new_start = time_to_minutes(start_time)
    new_end = time_to_minutes(end_time)
    for occurrence in shifts_for_date(day, staff_id=staff_id):
        if exclude_shift_id is not None and occurrence.shift.pk == exclude_shift_id:
            continue
        if new_start < time_to_minutes(occurrence.end_time) and time_to_minutes(occurrence.start_time) < new_end:
            return True
    return False


def validate_shift(
    staff_id,
    start_time,
    end_time,
    day_of_week: Optional[int] = None,
    specific_date: Optional[date] = None,
    exclude_shift_id=None,
) -> None:
    """
    Raise ValueError when a shift cannot be saved.

    Rules:
    - staff, start and end are required; end after start
    - exactly one of day_of_week / specific_date
    - one recurring shift per staff per weekday
    - one specific-date shift per staff per date
    - no overlap with the staff member's other shifts on the same day
      (a recurring shift is checked against their specific-date shifts on
      that weekday, and the other way round)
    """
    from staff.models import StaffShift

    if not staff_id:
        raise ValueError("Staff ID is required")
    if not start_time:
        raise ValueError("Start time is required")
    if not end_time:
        raise ValueError("End time is required")

    is_recurring = day_of_week is not None
    is_specific = specific_date is not None
    if not is_recurring and not is_specific:
        raise ValueError("Either day of week or specific date must be provided")
    if is_recurring and is_specific:
        raise ValueError("Cannot set both day of week and specific date")
    if is_recurring and not 0 <= int(day_of_week) <= 6:
        raise ValueError("Day of week must be between 0 (Sunday) and 6 (Saturday)")

    if time_to_minutes(end_time) <= time_to_minutes(start_time):
        raise ValueError("End time must be after start time")

    existing = StaffShift.objects.filter(staff_id=staff_id)
    if exclude_shift_id is not None:
        existing = existing.exclude(pk=exclude_shift_id)

    if is_recurring:
        if existing.filter(day_of_week=day_of_week, specific_date__isnull=True).exists():
            raise ValueError("Staff member already has a recurring shift on this day")
    elif existing.filter(specific_date=specific_date).exists():
        raise ValueError("Staff member already has a shift scheduled for this date")

    if is_recurring:
        dates = {
            d
            for d in existing.filter(specific_date__isnull=False).values_list("specific_date", flat=True)
            if day_of_week_for(d) == int(day_of_week)
        }
    else:
        dates = {specific_date}

    for day in sorted(dates):
        if has_shift_conflict(staff_id, day, start_time, end_time, exclude_shift_id=exclude_shift_id):
            raise ValueError("Shift overlaps another shift for this staff member")
