# staff/models.py
#
# Roster data: when each stylist works, and when they are away.
#
# - StaffShift is either recurring (day_of_week set, 0=Sunday..6=Saturday)
#   or for one specific_date. Never both.
# - StaffAbsence blocks a whole day for a staff member.
#
from django.core.exceptions import ValidationError
from django.db import models


DAY_OF_WEEK_CHOICES = [
    (0, "Sunday"),
    (1, "Monday"),
    (2, "Tuesday"),
    (3, "Wednesday"),
    (4, "Thursday"),
    (5, "Friday"),
    (6, "Saturday"),
]

ABSENCE_TYPES = [
    "Sick Leave",
    "Annual Leave",
    "Personal Leave",
    "Public Holiday",
    "Unpaid Leave",
    "Training",
]


class StaffShift(models.Model):
    """
    A working shift. Points to booking.Staff to avoid having two Staff models.
    """
    staff = models.ForeignKey(
        "booking.Staff",
        on_delete=models.CASCADE,
        related_name="shifts",
    )
    day_of_week = models.PositiveSmallIntegerField(
        choices=DAY_OF_WEEK_CHOICES, null=True, blank=True
    )
    specific_date = models.DateField(null=True, blank=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["staff_id", "specific_date", "day_of_week", "start_time"]

    def __str__(self):
        when = self.specific_date.isoformat() if self.specific_date else self.get_day_of_week_display()
        return f"{self.staff.name}: {when} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def is_recurring(self) -> bool:
        return self.specific_date is None and self.day_of_week is not None

    def clean(self):
        if (self.day_of_week is None) == (self.specific_date is None):
            raise ValidationError("Set either a day of week or a specific date, not both.")
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError("Shift end time must be after its start time.")


class StaffAbsence(models.Model):
    staff = models.ForeignKey(
        "booking.Staff",
        on_delete=models.CASCADE,
        related_name="absences",
    )
    absence_date = models.DateField()
    absence_type = models.CharField(
        max_length=50,
        choices=[(t, t) for t in ABSENCE_TYPES],
        default="Sick Leave",
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-absence_date"]

    def __str__(self):
        return f"{self.staff.name}: {self.absence_type} on {self.absence_date}"
