from rest_framework import serializers

from booking.services.time_utils import TimeParseError, to_label

from .models import StaffAbsence, StaffShift
from .services.roster import validate_shift


class StaffShiftSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source="staff.name", read_only=True)

    class Meta:
        model = StaffShift
        fields = [
            "id",
            "staff",
            "staff_name",
            "day_of_week",
            "specific_date",
            "start_time",
            "end_time",
            "notes",
        ]

    def validate(self, attrs):
        instance = self.instance

        def current(name):
            if name in attrs:
                return attrs[name]
            return getattr(instance, name, None) if instance else None

        staff = current("staff")
        try:
            start = to_label(current("start_time")) if current("start_time") else None
            end = to_label(current("end_time")) if current("end_time") else None
        except TimeParseError as e:
            raise serializers.ValidationError(str(e))

        try:
            validate_shift(
                staff_id=staff.pk if staff else None,
                start_time=start,
                end_time=end,
                day_of_week=current("day_of_week"),
                specific_date=current("specific_date"),
                exclude_shift_id=instance.pk if instance else None,
            )
        except ValueError as e:
            raise serializers.ValidationError(str(e))
        return attrs


class ShiftOccurrenceSerializer(serializers.Serializer):
    """A shift expanded onto a concrete date."""

    id = serializers.IntegerField(source="shift.pk")
    staff = serializers.IntegerField(source="staff_id")
    staff_name = serializers.CharField(source="shift.staff.name")
    effective_date = serializers.DateField()
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    is_recurring = serializers.BooleanField()


class StaffAbsenceSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source="staff.name", read_only=True)

    class Meta:
        model = StaffAbsence
        fields = ["id", "staff", "staff_name", "absence_date", "absence_type", "notes", "created_at"]
        read_only_fields = ["created_at"]

    def validate(self, attrs):
        staff = attrs.get("staff") or getattr(self.instance, "staff", None)
        day = attrs.get("absence_date") or getattr(self.instance, "absence_date", None)
        qs = StaffAbsence.objects.filter(staff=staff, absence_date=day)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("An absence is already recorded for this staff member on that date.")
        return attrs
