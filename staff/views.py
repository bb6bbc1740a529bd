from rest_framework import status, viewsets
from rest_framework.response import Response

from booking.services.slot_utils import parse_date_param

from .models import StaffAbsence, StaffShift
from .serializers import ShiftOccurrenceSerializer, StaffAbsenceSerializer, StaffShiftSerializer
from .services.roster import shifts_for_range


class StaffShiftViewSet(viewsets.ModelViewSet):
    """
    Roster shifts.

    GET /api/roster/shifts/                        raw rows
    GET /api/roster/shifts/?date=YYYY-MM-DD        shifts falling on that day
    GET /api/roster/shifts/?start=...&end=...      shifts expanded over a range
    (all accept &staff=ID)
    """
    queryset = StaffShift.objects.select_related("staff").order_by("staff_id", "specific_date", "day_of_week", "start_time")
    serializer_class = StaffShiftSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        staff_id = self.request.query_params.get("staff")
        if staff_id:
            qs = qs.filter(staff_id=staff_id)
        return qs

    def list(self, request, *args, **kwargs):
        params = request.query_params
        start_raw = params.get("date") or params.get("start")
        if not start_raw:
            return super().list(request, *args, **kwargs)

        end_raw = params.get("date") or params.get("end") or start_raw
        try:
            start = parse_date_param(start_raw)
            end = parse_date_param(end_raw)
        except ValueError:
            return Response({"detail": "Invalid date format. Use YYYY-MM-DD."}, status=status.HTTP_400_BAD_REQUEST)
        if end < start:
            return Response({"detail": "end must not be before start."}, status=status.HTTP_400_BAD_REQUEST)

        occurrences = shifts_for_range(start, end, staff_id=params.get("staff") or None)
        return Response(ShiftOccurrenceSerializer(occurrences, many=True).data)


class StaffAbsenceViewSet(viewsets.ModelViewSet):
    queryset = StaffAbsence.objects.select_related("staff").order_by("-absence_date")
    serializer_class = StaffAbsenceSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("staff"):
            qs = qs.filter(staff_id=params["staff"])
        if params.get("date"):
            try:
                qs = qs.filter(absence_date=parse_date_param(params["date"]))
            except ValueError:
                return qs.none()
        return qs
