# booking/views.py
#
# Purpose:
# - CRUD APIs for Clients, Services, Staff and Bookings.
# - Availability endpoint: start times where the selected services fit.
# - Day view for the calendar: working staff, bookings per stylist, slots.
# - Booking actions for the front desk: consecutive create, move, status, cancel.
# - Permissions:
#   * Service writes are staff-only (price edits, activate/deactivate).
#   * Everything else is open to the salon's front-desk device.
#
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

from staff.services.roster import working_staff_for_date

from .models import Booking, Client, Service, Staff
from .serializers import (
    BookingSerializer,
    BookingStatusSerializer,
    ClientSerializer,
    ConsecutiveBookingSerializer,
    MoveBookingSerializer,
    ServiceSerializer,
    StaffSerializer,
)
from .services.availability_engine import new_service_instance
from .services.booking_manager import BookingManager
from .services.slot_utils import get_candidate_slots, parse_date_param


# -------------------- Permissions --------------------
class IsStaffOrReadOnly(BasePermission):
    """
    Read: anyone
    Write: staff only
    """
    def has_permission(self, request, view):
        if request.method in ("GET", "HEAD", "OPTIONS"):
            return True
        return bool(request.user and request.user.is_staff)


def _date_or_400(raw):
    """Parse a date query param; returns (date, None) or (None, Response)."""
    if not (raw or "").strip():
        return None, Response({"detail": "Missing 'date'."}, status=status.HTTP_400_BAD_REQUEST)
    try:
        return parse_date_param(raw), None
    except ValueError:
        return None, Response(
            {"detail": "Invalid date format. Use YYYY-MM-DD."},
            status=status.HTTP_400_BAD_REQUEST,
        )


# -------------------- ViewSets --------------------
class ClientViewSet(viewsets.ModelViewSet):
    queryset = Client.objects.all().order_by("full_name")
    serializer_class = ClientSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(full_name__icontains=search) | Q(phone__icontains=search))
        return qs

    def create(self, request, *args, **kwargs):
        """
        Create-or-reuse a Client.
        - Same name (case-insensitive) and phone -> return the existing row (200).
        - Otherwise create (201).
        """
        name = (request.data.get("full_name") or "").strip()
        phone = (request.data.get("phone") or "").strip()

        if not name:
            return Response({"detail": "full_name is required."}, status=400)

        if phone:
            existing = Client.objects.filter(full_name__iexact=name, phone=phone).first()
            if existing:
                return Response(self.get_serializer(existing).data, status=200)

        serializer = self.get_serializer(data={**request.data, "full_name": name, "phone": phone})
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        headers = self.get_success_headers(serializer.data)
        return Response(serializer.data, status=201, headers=headers)


class ServiceViewSet(viewsets.ModelViewSet):
    """
    Service catalog:
    - Anyone can list active services.
    - Only staff can create/update/delete services (IsStaffOrReadOnly).
    """
    serializer_class = ServiceSerializer
    permission_classes = [IsStaffOrReadOnly]

    def get_queryset(self):
        user = getattr(self.request, "user", None)
        qs = Service.objects.all().order_by("category", "name")
        category = (self.request.query_params.get("category") or "").strip()
        if category:
            qs = qs.filter(category__iexact=category)
        if user and user.is_authenticated and user.is_staff:
            return qs
        return qs.filter(active=True)


class StaffViewSet(viewsets.ModelViewSet):
    queryset = Staff.objects.all().order_by("id")
    serializer_class = StaffSerializer

    @action(detail=False, methods=["get"], url_path="working")
    def working(self, request):
        """GET /api/staff/working/?date=YYYY-MM-DD"""
        day, error = _date_or_400(request.query_params.get("date"))
        if error:
            return error
        staff = working_staff_for_date(day)
        return Response(StaffSerializer(staff, many=True).data)


class BookingViewSet(viewsets.ModelViewSet):
    """
    Endpoints:
    - POST   /api/bookings/                    create (one booking, many services)
    - POST   /api/bookings/consecutive/        one booking per service, back-to-back
    - GET    /api/bookings/availability/       valid start times for a selection
    - GET    /api/bookings/day/                calendar day view
    - POST   /api/bookings/{id}/move/          reschedule
    - POST   /api/bookings/{id}/status/        status change
    - POST   /api/bookings/{id}/cancel/        cancel

    PATCH/PUT only edit contact details and notes; time, day and stylist
    changes go through /move/ so they are re-checked.
    """
    queryset = (
        Booking.objects.all()
        .select_related("client", "staff")
        .prefetch_related("services")
        .order_by("-date", "start_time")
    )
    serializer_class = BookingSerializer
    manager = BookingManager()

    EDITABLE_FIELDS = ("client", "name", "phone", "num_clients", "notes")

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("date"):
            try:
                qs = qs.filter(date=parse_date_param(params["date"]))
            except ValueError:
                return qs.none()
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("staff"):
            qs = qs.filter(staff_id=params["staff"])
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            booking = self.manager.create_booking(
                services=data["services"],
                date=data["date"],
                start_time=data["start_time"],
                staff=data.get("staff"),
                client=data.get("client"),
                name=data.get("name", ""),
                phone=data.get("phone", ""),
                num_clients=data.get("num_clients", 1),
                notes=data.get("notes", ""),
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        out = BookingSerializer(booking)
        headers = self.get_success_headers(out.data)
        return Response(out.data, status=status.HTTP_201_CREATED, headers=headers)

    def update(self, request, *args, **kwargs):
        booking = self.get_object()
        blocked = [k for k in request.data if k not in self.EDITABLE_FIELDS]
        if blocked:
            return Response(
                {"detail": f"Use /move/ or /status/ to change: {', '.join(sorted(blocked))}."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer = self.get_serializer(booking, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    @action(detail=False, methods=["post"])
    def consecutive(self, request):
        serializer = ConsecutiveBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        instances, assignments, services_by_id = [], {}, {}
        for item in data["items"]:
            instance = new_service_instance(item["service"])
            instances.append(instance)
            assignments[instance.instance_id] = item["staff"].pk if item["staff"] else None
            services_by_id[item["service"].pk] = item["service"]

        try:
            bookings = self.manager.create_consecutive_bookings(
                service_instances=instances,
                staff_assignments=assignments,
                services_by_id=services_by_id,
                date=data["date"],
                start_time=data["start_time"],
                client=data.get("client"),
                name=data.get("name", ""),
                phone=data.get("phone", ""),
                notes=data.get("notes", ""),
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BookingSerializer(bookings, many=True).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="availability")
    def availability(self, request):
        """
        GET /api/bookings/availability/?date=YYYY-MM-DD&service=1&service=2&staff=4

        Two modes:
        - One booking (what POST /api/bookings/ creates): a single `staff`
          value, or `combined=1`. All services run as one block with that
          stylist and are checked for their total duration.
        - Consecutive (POST /api/bookings/consecutive/): one `staff` per
          `service`, paired by position, e.g. service=1&staff=4&service=2&staff=5.
          An empty staff value leaves that service unassigned, which no
          start time can satisfy.

        With no staff params at all the request is for an unassigned
        booking, which is never blocked.
        """
        day, error = _date_or_400(request.query_params.get("date"))
        if error:
            return error

        params = request.query_params
        service_ids = params.getlist("service")
        staff_ids = params.getlist("staff")
        combined = (params.get("combined") or "").strip().lower() in ("1", "true", "yes")
        slots = get_candidate_slots()

        if not service_ids or not staff_ids:
            return Response({"date": day.isoformat(), "slots": slots})

        services = Service.objects.in_bulk([sid for sid in service_ids if sid.isdigit()])
        selected = []
        for sid in service_ids:
            service = services.get(int(sid)) if sid.isdigit() else None
            if service is None:
                return Response({"detail": f"Unknown service '{sid}'."}, status=status.HTTP_404_NOT_FOUND)
            selected.append(service)

        if combined or len(staff_ids) == 1:
            available = self.manager.available_start_times_for_staff(
                day, staff_ids[0] or None, selected, slots
            )
            return Response({"date": day.isoformat(), "slots": available})

        instances, assignments = [], {}
        for position, service in enumerate(selected):
            instance = new_service_instance(service)
            instances.append(instance)
            staff_id = staff_ids[position] if position < len(staff_ids) else ""
            assignments[instance.instance_id] = staff_id or None

        available = self.manager.available_start_times(day, instances, assignments, slots)
        return Response({"date": day.isoformat(), "slots": available})

    @action(detail=False, methods=["get"], url_path="day")
    def day(self, request):
        """
        GET /api/bookings/day/?date=YYYY-MM-DD

        Returns the working staff, each stylist's bookings, unassigned
        bookings and the slot grid. Cancelled bookings are excluded.
        """
        day, error = _date_or_400(request.query_params.get("date"))
        if error:
            return error

        working = working_staff_for_date(day)
        bookings = (
            Booking.objects.filter(date=day)
            .exclude(status=Booking.STATUS_CANCELLED)
            .select_related("client", "staff")
            .prefetch_related("services")
            .order_by("start_time")
        )

        by_staff = {str(member.id): [] for member in working}
        unassigned = []
        for booking in bookings:
            data = BookingSerializer(booking).data
            if booking.staff_id is None:
                unassigned.append(data)
            else:
                by_staff.setdefault(str(booking.staff_id), []).append(data)

        return Response(
            {
                "date": day.isoformat(),
                "slots": get_candidate_slots(),
                "staff": StaffSerializer(working, many=True).data,
                "bookings": by_staff,
                "unassigned": unassigned,
            }
        )

    @action(detail=True, methods=["post"])
    def move(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = MoveBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            self.manager.move_booking(
                booking,
                date=data.get("date"),
                start_time=data.get("start_time"),
                staff=data["staff"] if "staff" in data else ...,
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            self.manager.update_status(booking, serializer.validated_data["status"])
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BookingSerializer(booking).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        booking = get_object_or_404(Booking, pk=pk)
        reason = (request.data.get("reason") or "").strip()

        try:
            self.manager.cancel_booking(booking, reason=reason)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"detail": "Booking cancelled."}, status=status.HTTP_200_OK)
