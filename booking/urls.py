# booking/urls.py
#
# Purpose:
# - Expose the booking REST API via a DRF router.
#
# Notes for developers:
# - /api/bookings/ also carries the calendar actions (availability, day,
#   consecutive, move, status, cancel); see BookingViewSet.
# - Staff routes live here too; the roster (shifts/absences) is under
#   /api/roster/ (staff/urls.py).

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    BookingViewSet,
    ClientViewSet,
    ServiceViewSet,
    StaffViewSet,
)

# --------------------------
# DRF Router registrations
# --------------------------
router = DefaultRouter()
router.register(r"clients", ClientViewSet, basename="client")
router.register(r"services", ServiceViewSet, basename="service")
router.register(r"staff", StaffViewSet, basename="staff")
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("", include(router.urls)),
]
