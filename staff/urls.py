from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import StaffAbsenceViewSet, StaffShiftViewSet

router = DefaultRouter()
router.register(r"shifts", StaffShiftViewSet, basename="staff-shift")
router.register(r"absences", StaffAbsenceViewSet, basename="staff-absence")

urlpatterns = [path("", include(router.urls))]
