# salon_system/urls.py
#
# Purpose:
# - Project URL router. Everything except the Django admin is JSON under /api/.
#
from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),

    # =====
    # API's
    # =====
    path("api/", include("booking.urls")),
    path("api/", include("vouchers.urls")),
    path("api/", include("pos.urls")),
    path("api/roster/", include("staff.urls")),
    path("api/reports/", include("reports.urls")),
]
