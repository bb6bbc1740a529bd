from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import VoucherViewSet

router = SimpleRouter()
router.register(r"vouchers", VoucherViewSet, basename="voucher")

urlpatterns = [path("", include(router.urls))]
