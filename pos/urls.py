from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CashDrawerLogViewSet, TransactionViewSet

router = SimpleRouter()
router.register(r"pos/transactions", TransactionViewSet, basename="transaction")
router.register(r"pos/drawer-logs", CashDrawerLogViewSet, basename="drawer-log")

urlpatterns = [
    path("", include(router.urls)),
]
