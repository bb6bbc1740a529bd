# pos/views.py
#
# Endpoints (under /api/pos/):
# - GET  /transactions/                 list (filters: date, payment_method, staff)
# - POST /transactions/                 checkout
# - POST /transactions/quote/           price a cart without saving
# - GET  /drawer-logs/                  drawer history
# - POST /drawer-logs/open/             manual "no sale" open
#
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from booking.services.slot_utils import parse_date_param

from .models import CashDrawerLog, Transaction
from .serializers import (
    CashDrawerLogSerializer,
    CheckoutSerializer,
    ManualOpenSerializer,
    QuoteSerializer,
    TransactionSerializer,
)
from .services.checkout import CheckoutService


def _cart(validated_items):
    return [
        {
            "service": line["service"],
            "quantity": line.get("quantity", 1),
            "custom_price": line.get("custom_price"),
        }
        for line in validated_items
    ]


class TransactionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Transaction.objects.select_related("staff", "booking")
    serializer_class = TransactionSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("date"):
            try:
                qs = qs.filter(timestamp__date=parse_date_param(params["date"]))
            except ValueError:
                return qs.none()
        if params.get("payment_method"):
            qs = qs.filter(payment_method=params["payment_method"])
        if params.get("staff"):
            qs = qs.filter(staff_id=params["staff"])
        return qs

    def create(self, request, *args, **kwargs):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            sale = CheckoutService.checkout(
                _cart(data["items"]),
                data["payment_method"],
                cash_received=data.get("cash_received"),
                staff=data.get("staff"),
                booking=data.get("booking"),
                voucher_code=data.get("voucher_code") or None,
                extra_discount=data.get("discount", 0),
                notes=data.get("notes", ""),
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TransactionSerializer(sale).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def quote(self, request):
        serializer = QuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            priced = CheckoutService.price_cart(_cart(data["items"]), extra_discount=data.get("discount", 0))
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "items": priced["items"],
                "subtotal": str(priced["subtotal"]),
                "discount_amount": str(priced["discount_amount"]),
                "total": str(priced["total"]),
            }
        )


class CashDrawerLogViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    queryset = CashDrawerLog.objects.select_related("staff")
    serializer_class = CashDrawerLogSerializer

    @action(detail=False, methods=["post"])
    def open(self, request):
        serializer = ManualOpenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        entry = CheckoutService.log_manual_drawer_open(
            staff=data.get("staff"), reason=data.get("reason") or "manual_open"
        )
        return Response(CashDrawerLogSerializer(entry).data, status=status.HTTP_201_CREATED)
