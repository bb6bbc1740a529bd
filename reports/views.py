# reports/views.py

import csv
from decimal import Decimal

from django.db.models import Count, Sum
from django.http import HttpResponse
from django.utils import timezone
from rest_framework.permissions import BasePermission
from rest_framework.response import Response
from rest_framework.views import APIView

from booking.services.slot_utils import parse_date_param
from pos.models import Transaction

ZERO = Decimal("0.00")


class IsStaffOnly(BasePermission):
    """
    Only allow requests from logged-in staff users.
    """
    def has_permission(self, request, view):
        return bool(request.user and request.user.is_staff)


def filtered_transactions(params):
    """
    Transactions for ?date= (default today), optionally narrowed by
    ?payment_method= and ?staff=. Raises ValueError for a bad date.
    """
    raw = (params.get("date") or "").strip()
    day = parse_date_param(raw) if raw else timezone.localdate()

    qs = Transaction.objects.filter(timestamp__date=day).select_related("staff")
    if params.get("payment_method"):
        qs = qs.filter(payment_method=params["payment_method"])
    if params.get("staff"):
        qs = qs.filter(staff_id=params["staff"])
    return day, qs


def daily_summary(qs):
    totals = qs.aggregate(revenue=Sum("total"), discounts=Sum("discount_amount"), count=Count("id"))
    per_method = {
        row["payment_method"]: {"count": row["count"], "total": str(row["total"] or ZERO)}
        for row in qs.values("payment_method").annotate(count=Count("id"), total=Sum("total"))
    }
    by_method = {
        value: per_method.get(value, {"count": 0, "total": str(ZERO)})
        for value, _label in Transaction.PAYMENT_CHOICES
    }
    return {
        "transaction_count": totals["count"] or 0,
        "total_revenue": str(totals["revenue"] or ZERO),
        "total_discounts": str(totals["discounts"] or ZERO),
        "by_payment_method": by_method,
    }


class ReportsView(APIView):
    """
    GET /api/reports/summary?date=YYYY-MM-DD&payment_method=cash&staff=3

    Returns JSON with:
    - date
    - transaction_count, total_revenue, total_discounts
    - by_payment_method: { "cash": {"count": N, "total": "..."}, ... }

    Only accessible by staff users.
    """
    permission_classes = [IsStaffOnly]

    def get(self, request):
        try:
            day, qs = filtered_transactions(request.query_params)
        except ValueError:
            return Response({"detail": "Invalid date format. Use YYYY-MM-DD."}, status=400)

        return Response({"date": day.isoformat(), **daily_summary(qs)})


class TransactionsCsvView(APIView):
    """GET /api/reports/transactions.csv with the same filters as the summary."""
    permission_classes = [IsStaffOnly]

    def get(self, request):
        try:
            day, qs = filtered_transactions(request.query_params)
        except ValueError:
            return Response({"detail": "Invalid date format. Use YYYY-MM-DD."}, status=400)

        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="transactions_{day.isoformat()}.csv"'

        writer = csv.writer(response)
        writer.writerow(
            ["id", "time", "staff", "payment_method", "items", "subtotal", "discount", "total", "change"]
        )
        for sale in qs.order_by("timestamp", "id"):
            writer.writerow(
                [
                    sale.pk,
                    timezone.localtime(sale.timestamp).strftime("%H:%M"),
                    sale.staff.name if sale.staff else "",
                    sale.payment_method,
                    "; ".join(f'{i.get("quantity", 1)}x {i.get("name", "")}' for i in sale.items),
                    sale.subtotal,
                    sale.discount_amount,
                    sale.total,
                    sale.change_given if sale.change_given is not None else "",
                ]
            )
        return response
