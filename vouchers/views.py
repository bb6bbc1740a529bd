# vouchers/views.py
#
# Endpoints (under /api/vouchers/):
# - GET/POST        /                 list (filters: status, client, search) / issue
# - GET/PATCH       /{id}/            detail / edit client, notes, status
# - POST            /{id}/redeem/     spend part of the balance
# - POST            /{id}/cancel/     cancel with optional reason
# - GET             /{id}/transactions/   ledger
# - GET             /lookup/?code=    find by code
# - GET             /stats/           counts and totals
#
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .models import Voucher
from .serializers import (
    RedeemSerializer,
    VoucherSerializer,
    VoucherTransactionSerializer,
    VoucherUpdateSerializer,
)
from .services.voucher_manager import VoucherManager


class VoucherViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Voucher.objects.select_related("client", "issued_by").order_by("-issue_date")
    serializer_class = VoucherSerializer

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return VoucherUpdateSerializer
        return VoucherSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("client"):
            qs = qs.filter(client_id=params["client"])
        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(code__icontains=search) | Q(notes__icontains=search))
        return qs

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            voucher = VoucherManager.create_voucher(
                amount=data["amount"],
                client=data.get("client"),
                issued_by=data.get("issued_by"),
                expiry_date=data.get("expiry_date"),
                notes=data.get("notes", ""),
                code=data.get("code"),
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def redeem(self, request, pk=None):
        voucher = get_object_or_404(Voucher, pk=pk)
        serializer = RedeemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = VoucherManager.redeem_voucher(
                voucher.pk,
                data["amount"],
                booking=data.get("booking"),
                notes=data.get("notes", ""),
                created_by=data.get("created_by"),
            )
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "success": True,
                "new_balance": str(result["new_balance"]),
                "new_status": result["new_status"],
            }
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        voucher = get_object_or_404(Voucher, pk=pk)
        try:
            VoucherManager.cancel_voucher(voucher, reason=(request.data.get("reason") or "").strip() or None)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(VoucherSerializer(voucher).data)

    @action(detail=True, methods=["get"])
    def transactions(self, request, pk=None):
        voucher = get_object_or_404(Voucher, pk=pk)
        ledger = voucher.transactions.select_related("created_by").all()
        return Response(VoucherTransactionSerializer(ledger, many=True).data)

    @action(detail=False, methods=["get"])
    def lookup(self, request):
        code = (request.query_params.get("code") or "").strip()
        if not code:
            return Response({"detail": "Missing 'code'."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            voucher = VoucherManager.get_voucher_by_code(code)
        except Voucher.DoesNotExist:
            return Response({"detail": "Voucher not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(VoucherSerializer(voucher).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        stats = VoucherManager.voucher_stats()
        stats["total_value"] = str(stats["total_value"])
        stats["total_balance"] = str(stats["total_balance"])
        return Response(stats)
