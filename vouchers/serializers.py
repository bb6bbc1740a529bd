from rest_framework import serializers

from booking.models import Booking, Staff

from .models import Voucher, VoucherTransaction


class VoucherSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.full_name", read_only=True, default=None)
    issued_by_name = serializers.CharField(source="issued_by.name", read_only=True, default=None)

    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "client",
            "client_name",
            "amount",
            "balance",
            "issue_date",
            "expiry_date",
            "issued_by",
            "issued_by_name",
            "notes",
            "status",
        ]
        read_only_fields = ["balance", "issue_date", "status"]
        extra_kwargs = {"code": {"required": False}, "expiry_date": {"required": False}}


class VoucherUpdateSerializer(serializers.ModelSerializer):
    """Only the client, notes and status can be edited after issue."""

    class Meta:
        model = Voucher
        fields = ["client", "notes", "status"]


class VoucherTransactionSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source="created_by.name", read_only=True, default=None)

    class Meta:
        model = VoucherTransaction
        fields = [
            "id",
            "voucher",
            "transaction_type",
            "amount",
            "balance_after",
            "booking",
            "transaction",
            "notes",
            "created_by",
            "created_by_name",
            "created_at",
        ]


class RedeemSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=8, decimal_places=2)
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.all(), allow_null=True, required=False)
    created_by = serializers.PrimaryKeyRelatedField(queryset=Staff.objects.all(), allow_null=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
