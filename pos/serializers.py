from rest_framework import serializers

from booking.models import Booking, Service, Staff

from .models import CashDrawerLog, Transaction


class TransactionSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source="staff.name", read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "items",
            "subtotal",
            "discount_amount",
            "total",
            "payment_method",
            "cash_received",
            "change_given",
            "staff",
            "staff_name",
            "booking",
            "notes",
            "timestamp",
        ]
        read_only_fields = fields


class CartLineSerializer(serializers.Serializer):
    service = serializers.PrimaryKeyRelatedField(queryset=Service.objects.all())
    quantity = serializers.IntegerField(min_value=1, default=1)
    custom_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class QuoteSerializer(serializers.Serializer):
    items = CartLineSerializer(many=True)
    discount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("The cart is empty.")
        return value


class CheckoutSerializer(QuoteSerializer):
    payment_method = serializers.ChoiceField(choices=Transaction.PAYMENT_CHOICES)
    cash_received = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True
    )
    voucher_code = serializers.CharField(required=False, allow_blank=True, default="")
    staff = serializers.PrimaryKeyRelatedField(queryset=Staff.objects.all(), required=False, allow_null=True)
    booking = serializers.PrimaryKeyRelatedField(queryset=Booking.objects.all(), required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CashDrawerLogSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source="staff.name", read_only=True, default=None)

    class Meta:
        model = CashDrawerLog
        fields = ["id", "action", "staff", "staff_name", "timestamp", "amount", "status", "metadata"]
        read_only_fields = fields


class ManualOpenSerializer(serializers.Serializer):
    staff = serializers.PrimaryKeyRelatedField(queryset=Staff.objects.all(), required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_blank=True, default="manual_open")
