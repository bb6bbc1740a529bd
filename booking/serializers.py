from django.conf import settings
from rest_framework import serializers

from .models import Booking, Client, Service, Staff
from .services.pricing import format_duration, format_price
from .services.time_utils import TimeParseError, to_label


def _currency():
    return getattr(settings, "SALON_CURRENCY_SYMBOL", "$")


class ClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = ["id", "full_name", "email", "phone", "notes", "created_at"]
        read_only_fields = ["created_at"]


class ServiceSerializer(serializers.ModelSerializer):
    price_display = serializers.SerializerMethodField()
    duration_display = serializers.SerializerMethodField()
    is_poa = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = [
            "id",
            "name",
            "category",
            "description",
            "duration_minutes",
            "regular_price",
            "discount",
            "active",
            "price_display",
            "duration_display",
            "is_poa",
        ]

    def get_price_display(self, obj):
        return format_price(obj.price, currency_symbol=_currency())

    def get_duration_display(self, obj):
        return format_duration(obj.duration_minutes)

    def get_is_poa(self, obj):
        return not obj.price.is_numeric


class StaffSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = ["id", "name", "email", "role", "active"]


class HHMMField(serializers.Field):
    """Accepts and renders "HH:MM" wall-clock labels."""

    def to_representation(self, value):
        return value.strftime("%H:%M")

    def to_internal_value(self, data):
        try:
            return to_label(data)
        except TimeParseError:
            raise serializers.ValidationError("Time must be in HH:MM format.")


class BookingSerializer(serializers.ModelSerializer):
    client = serializers.PrimaryKeyRelatedField(
        queryset=Client.objects.all(), allow_null=True, required=False
    )
    services = serializers.PrimaryKeyRelatedField(queryset=Service.objects.all(), many=True)
    staff = serializers.PrimaryKeyRelatedField(
        queryset=Staff.objects.all(), allow_null=True, required=False
    )
    start_time = HHMMField()
    end_time = HHMMField(read_only=True)
    service_names = serializers.SerializerMethodField()
    staff_name = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "client",
            "name",
            "phone",
            "services",
            "service_names",
            "staff",
            "staff_name",
            "date",
            "start_time",
            "end_time",
            "num_clients",
            "status",
            "total_price",
            "notes",
            "created_at",
            "cancellation_time",
        ]
        read_only_fields = ["end_time", "status", "total_price", "created_at", "cancellation_time"]

    def get_service_names(self, obj):
        return [s.name for s in obj.services.all()]

    def get_staff_name(self, obj):
        return obj.staff.name if obj.staff else None

    def validate_services(self, value):
        if not value:
            raise serializers.ValidationError("Please select at least one service.")
        inactive = [s.name for s in value if not s.active]
        if inactive:
            raise serializers.ValidationError(
                f"Not currently available: {', '.join(inactive)}."
            )
        return value


class ConsecutiveItemSerializer(serializers.Serializer):
    service = serializers.PrimaryKeyRelatedField(queryset=Service.objects.filter(active=True))
    staff = serializers.PrimaryKeyRelatedField(queryset=Staff.objects.all(), allow_null=True)


class ConsecutiveBookingSerializer(serializers.Serializer):
    client = serializers.PrimaryKeyRelatedField(
        queryset=Client.objects.all(), allow_null=True, required=False
    )
    name = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateField()
    start_time = HHMMField()
    items = ConsecutiveItemSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("Please select at least one service.")
        return value


class MoveBookingSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    start_time = HHMMField(required=False)
    staff = serializers.PrimaryKeyRelatedField(
        queryset=Staff.objects.all(), allow_null=True, required=False
    )


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.STATUS_CHOICES)
