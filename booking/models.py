# booking/models.py
#
# Purpose:
# - Core domain models for the salon calendar.
#
# Design highlights:
# - Client: walk-ins can be booked with just a name and phone; clean()
#   prevents duplicates by (name case-insensitive + phone exact).
# - Service: prices are TEXT ("45", "20+", "POA") because some services are
#   quoted "from" a price or on application. Use .price for a parsed value.
# - Staff: stylists who can be assigned to bookings.
# - Booking:
#   • one calendar day, start/end wall-clock times, optional staff
#   • several services may share one booking
#   • status follows the front desk: pending -> confirmed -> checked-in
#     -> checked-out/completed, or cancelled
#
# Notes for developers:
# - Double-booking is checked in BookingManager before saving. There is no
#   database constraint, so concurrent saves from two devices can still
#   overlap. A Postgres exclusion constraint on (staff, tsrange) would close
#   that gap.
#

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from .services.pricing import format_price, net_service_price


# -------------------------
# Client (person who books)
# -------------------------
class Client(models.Model):
    """
    A salon client.
    - email is optional (most bookings come in by phone).
    - Duplicates are blocked on (name case-insensitive, phone exact).
    """
    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.full_name

    def clean(self):
        name = (self.full_name or "").strip()
        phone = (self.phone or "").strip()
        if not name or not phone:
            return

        qs = Client.objects.filter(full_name__iexact=name, phone=phone)
        if self.pk:
            qs = qs.exclude(pk=self.pk)

        if qs.exists():
            raise ValidationError("A client with the same name and phone already exists.")


# -------------------------
# Service catalog item
# -------------------------
class Service(models.Model):
    """
    A service offered by the salon.

    Rules:
    - duration_minutes >= 0 (add-ons may take no extra time)
    - regular_price / discount are text: "45", "20+", "POA"
    - active controls visibility and bookability
    """
    name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(0)])
    regular_price = models.CharField(max_length=20, default="0")
    discount = models.CharField(max_length=20, blank=True, default="")
    active = models.BooleanField(default=True)

    def __str__(self):
        return f"{self.name} ({format_price(self.price)})"

    @property
    def price(self):
        """Net price (regular minus discount) as a pricing.Price."""
        return net_service_price(self.regular_price, self.discount)


# -------------------------
# Staff member / Stylist
# -------------------------
class Staff(models.Model):
    name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=100, blank=True)
    active = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = "staff"

    def __str__(self):
        return self.name


# -------------------------
# Booking record
# -------------------------
class Booking(models.Model):
    """
    Appointment booking on one day.

    end_time is derived from start_time + the services' total duration when
    the booking is created through BookingManager.
    """
    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_CHECKED_IN = "checked-in"
    STATUS_CHECKED_OUT = "checked-out"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_CHECKED_IN, "Checked in"),
        (STATUS_CHECKED_OUT, "Checked out"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True)
    name = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    services = models.ManyToManyField(Service, related_name="bookings")
    staff = models.ForeignKey(Staff, on_delete=models.SET_NULL, null=True, blank=True)
    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    num_clients = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(
        max_length=12,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        help_text="Booking lifecycle status",
    )
    total_price = models.CharField(max_length=20, blank=True, default="0")
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    cancellation_time = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["date", "start_time"]

    def __str__(self):
        who = self.client.full_name if self.client else (self.name or "Walk-in")
        return f"{who} on {self.date} at {self.start_time:%H:%M}"

    def clean(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValidationError("A booking cannot end before it starts.")

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start
