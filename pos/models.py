# pos/models.py
#
# Purpose:
# - Till records: every checkout is a Transaction; every time the cash
#   drawer opens (sale or manual "no sale") a CashDrawerLog row is written.
#
# Notes:
# - items is a JSON snapshot of the cart at sale time, so later price edits
#   on Service do not rewrite history.
# - Prices already include tax; there is no separate tax line.
#
from django.db import models

from booking.models import Booking, Staff


class Transaction(models.Model):
    PAYMENT_CASH = "cash"
    PAYMENT_CARD = "card"
    PAYMENT_PAYID = "payid"
    PAYMENT_VOUCHER = "voucher"

    PAYMENT_CHOICES = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_CARD, "Card"),
        (PAYMENT_PAYID, "PayID"),
        (PAYMENT_VOUCHER, "Voucher"),
    ]

    items = models.JSONField(default=list)
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(max_length=10, choices=PAYMENT_CHOICES)
    cash_received = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    change_given = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    staff = models.ForeignKey(Staff, on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions")
    booking = models.ForeignKey(Booking, on_delete=models.SET_NULL, null=True, blank=True, related_name="transactions")
    notes = models.TextField(blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp", "-id"]

    def __str__(self):
        return f"#{self.pk} {self.payment_method} ${self.total}"


class CashDrawerLog(models.Model):
    ACTION_DRAWER_OPENED = "drawer_opened"
    ACTION_MANUAL_OPEN = "manual_open"

    ACTION_CHOICES = [
        (ACTION_DRAWER_OPENED, "Opened for sale"),
        (ACTION_MANUAL_OPEN, "Manual open"),
    ]

    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    staff = models.ForeignKey(Staff, on_delete=models.SET_NULL, null=True, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=10, default="success")
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-timestamp", "-id"]

    def __str__(self):
        return f"{self.action} at {self.timestamp:%Y-%m-%d %H:%M}"
