# vouchers/models.py
#
# Purpose:
# - Gift vouchers sold at the counter and redeemed against later services.
#
# Design:
# - amount is the face value; balance is what is left to spend.
# - status: active -> redeemed (balance hits zero), expired (past
#   expiry_date), or cancelled (by staff).
# - VoucherTransaction is the ledger: one 'issue' row on creation and one
#   'redemption' row per use, each recording the balance afterwards.
#
from django.db import models

from booking.models import Booking, Client, Staff


class Voucher(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_REDEEMED = "redeemed"
    STATUS_EXPIRED = "expired"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_REDEEMED, "Redeemed"),
        (STATUS_EXPIRED, "Expired"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    code = models.CharField(max_length=20, unique=True)
    client = models.ForeignKey(Client, on_delete=models.SET_NULL, null=True, blank=True, related_name="vouchers")
    amount = models.DecimalField(max_digits=8, decimal_places=2)
    balance = models.DecimalField(max_digits=8, decimal_places=2)
    issue_date = models.DateTimeField()
    expiry_date = models.DateTimeField()
    issued_by = models.ForeignKey(
        Staff, on_delete=models.SET_NULL, null=True, blank=True, related_name="vouchers_issued"
    )
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    class Meta:
        ordering = ["-issue_date"]

    def __str__(self):
        return f"{self.code} (${self.balance} of ${self.amount})"


class VoucherTransaction(models.Model):
    TYPE_ISSUE = "issue"
    TYPE_REDEMPTION = "redemption"

    TYPE_CHOICES = [
        (TYPE_ISSUE, "Issue"),
        (TYPE_REDEMPTION, "Redemption"),
    ]

    voucher = models.ForeignKey(Voucher, on_delete=models.CASCADE, related_name="transactions")
    transaction_type = models.CharField(max_length=12, choices=TYPE_CHOICES)
    amount = models.DecimalField(max_digits=8, decimal_places=2)
    balance_after = models.DecimalField(max_digits=8, decimal_places=2)
    booking = models.ForeignKey(Booking, on_delete=models.SET_NULL, null=True, blank=True)
    transaction = models.ForeignKey(
        "pos.Transaction", on_delete=models.SET_NULL, null=True, blank=True, related_name="voucher_uses"
    )
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(Staff, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.voucher.code} {self.transaction_type} ${self.amount}"
