"""
voucher_manager.py
------------------
Issues, redeems and retires gift vouchers.

Rules:
- Codes are 5 characters drawn from an alphabet without look-alikes
  (no I, O, 0, 1) and are stored upper-case.
- A new voucher's balance equals its amount; expiry defaults to
  VOUCHER_VALIDITY_DAYS after issue.
- Redemption needs an active, unexpired voucher with enough balance. The
  voucher row is locked while its balance changes, so two tills cannot
  spend the same balance.
- Every issue and redemption writes a VoucherTransaction ledger row.
"""

import logging
import secrets
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ..models import Voucher, VoucherTransaction

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 5
MAX_CODE_ATTEMPTS = 20


def generate_voucher_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _money(value, field="amount") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid {field}: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Invalid {field}: {value!r}")
    return amount.quantize(Decimal("0.01"))


class VoucherManager:
    @staticmethod
    def unique_code() -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_voucher_code()
            if not Voucher.objects.filter(code=code).exists():
                return code
        raise ValueError("Could not generate a unique voucher code; try again.")

    @staticmethod
    @transaction.atomic
    def create_voucher(amount, client=None, issued_by=None, expiry_date=None, notes="", code=None):
        """
        Issue a voucher.

        Args:
            amount: face value (> 0)
            client / issued_by: optional Client / Staff
            expiry_date: aware datetime; defaults to issue + VOUCHER_VALIDITY_DAYS
            code: optional custom code (upper-cased, must be unused)

        Raises:
            ValueError: invalid amount, duplicate code, or expiry before issue.
        """
        amount = _money(amount)
        if amount <= 0:
            raise ValueError("Voucher amount must be greater than zero.")

        if code:
            code = code.strip().upper()
            if Voucher.objects.filter(code=code).exists():
                raise ValueError(f"Voucher code {code} is already in use.")
        else:
            code = VoucherManager.unique_code()

        issued = timezone.now()
        if expiry_date is None:
            expiry_date = issued + timedelta(days=getattr(settings, "VOUCHER_VALIDITY_DAYS", 365))
        elif expiry_date <= issued:
            raise ValueError("Expiry date must be in the future.")

        voucher = Voucher.objects.create(
            code=code,
            client=client,
            amount=amount,
            balance=amount,
            issue_date=issued,
            expiry_date=expiry_date,
            issued_by=issued_by,
            notes=notes or "",
            status=Voucher.STATUS_ACTIVE,
        )
        VoucherTransaction.objects.create(
            voucher=voucher,
            transaction_type=VoucherTransaction.TYPE_ISSUE,
            amount=amount,
            balance_after=amount,
            created_by=issued_by,
        )
        logger.info("Issued voucher %s for %s", voucher.code, amount)
        return voucher

    @staticmethod
    def get_voucher_by_code(code):
        """Case-insensitive lookup; raises Voucher.DoesNotExist."""
        return Voucher.objects.get(code=(code or "").strip().upper())

    @staticmethod
    @transaction.atomic
    def redeem_voucher(voucher_id, amount, booking=None, pos_transaction=None, notes="", created_by=None):
        """
        Spend `amount` from a voucher.

        Returns:
            dict: success, new_balance, new_status, voucher

        Raises:
            ValueError: voucher not active, expired, or balance too low.
        """
        amount = _money(amount, field="redemption amount")
        if amount <= 0:
            raise ValueError("Redemption amount must be greater than zero.")

        voucher = Voucher.objects.select_for_update().get(pk=voucher_id)

        if voucher.status != Voucher.STATUS_ACTIVE:
            raise ValueError("Voucher is not active")
        if voucher.expiry_date < timezone.now():
            raise ValueError("Voucher has expired")
        if voucher.balance < amount:
            logger.info("Voucher %s: %s requested, %s left", voucher.code, amount, voucher.balance)
            raise ValueError("Insufficient voucher balance")

        voucher.balance = voucher.balance - amount
        voucher.status = Voucher.STATUS_REDEEMED if voucher.balance == 0 else Voucher.STATUS_ACTIVE
        voucher.save(update_fields=["balance", "status"])

        VoucherTransaction.objects.create(
            voucher=voucher,
            transaction_type=VoucherTransaction.TYPE_REDEMPTION,
            amount=amount,
            balance_after=voucher.balance,
            booking=booking,
            transaction=pos_transaction,
            notes=notes or "",
            created_by=created_by,
        )
        logger.info("Redeemed %s from voucher %s (left %s)", amount, voucher.code, voucher.balance)
        return {
            "success": True,
            "new_balance": voucher.balance,
            "new_status": voucher.status,
            "voucher": voucher,
        }

    @staticmethod
    def cancel_voucher(voucher, reason=None):
        if voucher.status == Voucher.STATUS_CANCELLED:
            raise ValueError("Voucher is already cancelled.")
        voucher.status = Voucher.STATUS_CANCELLED
        voucher.notes = f"Cancelled: {reason}" if reason else "Cancelled"
        voucher.save(update_fields=["status", "notes"])
        logger.info("Cancelled voucher %s", voucher.code)
        return voucher

    @staticmethod
    def mark_expired_vouchers(now=None) -> int:
        """Flip active vouchers past expiry to 'expired'. Returns the count."""
        now = now or timezone.now()
        count = Voucher.objects.filter(
            status=Voucher.STATUS_ACTIVE, expiry_date__lt=now
        ).update(status=Voucher.STATUS_EXPIRED)
        if count:
            logger.info("Marked %d voucher(s) expired", count)
        return count

    @staticmethod
    def voucher_stats():
        qs = Voucher.objects.all()
        totals = qs.aggregate(total_value=Sum("amount"), total_balance=Sum("balance"))
        stats = {"total": qs.count()}
        for value, _label in Voucher.STATUS_CHOICES:
            stats[value] = qs.filter(status=value).count()
        stats["total_value"] = totals["total_value"] or Decimal("0.00")
        stats["total_balance"] = totals["total_balance"] or Decimal("0.00")
        return stats
