# pos/services/checkout.py
#
# Purpose:
# - Price a till cart, take payment and record the sale.
#
# Pricing rules:
# - A line's unit price is the service's regular price; its discount is the
#   service's discount, both per unit and multiplied by quantity.
# - "20+" prices charge the numeric part unless the stylist keys in a
#   custom price.
# - POA services have no list price: a custom price is required.
# - Prices already include tax.
#
# Payment rules:
# - cash: cash received must cover the total; change is returned and the
#   drawer-open event is logged.
# - voucher: the total is redeemed from the voucher in the same database
#   transaction as the sale. A $0.00 total redeems nothing.
# - card / payid: recorded as-is (no gateway integration).

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction

from booking.models import Booking
from booking.services.pricing import ON_APPLICATION, parse_price
from vouchers.models import Voucher
from vouchers.services.voucher_manager import VoucherManager

from ..models import CashDrawerLog, Transaction

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _to_money(value, label) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid {label}: {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid {label}: {value!r}")
    return amount.quantize(CENTS)


class CheckoutService:
    """
    Handles till operations.

    Cart lines are dicts: {"service": Service, "quantity": int,
    "custom_price": optional str/Decimal}.
    """

    @staticmethod
    def price_line(service, quantity=1, custom_price=None):
        """
        Price one cart line.

        Returns:
            dict: JSON-ready snapshot with unit_price, discount, line_total.

        Raises:
            ValueError: POA without a custom price, bad quantity/price.
        """
        if int(quantity) < 1:
            raise ValueError("Quantity must be at least 1.")
        quantity = int(quantity)

        regular = parse_price(service.regular_price)
        has_custom = custom_price not in (None, "")

        if regular.kind == ON_APPLICATION and not has_custom:
            raise ValueError(f"Enter a price for '{service.name}' (price on application).")

        if has_custom:
            unit_price = _to_money(custom_price, "custom price")
            unit_discount = Decimal("0.00")
        else:
            unit_price = regular.amount.quantize(CENTS)
            discount = parse_price(service.discount)
            unit_discount = discount.amount.quantize(CENTS) if discount.is_numeric else Decimal("0.00")

        line_subtotal = unit_price * quantity
        line_discount = min(unit_discount * quantity, line_subtotal)

        return {
            "service_id": service.pk,
            "name": service.name,
            "quantity": quantity,
            "unit_price": str(unit_price),
            "discount": str(line_discount),
            "line_total": str(line_subtotal - line_discount),
            "is_poa": regular.kind == ON_APPLICATION,
            "custom_price": has_custom,
        }

    @staticmethod
    def price_cart(lines, extra_discount=0):
        """
        Price the whole cart.

        Returns:
            dict: items, subtotal, discount_amount, total (Decimals).
        """
        if not lines:
            raise ValueError("The cart is empty.")

        items = [
            CheckoutService.price_line(
                line["service"], line.get("quantity", 1), line.get("custom_price")
            )
            for line in lines
        ]

        subtotal = sum((Decimal(i["unit_price"]) * i["quantity"] for i in items), Decimal("0.00"))
        discount = sum((Decimal(i["discount"]) for i in items), Decimal("0.00"))
        discount += _to_money(extra_discount or 0, "discount")
        discount = min(discount, subtotal)

        return {
            "items": items,
            "subtotal": subtotal,
            "discount_amount": discount,
            "total": subtotal - discount,
        }

    @staticmethod
    @transaction.atomic
    def checkout(
        lines,
        payment_method,
        cash_received=None,
        staff=None,
        booking=None,
        voucher_code=None,
        extra_discount=0,
        notes="",
    ):
        """
        Record a sale.

        Returns:
            Transaction

        Raises:
            ValueError: empty cart, unknown payment method, not enough cash,
            or a voucher that cannot cover the total.
        """
        valid_methods = {value for value, _label in Transaction.PAYMENT_CHOICES}
        if payment_method not in valid_methods:
            raise ValueError(f"Unknown payment method '{payment_method}'.")

        priced = CheckoutService.price_cart(lines, extra_discount=extra_discount)
        total = priced["total"]

        received = change = None
        if payment_method == Transaction.PAYMENT_CASH:
            if cash_received in (None, ""):
                raise ValueError("Enter the cash received.")
            received = _to_money(cash_received, "cash received")
            if received < total:
                raise ValueError("Cash received is less than the total.")
            change = received - total

        voucher_id = None
        if payment_method == Transaction.PAYMENT_VOUCHER:
            if not voucher_code:
                raise ValueError("Enter a voucher code.")
            try:
                voucher_id = VoucherManager.get_voucher_by_code(voucher_code).pk
            except Voucher.DoesNotExist:
                raise ValueError("Voucher not found.") from None

        sale = Transaction.objects.create(
            items=priced["items"],
            subtotal=priced["subtotal"],
            discount_amount=priced["discount_amount"],
            total=total,
            payment_method=payment_method,
            cash_received=received,
            change_given=change,
            staff=staff,
            booking=booking,
            notes=notes or "",
        )

        # A fully discounted sale leaves nothing to take off the voucher.
        if voucher_id is not None and total > 0:
            VoucherManager.redeem_voucher(
                voucher_id, total, booking=booking, pos_transaction=sale, created_by=staff
            )

        if booking is not None and booking.status != Booking.STATUS_CANCELLED:
            booking.status = Booking.STATUS_COMPLETED
            booking.save(update_fields=["status"])

        if payment_method == Transaction.PAYMENT_CASH:
            CashDrawerLog.objects.create(
                action=CashDrawerLog.ACTION_DRAWER_OPENED,
                staff=staff,
                amount=total,
                status="success",
                metadata={"transaction_id": sale.pk, "payment_method": payment_method},
            )

        logger.info("Recorded sale #%s: %s %s", sale.pk, payment_method, total)
        return sale

    @staticmethod
    def log_manual_drawer_open(staff=None, reason="manual_open"):
        """Record a 'no sale' drawer opening."""
        entry = CashDrawerLog.objects.create(
            action=CashDrawerLog.ACTION_MANUAL_OPEN,
            staff=staff,
            amount=None,
            status="success",
            metadata={"reason": reason},
        )
        logger.info("Cash drawer opened manually (log #%s)", entry.pk)
        return entry
