from datetime import date, time
from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from booking.models import Booking, Service, Staff
from pos.models import CashDrawerLog, Transaction
from pos.services.checkout import CheckoutService
from vouchers.models import Voucher
from vouchers.services.voucher_manager import VoucherManager


class CheckoutServiceTests(TestCase):
    def setUp(self):
        self.cut = Service.objects.create(name="Cut", duration_minutes=30, regular_price="40", discount="5")
        self.blowdry = Service.objects.create(name="Blow-dry", duration_minutes=45, regular_price="45+")
        self.bridal = Service.objects.create(name="Bridal", duration_minutes=90, regular_price="POA")
        self.anna = Staff.objects.create(name="Anna")

    def test_price_line_applies_discount_per_unit(self):
        line = CheckoutService.price_line(self.cut, quantity=2)
        self.assertEqual(line["unit_price"], "40.00")
        self.assertEqual(line["discount"], "10.00")
        self.assertEqual(line["line_total"], "70.00")

    def test_minimum_price_charges_numeric_part_or_custom(self):
        self.assertEqual(CheckoutService.price_line(self.blowdry)["line_total"], "45.00")
        self.assertEqual(CheckoutService.price_line(self.blowdry, custom_price="60")["line_total"], "60.00")

    def test_poa_needs_custom_price(self):
        with self.assertRaises(ValueError):
            CheckoutService.price_line(self.bridal)
        line = CheckoutService.price_line(self.bridal, custom_price="250")
        self.assertTrue(line["is_poa"])
        self.assertEqual(line["line_total"], "250.00")

    def test_price_cart_totals(self):
        priced = CheckoutService.price_cart(
            [{"service": self.cut}, {"service": self.blowdry, "quantity": 1}], extra_discount="5"
        )
        self.assertEqual(priced["subtotal"], Decimal("85.00"))
        self.assertEqual(priced["discount_amount"], Decimal("10.00"))
        self.assertEqual(priced["total"], Decimal("75.00"))

    def test_empty_cart_and_bad_quantity(self):
        with self.assertRaises(ValueError):
            CheckoutService.price_cart([])
        with self.assertRaises(ValueError):
            CheckoutService.price_line(self.cut, quantity=0)

    def test_cash_checkout_gives_change_and_logs_drawer(self):
        sale = CheckoutService.checkout(
            [{"service": self.cut}], "cash", cash_received="50", staff=self.anna
        )

        self.assertEqual(sale.total, Decimal("35.00"))
        self.assertEqual(sale.change_given, Decimal("15.00"))
        log = CashDrawerLog.objects.get()
        self.assertEqual(log.action, CashDrawerLog.ACTION_DRAWER_OPENED)
        self.assertEqual(log.metadata["transaction_id"], sale.pk)

    def test_cash_must_cover_total(self):
        with self.assertRaisesMessage(ValueError, "less than the total"):
            CheckoutService.checkout([{"service": self.cut}], "cash", cash_received="20")
        with self.assertRaises(ValueError):
            CheckoutService.checkout([{"service": self.cut}], "cash")
        self.assertFalse(Transaction.objects.exists())

    def test_card_checkout_does_not_open_drawer(self):
        CheckoutService.checkout([{"service": self.cut}], "card")
        self.assertFalse(CashDrawerLog.objects.exists())

    def test_unknown_payment_method(self):
        with self.assertRaises(ValueError):
            CheckoutService.checkout([{"service": self.cut}], "bitcoin")

    def test_voucher_checkout_redeems_balance(self):
        voucher = VoucherManager.create_voucher(amount="100", code="GIFTA")

        sale = CheckoutService.checkout([{"service": self.cut}], "voucher", voucher_code="gifta")

        voucher.refresh_from_db()
        self.assertEqual(voucher.balance, Decimal("65.00"))
        self.assertEqual(voucher.transactions.get(transaction_type="redemption").transaction, sale)

    def test_voucher_shortfall_rolls_back_sale(self):
        VoucherManager.create_voucher(amount="10", code="SMALL")
        with self.assertRaisesMessage(ValueError, "Insufficient voucher balance"):
            CheckoutService.checkout([{"service": self.cut}], "voucher", voucher_code="SMALL")
        self.assertFalse(Transaction.objects.exists())
        self.assertEqual(Voucher.objects.get(code="SMALL").balance, Decimal("10.00"))

    def test_voucher_checkout_with_nothing_to_pay(self):
        voucher = VoucherManager.create_voucher(amount="50", code="FREEB")

        sale = CheckoutService.checkout(
            [{"service": self.cut}], "voucher", voucher_code="FREEB", extra_discount="35"
        )

        self.assertEqual(sale.total, Decimal("0.00"))
        voucher.refresh_from_db()
        self.assertEqual(voucher.balance, Decimal("50.00"))
        self.assertFalse(voucher.transactions.filter(transaction_type="redemption").exists())

    def test_unknown_voucher(self):
        with self.assertRaisesMessage(ValueError, "Voucher not found"):
            CheckoutService.checkout([{"service": self.cut}], "voucher", voucher_code="NOPE1")

    def test_checkout_completes_linked_booking(self):
        booking = Booking.objects.create(
            name="Jo", date=date(2025, 6, 10), start_time=time(10), end_time=time(10, 30)
        )
        CheckoutService.checkout([{"service": self.cut}], "card", booking=booking)
        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.STATUS_COMPLETED)

    def test_manual_drawer_open(self):
        entry = CheckoutService.log_manual_drawer_open(staff=self.anna)
        self.assertEqual(entry.action, CashDrawerLog.ACTION_MANUAL_OPEN)
        self.assertIsNone(entry.amount)


class PosApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cut = Service.objects.create(name="Cut", duration_minutes=30, regular_price="40")
        self.bridal = Service.objects.create(name="Bridal", duration_minutes=90, regular_price="POA")

    def test_checkout_endpoint(self):
        resp = self.client.post(
            "/api/pos/transactions/",
            {
                "items": [{"service": self.cut.id, "quantity": 2}],
                "payment_method": "cash",
                "cash_received": "100.00",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["total"], "80.00")
        self.assertEqual(resp.json()["change_given"], "20.00")

        listing = self.client.get("/api/pos/transactions/", {"payment_method": "cash"})
        self.assertEqual(len(listing.json()), 1)

    def test_poa_without_price_is_400(self):
        resp = self.client.post(
            "/api/pos/transactions/",
            {"items": [{"service": self.bridal.id}], "payment_method": "card"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("price on application", resp.json()["detail"])

    def test_quote_does_not_save(self):
        resp = self.client.post(
            "/api/pos/transactions/quote/",
            {"items": [{"service": self.bridal.id, "custom_price": "300.00"}], "discount": "20.00"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total"], "280.00")
        self.assertFalse(Transaction.objects.exists())

    def test_manual_drawer_open_endpoint(self):
        resp = self.client.post("/api/pos/drawer-logs/open/", {}, format="json")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(self.client.get("/api/pos/drawer-logs/").json()[0]["action"], "manual_open")
