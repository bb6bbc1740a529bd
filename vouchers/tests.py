from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from booking.models import Client, Staff
from vouchers.models import Voucher, VoucherTransaction
from vouchers.services.voucher_manager import CODE_ALPHABET, VoucherManager, generate_voucher_code


class VoucherManagerTests(TestCase):
    def setUp(self):
        self.staff = Staff.objects.create(name="Anna")
        self.client_row = Client.objects.create(full_name="Jo Smith", phone="0400")

    def test_generated_codes_use_unambiguous_alphabet(self):
        code = generate_voucher_code()
        self.assertEqual(len(code), 5)
        self.assertTrue(set(code) <= set(CODE_ALPHABET))
        for ambiguous in "IO01":
            self.assertNotIn(ambiguous, CODE_ALPHABET)

    @override_settings(VOUCHER_VALIDITY_DAYS=30)
    def test_create_voucher_sets_balance_expiry_and_ledger(self):
        voucher = VoucherManager.create_voucher(amount="50", client=self.client_row, issued_by=self.staff)

        self.assertEqual(voucher.balance, Decimal("50.00"))
        self.assertEqual(voucher.status, Voucher.STATUS_ACTIVE)
        self.assertEqual((voucher.expiry_date - voucher.issue_date).days, 30)

        ledger = list(voucher.transactions.all())
        self.assertEqual(len(ledger), 1)
        self.assertEqual(ledger[0].transaction_type, VoucherTransaction.TYPE_ISSUE)
        self.assertEqual(ledger[0].balance_after, Decimal("50.00"))

    def test_create_voucher_validation(self):
        with self.assertRaises(ValueError):
            VoucherManager.create_voucher(amount="0")
        with self.assertRaises(ValueError):
            VoucherManager.create_voucher(amount="abc")
        with self.assertRaises(ValueError):
            VoucherManager.create_voucher(amount="10", expiry_date=timezone.now() - timedelta(days=1))

        VoucherManager.create_voucher(amount="10", code="gift1")
        with self.assertRaises(ValueError):
            VoucherManager.create_voucher(amount="10", code="GIFT1")

    def test_lookup_is_case_insensitive(self):
        VoucherManager.create_voucher(amount="10", code="ABCDE")
        self.assertEqual(VoucherManager.get_voucher_by_code(" abcde ").code, "ABCDE")
        with self.assertRaises(Voucher.DoesNotExist):
            VoucherManager.get_voucher_by_code("ZZZZZ")

    def test_partial_then_full_redemption(self):
        voucher = VoucherManager.create_voucher(amount="50")

        result = VoucherManager.redeem_voucher(voucher.pk, "20", created_by=self.staff)
        self.assertEqual(result["new_balance"], Decimal("30.00"))
        self.assertEqual(result["new_status"], Voucher.STATUS_ACTIVE)

        result = VoucherManager.redeem_voucher(voucher.pk, "30")
        self.assertEqual(result["new_balance"], Decimal("0.00"))
        self.assertEqual(result["new_status"], Voucher.STATUS_REDEEMED)

        redemptions = voucher.transactions.filter(transaction_type=VoucherTransaction.TYPE_REDEMPTION)
        self.assertEqual(sorted(r.balance_after for r in redemptions), [Decimal("0.00"), Decimal("30.00")])

    def test_redemption_rules(self):
        voucher = VoucherManager.create_voucher(amount="20")

        with self.assertRaisesMessage(ValueError, "Insufficient voucher balance"):
            VoucherManager.redeem_voucher(voucher.pk, "25")
        with self.assertRaises(ValueError):
            VoucherManager.redeem_voucher(voucher.pk, "0")

        Voucher.objects.filter(pk=voucher.pk).update(expiry_date=timezone.now() - timedelta(minutes=1))
        with self.assertRaisesMessage(ValueError, "Voucher has expired"):
            VoucherManager.redeem_voucher(voucher.pk, "5")

        VoucherManager.cancel_voucher(Voucher.objects.get(pk=voucher.pk), reason="Refunded")
        with self.assertRaisesMessage(ValueError, "Voucher is not active"):
            VoucherManager.redeem_voucher(voucher.pk, "5")

        voucher.refresh_from_db()
        self.assertEqual(voucher.balance, Decimal("20.00"))
        self.assertEqual(voucher.notes, "Cancelled: Refunded")

    def test_mark_expired_vouchers_command(self):
        fresh = VoucherManager.create_voucher(amount="10")
        stale = VoucherManager.create_voucher(amount="10")
        Voucher.objects.filter(pk=stale.pk).update(expiry_date=timezone.now() - timedelta(days=1))

        out = StringIO()
        call_command("mark_expired_vouchers", stdout=out)

        self.assertIn("Marked 1 voucher(s) expired", out.getvalue())
        self.assertEqual(Voucher.objects.get(pk=stale.pk).status, Voucher.STATUS_EXPIRED)
        self.assertEqual(Voucher.objects.get(pk=fresh.pk).status, Voucher.STATUS_ACTIVE)

    def test_stats(self):
        VoucherManager.create_voucher(amount="10")
        spent = VoucherManager.create_voucher(amount="15")
        VoucherManager.redeem_voucher(spent.pk, "15")

        stats = VoucherManager.voucher_stats()

        self.assertEqual(stats["total"], 2)
        self.assertEqual(stats["active"], 1)
        self.assertEqual(stats["redeemed"], 1)
        self.assertEqual(stats["total_value"], Decimal("25.00"))
        self.assertEqual(stats["total_balance"], Decimal("10.00"))


class VoucherApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_issue_lookup_and_redeem(self):
        resp = self.client.post("/api/vouchers/", {"amount": "40.00"}, format="json")
        self.assertEqual(resp.status_code, 201)
        voucher = resp.json()
        self.assertEqual(voucher["balance"], "40.00")

        resp = self.client.get("/api/vouchers/lookup/", {"code": voucher["code"].lower()})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["id"], voucher["id"])

        resp = self.client.post(f"/api/vouchers/{voucher['id']}/redeem/", {"amount": "15.00"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["new_balance"], "25.00")

        resp = self.client.post(f"/api/vouchers/{voucher['id']}/redeem/", {"amount": "99.00"}, format="json")
        self.assertEqual(resp.status_code, 400)

        ledger = self.client.get(f"/api/vouchers/{voucher['id']}/transactions/").json()
        self.assertEqual(len(ledger), 2)

    def test_lookup_errors(self):
        self.assertEqual(self.client.get("/api/vouchers/lookup/").status_code, 400)
        self.assertEqual(self.client.get("/api/vouchers/lookup/", {"code": "NOPE1"}).status_code, 404)

    def test_cancel_twice(self):
        voucher_id = self.client.post("/api/vouchers/", {"amount": "10"}, format="json").json()["id"]
        self.assertEqual(self.client.post(f"/api/vouchers/{voucher_id}/cancel/", {}, format="json").status_code, 200)
        self.assertEqual(self.client.post(f"/api/vouchers/{voucher_id}/cancel/", {}, format="json").status_code, 400)
