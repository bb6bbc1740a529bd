import csv
import io
from datetime import timedelta

from django.contrib.auth.models import User
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from booking.models import Service, Staff
from pos.models import Transaction
from pos.services.checkout import CheckoutService


class ReportsTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username="boss", password="pw", is_staff=True)
        self.anna = Staff.objects.create(name="Anna")
        self.cut = Service.objects.create(name="Cut", duration_minutes=30, regular_price="40", discount="5")
        self.colour = Service.objects.create(name="Colour", duration_minutes=90, regular_price="120")

        CheckoutService.checkout([{"service": self.cut}], "cash", cash_received="50", staff=self.anna)
        CheckoutService.checkout([{"service": self.colour}], "card")
        CheckoutService.checkout([{"service": self.cut}, {"service": self.colour}], "card", staff=self.anna)

        old = CheckoutService.checkout([{"service": self.colour}], "payid")
        Transaction.objects.filter(pk=old.pk).update(timestamp=timezone.now() - timedelta(days=3))

    def test_reports_are_staff_only(self):
        self.assertIn(self.client.get("/api/reports/summary").status_code, (401, 403))

    def test_daily_summary(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get("/api/reports/summary")

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["date"], timezone.localdate().isoformat())
        self.assertEqual(body["transaction_count"], 3)
        self.assertEqual(body["total_revenue"], "310.00")
        self.assertEqual(body["total_discounts"], "10.00")
        self.assertEqual(body["by_payment_method"]["cash"], {"count": 1, "total": "35.00"})
        self.assertEqual(body["by_payment_method"]["card"], {"count": 2, "total": "275.00"})
        self.assertEqual(body["by_payment_method"]["payid"], {"count": 0, "total": "0.00"})

    def test_summary_filters(self):
        self.client.force_authenticate(self.admin)
        body = self.client.get("/api/reports/summary", {"staff": self.anna.id}).json()
        self.assertEqual(body["transaction_count"], 2)

        body = self.client.get("/api/reports/summary", {"payment_method": "card"}).json()
        self.assertEqual(body["total_revenue"], "275.00")

        self.assertEqual(self.client.get("/api/reports/summary", {"date": "yesterday"}).status_code, 400)

    def test_csv_export(self):
        self.client.force_authenticate(self.admin)
        resp = self.client.get("/api/reports/transactions.csv", {"payment_method": "card"})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/csv")
        rows = list(csv.reader(io.StringIO(resp.content.decode())))
        self.assertEqual(rows[0][0], "id")
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[2][4], "1x Cut; 1x Colour")
