"""
mark_expired_vouchers.py
------------------------
Expire active vouchers whose expiry date has passed.

Usage:
    python manage.py mark_expired_vouchers

Safe to run on a schedule (e.g. nightly cron).
"""

from django.core.management.base import BaseCommand

from vouchers.services.voucher_manager import VoucherManager


class Command(BaseCommand):
    help = "Mark active vouchers past their expiry date as expired."

    def handle(self, *args, **options):
        count = VoucherManager.mark_expired_vouchers()
        self.stdout.write(self.style.SUCCESS(f"Marked {count} voucher(s) expired."))
