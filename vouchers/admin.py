from django.contrib import admin
from .models import Voucher, VoucherTransaction

@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ("code", "client", "amount", "balance", "status", "expiry_date")
    list_filter = ("status",)
    search_fields = ("code", "client__full_name")

@admin.register(VoucherTransaction)
class VoucherTransactionAdmin(admin.ModelAdmin):
    list_display = ("voucher", "transaction_type", "amount", "balance_after", "created_at")
    list_filter = ("transaction_type",)
