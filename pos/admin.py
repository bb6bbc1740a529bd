from django.contrib import admin
from .models import CashDrawerLog, Transaction

@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "timestamp", "payment_method", "total", "staff", "booking")
    list_filter = ("payment_method", "timestamp")
    readonly_fields = ("items", "timestamp")

@admin.register(CashDrawerLog)
class CashDrawerLogAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "action", "staff", "amount", "status")
    list_filter = ("action",)
