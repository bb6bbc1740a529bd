from django.contrib import admin
from .models import Booking, Client, Service, Staff

@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "category", "regular_price", "discount", "duration_minutes", "active")
    list_filter = ("active", "category")
    search_fields = ("name",)
    list_editable = ("regular_price", "discount", "duration_minutes", "active")

@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("id", "full_name", "phone", "email")
    search_fields = ("full_name", "phone", "email")

@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "role", "active")

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "date", "start_time", "end_time", "client", "name", "staff", "status", "total_price")
    list_filter = ("status", "date", "staff")
    search_fields = ("client__full_name", "name", "phone")
