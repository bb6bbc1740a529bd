# staff/admin.py
from django.contrib import admin
from .models import StaffAbsence, StaffShift

@admin.register(StaffShift)
class StaffShiftAdmin(admin.ModelAdmin):
    list_display = ("staff", "day_of_week", "specific_date", "start_time", "end_time")
    list_filter = ("staff", "day_of_week")
    search_fields = ("staff__name",)

@admin.register(StaffAbsence)
class StaffAbsenceAdmin(admin.ModelAdmin):
    list_display = ("staff", "absence_date", "absence_type")
    list_filter = ("staff", "absence_type")
    search_fields = ("staff__name",)
