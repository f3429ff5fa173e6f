# mc_core/appointments/admin.py
from __future__ import annotations

from django.contrib import admin

from mc_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "doctor", "date", "time", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "patient__email", "doctor__email", "reason")
    # Status moves through AppointmentService only.
    readonly_fields = ("status", "cancelled_by_role", "cancelled_at", "received_at", "completed_at",
                       "created_at", "updated_at")
    list_select_related = ("patient", "doctor")
    ordering = ("-created_at",)
