# mc_core/notifications/admin.py
from __future__ import annotations

from django.contrib import admin

from mc_core.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient", "type", "title", "read", "created_at")
    list_filter = ("type", "read")
    search_fields = ("id", "title", "related_id", "recipient__email")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at", "read_at")
    list_select_related = ("recipient",)
