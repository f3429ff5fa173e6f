# mc_core/messaging/admin.py
from __future__ import annotations

from django.contrib import admin

from mc_core.messaging.models import Message


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "conversation_id", "sender", "recipient", "attachment_kind", "read", "sent_at")
    list_filter = ("read", "attachment_kind")
    search_fields = ("conversation_id", "text", "sender__email", "recipient__email")
    list_select_related = ("sender", "recipient")
    ordering = ("-sent_at",)
