from __future__ import annotations

from rest_framework import serializers

from mc_core.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "title",
            "message",
            "type",
            "related_id",
            "read",
            "read_at",
            "created_at",
            "meta",
        ]
        read_only_fields = fields
