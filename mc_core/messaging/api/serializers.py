# mc_core/messaging/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from mc_core.messaging.models import Message


class MessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender",
            "recipient",
            "text",
            "attachment_path",
            "attachment_name",
            "attachment_kind",
            "read",
            "sent_at",
        ]
        read_only_fields = fields


class MessageSendSerializer(serializers.Serializer):
    text = serializers.CharField(required=False, allow_blank=True, default="")
    attachment = serializers.FileField(required=False, allow_null=True)


class ContactSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(source="account.user_id")
    display_name = serializers.CharField(source="account.display_name")
    role = serializers.CharField(source="account.role")
    photo_path = serializers.CharField(source="account.photo_path")
    last_message = MessageSerializer(allow_null=True)
    unread = serializers.IntegerField()
