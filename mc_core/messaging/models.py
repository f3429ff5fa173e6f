# mc_core/messaging/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from mc_core.common.models import DocumentModel


class AttachmentKind(models.TextChoices):
    NONE = "", "None"
    IMAGE = "image", "Image"
    FILE = "file", "File"


class Message(DocumentModel):
    """
    One message in a two-party conversation. Only `read` changes after creation.
    """
    conversation_id = models.CharField(max_length=128, db_index=True)
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="sent_messages")
    recipient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="received_messages")

    text = models.TextField(blank=True, default="")
    attachment_path = models.CharField(max_length=512, blank=True, default="")
    attachment_name = models.CharField(max_length=255, blank=True, default="")
    attachment_kind = models.CharField(max_length=8, choices=AttachmentKind.choices, blank=True, default="")

    read = models.BooleanField(default=False, db_index=True)
    sent_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "messaging_message"
        ordering = ["sent_at"]
        indexes = [
            models.Index(fields=["conversation_id", "sent_at"]),
            models.Index(fields=["recipient", "read"]),
        ]

    def __str__(self) -> str:
        return f"Message {self.id} in {self.conversation_id}"
