# mc_core/notifications/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from mc_core.common.models import DocumentModel


class NotificationType(models.TextChoices):
    NEW_APPOINTMENT = "new_appointment", "New appointment"
    APPOINTMENT_UPDATE = "appointment_update", "Appointment updated"
    NEW_ORDER = "new_order", "New order"
    ORDER_UPDATE = "order_update", "Order updated"
    LOW_STOCK = "low_stock", "Low stock"
    ACCOUNT_UPDATE = "account_update", "Account updated"


class Notification(DocumentModel):
    """
    One-way event record for a single recipient.
    Only `read` / `read_at` change after creation.
    """
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )

    title = models.CharField(max_length=255)
    message = models.TextField(blank=True, default="")
    type = models.CharField(max_length=32, choices=NotificationType.choices, db_index=True)

    # Loose link (appointment/order/medicine/account id) to avoid cross-app FKs.
    related_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    meta = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "notifications_notification"
        indexes = [
            models.Index(fields=["recipient", "read", "created_at"]),
        ]

    def mark_read(self) -> bool:
        if self.read:
            return False
        self.read = True
        self.read_at = timezone.now()
        return True
