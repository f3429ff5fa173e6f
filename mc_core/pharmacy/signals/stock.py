# mc_core/pharmacy/signals/stock.py
from __future__ import annotations

import logging

from django.dispatch import Signal, receiver

from mc_core.notifications.models import NotificationType
from mc_core.notifications.services import NotificationService

logger = logging.getLogger(__name__)

# Sent after a stock write leaves a medicine at or below its minimum.
# kwargs: medicine, stock, min_stock, order_id (None outside order delivery)
low_stock = Signal()


@receiver(low_stock, dispatch_uid="mc_pharmacy_low_stock_notify")
def notify_pharmacy_low_stock(sender, medicine, stock: int, min_stock: int, order_id=None, **kwargs):
    NotificationService.notify(
        recipient_id=medicine.pharmacy_id,
        title="Low stock",
        message=f"{medicine.name} is low on stock ({stock} left, minimum {min_stock}).",
        type=NotificationType.LOW_STOCK,
        related_id=medicine.id,
        meta={"stock": stock, "min_stock": min_stock, "order_id": str(order_id) if order_id else None},
    )
