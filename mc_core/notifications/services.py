# mc_core/notifications/services.py
from __future__ import annotations

from typing import Iterable

from django.db import transaction
from django.utils import timezone

from mc_core.common.lookups import get_record
from mc_core.notifications.models import Notification


class NotificationService:
    @staticmethod
    @transaction.atomic
    def notify(
        *,
        recipient_id: int,
        title: str,
        message: str = "",
        type: str,
        related_id=None,
        meta: dict | None = None,
    ) -> Notification:
        return Notification.objects.create(
            recipient_id=recipient_id,
            title=title,
            message=message,
            type=type,
            related_id=str(related_id) if related_id else "",
            meta=meta or {},
        )

    @staticmethod
    @transaction.atomic
    def notify_many(
        *,
        recipient_ids: Iterable[int],
        title: str,
        message: str = "",
        type: str,
        related_id=None,
        meta: dict | None = None,
    ) -> list[Notification]:
        # Saved one by one so post_save reaches live subscriptions.
        return [
            NotificationService.notify(
                recipient_id=uid,
                title=title,
                message=message,
                type=type,
                related_id=related_id,
                meta=meta,
            )
            for uid in recipient_ids
        ]

    @staticmethod
    @transaction.atomic
    def mark_read(*, user, notification_id) -> Notification:
        notif = get_record(
            Notification, message="Notification not found.", id=notification_id, recipient_id=user.id
        )

        if notif.mark_read():
            notif.save(update_fields=["read", "read_at", "updated_at"])
        return notif

    @staticmethod
    @transaction.atomic
    def mark_all_read(*, user) -> int:
        unread = list(Notification.objects.filter(recipient_id=user.id, read=False))
        ts = timezone.now()
        for notif in unread:
            notif.read = True
            notif.read_at = ts
            notif.save(update_fields=["read", "read_at", "updated_at"])
        return len(unread)
