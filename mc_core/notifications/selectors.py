# mc_core/notifications/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from mc_core.notifications.models import Notification


def notifications_qs(*, user_id: int, unread_only: bool = False) -> QuerySet[Notification]:
    qs = Notification.objects.filter(recipient_id=user_id)
    if unread_only:
        qs = qs.filter(read=False)
    return qs.order_by("-created_at")


def unread_count(*, user_id: int) -> int:
    return Notification.objects.filter(recipient_id=user_id, read=False).count()
