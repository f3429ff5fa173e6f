# mc_core/messaging/selectors.py
from __future__ import annotations

from django.db.models import Count, Q, QuerySet

from mc_core.accounts.models import Account
from mc_core.accounts.selectors import contacts_for
from mc_core.common.exceptions import RoleNotPermitted
from mc_core.messaging.conversation import is_participant
from mc_core.messaging.models import Message


def conversation(*, conversation_id: str, viewer_id=None) -> QuerySet[Message]:
    if viewer_id is not None and not is_participant(conversation_id, viewer_id):
        raise RoleNotPermitted("You are not a participant of this conversation.")
    return Message.objects.filter(conversation_id=conversation_id).order_by("sent_at")


def contacts_with_unread(account: Account) -> list[dict]:
    """
    Every permitted contact with the latest message exchanged and the unread count,
    most recent conversation first, then by name.
    """
    me = account.user_id
    contacts = list(contacts_for(account))

    unread = dict(
        Message.objects.filter(recipient_id=me, read=False)
        .values("sender_id")
        .annotate(n=Count("id"))
        .values_list("sender_id", "n")
    )

    last: dict[int, Message] = {}
    for msg in Message.objects.filter(Q(sender_id=me) | Q(recipient_id=me)).order_by("-sent_at"):
        other = msg.recipient_id if msg.sender_id == me else msg.sender_id
        last.setdefault(other, msg)

    rows = [
        {"account": c, "last_message": last.get(c.user_id), "unread": unread.get(c.user_id, 0)}
        for c in contacts
    ]
    rows.sort(key=lambda r: r["account"].display_name.lower())
    rows.sort(key=lambda r: r["last_message"].sent_at.timestamp() if r["last_message"] else 0, reverse=True)
    return rows


def unread_total(*, user_id) -> int:
    return Message.objects.filter(recipient_id=user_id, read=False).count()
