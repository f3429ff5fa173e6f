# mc_core/messaging/services.py
from __future__ import annotations

import logging

from django.db import transaction

from mc_core.accounts.models import Account
from mc_core.accounts.permissions import require_role
from mc_core.accounts.selectors import can_message
from mc_core.common.exceptions import InputValidationError, RoleNotPermitted
from mc_core.common.lookups import get_record
from mc_core.messaging.conversation import derive_conversation_id, is_participant
from mc_core.messaging.models import AttachmentKind, Message
from mc_core.storage.blobs import BlobStore, chat_attachment_path

logger = logging.getLogger(__name__)


def attachment_kind_for(content_type: str | None) -> str:
    return AttachmentKind.IMAGE if (content_type or "").startswith("image/") else AttachmentKind.FILE


class MessageService:
    @staticmethod
    def send(*, sender, recipient_id, text: str = "", attachment=None, blob_store: BlobStore | None = None) -> Message:
        """
        Upload (if any) happens before the row is written, outside the DB transaction:
        a failed upload leaves no message behind.
        """
        me = require_role(sender)
        recipient = get_record(Account, message="Recipient not found.", user_id=recipient_id)
        if not can_message(me, recipient):
            raise RoleNotPermitted("You cannot message this account.")

        text = (text or "").strip()
        if not text and attachment is None:
            raise InputValidationError("Message cannot be empty.", details={"field": "text"})

        conversation_id = derive_conversation_id(me.user_id, recipient.user_id)

        path = name = kind = ""
        if attachment is not None:
            store = blob_store or BlobStore()
            content_type = getattr(attachment, "content_type", None)
            kind = attachment_kind_for(content_type)
            name = getattr(attachment, "name", "") or "attachment"
            uploaded = store.upload(
                chat_attachment_path(conversation_id, kind, name),
                attachment,
                content_type=content_type,
            )
            path = uploaded.path

        with transaction.atomic():
            msg = Message.objects.create(
                conversation_id=conversation_id,
                sender_id=me.user_id,
                recipient_id=recipient.user_id,
                text=text,
                attachment_path=path,
                attachment_name=name,
                attachment_kind=kind,
            )
        logger.debug("Message %s sent in %s", msg.id, conversation_id)
        return msg

    @staticmethod
    @transaction.atomic
    def mark_read(*, reader, conversation_id: str) -> int:
        """
        Marks messages addressed to `reader` as read. A sender never flips its own messages.
        """
        if not is_participant(conversation_id, reader.id):
            raise RoleNotPermitted("You are not a participant of this conversation.")

        unread = list(
            Message.objects.filter(conversation_id=conversation_id, recipient_id=reader.id, read=False)
        )
        for msg in unread:
            msg.read = True
            msg.save(update_fields=["read", "updated_at"])
        return len(unread)
