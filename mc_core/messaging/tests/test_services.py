import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile

from mc_core.accounts.models import AccountRole
from mc_core.common.exceptions import InputValidationError, RoleNotPermitted
from mc_core.messaging.conversation import derive_conversation_id
from mc_core.messaging.models import AttachmentKind, Message
from mc_core.messaging.selectors import contacts_with_unread, conversation, unread_total
from mc_core.messaging.services import MessageService

pytestmark = pytest.mark.django_db


def test_send_uses_derived_conversation(patient_user, doctor_user):
    msg = MessageService.send(sender=patient_user, recipient_id=doctor_user.id, text="  Hello doctor  ")

    assert msg.text == "Hello doctor"
    assert msg.conversation_id == derive_conversation_id(doctor_user.id, patient_user.id)
    assert msg.read is False

    reply = MessageService.send(sender=doctor_user, recipient_id=patient_user.id, text="Hi")
    assert reply.conversation_id == msg.conversation_id
    assert list(conversation(conversation_id=msg.conversation_id)) == [msg, reply]


def test_role_pairs_are_enforced(patient_user, make_account):
    other_patient = make_account(AccountRole.PATIENT)
    admin = make_account(AccountRole.ADMIN)

    with pytest.raises(RoleNotPermitted):
        MessageService.send(sender=patient_user, recipient_id=other_patient.user_id, text="hey")
    with pytest.raises(RoleNotPermitted):
        MessageService.send(sender=patient_user, recipient_id=admin.user_id, text="hey")
    with pytest.raises(RoleNotPermitted):
        MessageService.send(sender=patient_user, recipient_id=patient_user.id, text="me")


def test_empty_message_rejected(patient_user, doctor_user):
    with pytest.raises(InputValidationError):
        MessageService.send(sender=patient_user, recipient_id=doctor_user.id, text="   ")
    assert Message.objects.count() == 0


def test_image_attachment_is_stored_before_message(patient_user, pharmacy_user):
    upload = SimpleUploadedFile("rx scan.png", b"\x89PNG fake", content_type="image/png")

    msg = MessageService.send(sender=patient_user, recipient_id=pharmacy_user.id, attachment=upload)

    assert msg.attachment_kind == AttachmentKind.IMAGE
    assert msg.attachment_name == "rx scan.png"
    assert msg.attachment_path.startswith(f"chats/{msg.conversation_id}/images/")
    assert msg.attachment_path.endswith("rx_scan.png")
    assert default_storage.exists(msg.attachment_path)


def test_mark_read_only_flips_incoming(patient_user, doctor_user):
    first = MessageService.send(sender=doctor_user, recipient_id=patient_user.id, text="Results are in")
    MessageService.send(sender=doctor_user, recipient_id=patient_user.id, text="Call me")
    mine = MessageService.send(sender=patient_user, recipient_id=doctor_user.id, text="Thanks")

    assert unread_total(user_id=patient_user.id) == 2
    assert MessageService.mark_read(reader=patient_user, conversation_id=first.conversation_id) == 2
    assert unread_total(user_id=patient_user.id) == 0

    mine.refresh_from_db()
    assert mine.read is False


def test_outsider_cannot_read_conversation(patient_user, doctor_user, pharmacy_user):
    cid = derive_conversation_id(patient_user.id, doctor_user.id)
    with pytest.raises(RoleNotPermitted):
        MessageService.mark_read(reader=pharmacy_user, conversation_id=cid)
    with pytest.raises(RoleNotPermitted):
        conversation(conversation_id=cid, viewer_id=pharmacy_user.id)


def test_contacts_sorted_by_latest_message(patient_account, doctor_user, pharmacy_user):
    MessageService.send(sender=patient_account.user, recipient_id=pharmacy_user.id, text="Is it in stock?")
    MessageService.send(sender=doctor_user, recipient_id=patient_account.user_id, text="See you Monday")

    rows = contacts_with_unread(patient_account)

    assert [r["account"].user_id for r in rows] == [doctor_user.id, pharmacy_user.id]
    assert [r["unread"] for r in rows] == [1, 0]
    assert rows[0]["last_message"].text == "See you Monday"
