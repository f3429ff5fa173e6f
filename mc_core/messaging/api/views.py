# mc_core/messaging/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from mc_core.accounts.permissions import require_role
from mc_core.messaging.api.serializers import ContactSerializer, MessageSendSerializer, MessageSerializer
from mc_core.messaging.conversation import derive_conversation_id
from mc_core.messaging.selectors import contacts_with_unread, conversation
from mc_core.messaging.services import MessageService


class ContactsView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: ContactSerializer(many=True)}, tags=["Messages"])
    def get(self, request):
        account = require_role(request.user)
        return Response(ContactSerializer(contacts_with_unread(account), many=True).data)


class ConversationView(APIView):
    """
    Conversations are addressed by the other participant's user id;
    the conversation id is derived server-side.
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    @extend_schema(responses={200: MessageSerializer(many=True)}, tags=["Messages"])
    def get(self, request, user_id: int):
        cid = derive_conversation_id(request.user.id, user_id)
        qs = conversation(conversation_id=cid, viewer_id=request.user.id)
        return Response({"conversation_id": cid, "messages": MessageSerializer(qs, many=True).data})

    @extend_schema(request=MessageSendSerializer, responses={201: MessageSerializer}, tags=["Messages"])
    def post(self, request, user_id: int):
        ser = MessageSendSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        msg = MessageService.send(
            sender=request.user,
            recipient_id=user_id,
            text=ser.validated_data.get("text", ""),
            attachment=ser.validated_data.get("attachment"),
        )
        return Response(MessageSerializer(msg).data, status=status.HTTP_201_CREATED)


class ConversationReadView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, tags=["Messages"])
    def post(self, request, user_id: int):
        cid = derive_conversation_id(request.user.id, user_id)
        updated = MessageService.mark_read(reader=request.user, conversation_id=cid)
        return Response({"conversation_id": cid, "updated": updated})
