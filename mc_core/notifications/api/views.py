from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from mc_core.common.api.pagination import paginated_response
from mc_core.notifications.api.serializers import NotificationSerializer
from mc_core.notifications.selectors import notifications_qs, unread_count
from mc_core.notifications.services import NotificationService


class NotificationViewSet(viewsets.ViewSet):
    """
    Every authenticated account reads only its own notifications.
    """
    permission_classes = [IsAuthenticated]

    def list(self, request):
        read_q = request.query_params.get("read")
        qs = notifications_qs(user_id=request.user.id, unread_only=(read_q == "false"))
        if read_q == "true":
            qs = qs.filter(read=True)
        return paginated_response(request, qs, NotificationSerializer, view=self)

    @action(methods=["GET"], detail=False, url_path="unread-count")
    def unread(self, request):
        return Response({"unread": unread_count(user_id=request.user.id)})

    @action(methods=["POST"], detail=True, url_path="mark-read")
    def mark_read(self, request, pk=None):
        notif = NotificationService.mark_read(user=request.user, notification_id=pk)
        return Response(NotificationSerializer(notif).data, status=status.HTTP_200_OK)

    @action(methods=["POST"], detail=False, url_path="mark-all-read")
    def mark_all_read(self, request):
        updated = NotificationService.mark_all_read(user=request.user)
        return Response({"updated": updated}, status=status.HTTP_200_OK)
