# mc_core/appointments/api/views.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from mc_core.accounts.models import AccountRole
from mc_core.accounts.permissions import RolePermission, role_of
from mc_core.appointments import selectors
from mc_core.appointments.api.serializers import (
    AppointmentCancelSerializer,
    AppointmentCreateSerializer,
    AppointmentNotesSerializer,
    AppointmentSerializer,
    AppointmentStatusFilterSerializer,
)
from mc_core.appointments.models import Appointment
from mc_core.appointments.services import AppointmentService
from mc_core.common.api.pagination import paginated_response
from mc_core.common.lookups import get_record


class AppointmentViewSet(viewsets.ViewSet):
    """
    Thin API layer:
    - role gate per action (RolePermission)
    - serializers validation
    - delegates writes to AppointmentService, reads to selectors
    """
    permission_classes = [IsAuthenticated, RolePermission]
    role_rules = {
        "list": {AccountRole.PATIENT, AccountRole.DOCTOR},
        "retrieve": {AccountRole.PATIENT, AccountRole.DOCTOR},
        "create": {AccountRole.PATIENT},
        "accept": {AccountRole.DOCTOR},
        "complete": {AccountRole.DOCTOR},
        "cancel": {AccountRole.PATIENT, AccountRole.DOCTOR},
        "notes": {AccountRole.DOCTOR},
        "today": {AccountRole.DOCTOR},
    }

    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()

    def _visible(self, request):
        role = role_of(request.user)
        if role == AccountRole.PATIENT:
            return selectors.for_patient(user_id=request.user.id)
        if role == AccountRole.DOCTOR:
            return selectors.for_doctor(user_id=request.user.id)
        return Appointment.objects.select_related("patient__account", "doctor__account").order_by("date", "time_24")

    @extend_schema(
        responses={200: AppointmentSerializer(many=True)},
        tags=["Appointments"],
        parameters=[
            OpenApiParameter(name="status", location=OpenApiParameter.QUERY, required=False, type=str),
            OpenApiParameter(name="bucket", location=OpenApiParameter.QUERY, required=False, type=str,
                             enum=["upcoming", "past"]),
        ],
    )
    def list(self, request):
        f = AppointmentStatusFilterSerializer(data=request.query_params)
        f.is_valid(raise_exception=True)

        qs = self._visible(request)
        if f.validated_data.get("status"):
            qs = qs.filter(status=f.validated_data["status"])

        bucket = f.validated_data.get("bucket")
        if bucket:
            upcoming, past = selectors.classify(qs)
            items = upcoming if bucket == "upcoming" else past
            return paginated_response(request, items, AppointmentSerializer, view=self)
        return paginated_response(request, qs, AppointmentSerializer, view=self)

    def retrieve(self, request, pk=None):
        appt = get_record(self._visible(request), message="Appointment not found.", id=pk)
        return Response(AppointmentSerializer(appt).data)

    @extend_schema(request=AppointmentCreateSerializer, responses={201: AppointmentSerializer}, tags=["Appointments"])
    def create(self, request):
        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        appt = AppointmentService.book(patient=request.user, **ser.validated_data)
        return Response(AppointmentSerializer(appt).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: AppointmentSerializer}, tags=["Appointments"])
    @action(methods=["POST"], detail=True)
    def accept(self, request, pk=None):
        appt = AppointmentService.accept(doctor=request.user, appointment_id=pk)
        return Response(AppointmentSerializer(appt).data)

    @extend_schema(request=None, responses={200: AppointmentSerializer}, tags=["Appointments"])
    @action(methods=["POST"], detail=True)
    def complete(self, request, pk=None):
        appt = AppointmentService.complete(doctor=request.user, appointment_id=pk)
        return Response(AppointmentSerializer(appt).data)

    @extend_schema(request=AppointmentCancelSerializer, responses={200: AppointmentSerializer}, tags=["Appointments"])
    @action(methods=["POST"], detail=True)
    def cancel(self, request, pk=None):
        ser = AppointmentCancelSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        appt = AppointmentService.cancel(actor=request.user, appointment_id=pk, reason=ser.validated_data["reason"])
        return Response(AppointmentSerializer(appt).data)

    @extend_schema(request=AppointmentNotesSerializer, responses={200: AppointmentSerializer}, tags=["Appointments"])
    @action(methods=["PATCH"], detail=True)
    def notes(self, request, pk=None):
        ser = AppointmentNotesSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        appt = AppointmentService.update_notes(doctor=request.user, appointment_id=pk, notes=ser.validated_data["notes"])
        return Response(AppointmentSerializer(appt).data)

    @action(methods=["GET"], detail=False)
    def today(self, request):
        items = selectors.today_for_doctor(user_id=request.user.id)
        return Response(AppointmentSerializer(items, many=True).data)
