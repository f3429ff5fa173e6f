# mc_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from mc_core.appointments.models import Appointment, AppointmentStatus
from mc_core.common.timeutils import to_12_hour


class AppointmentSerializer(serializers.ModelSerializer):
    patient_name = serializers.SerializerMethodField()
    doctor_name = serializers.SerializerMethodField()
    display_time = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            "id",
            "patient",
            "patient_name",
            "doctor",
            "doctor_name",
            "date",
            "time",
            "display_time",
            "reason",
            "status",
            "cancellation_reason",
            "cancelled_by_role",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    @staticmethod
    def _name(user) -> str:
        account = getattr(user, "account", None)
        return account.display_name if account else user.get_username()

    def get_patient_name(self, obj: Appointment) -> str:
        return self._name(obj.patient)

    def get_doctor_name(self, obj: Appointment) -> str:
        return self._name(obj.doctor)

    def get_display_time(self, obj: Appointment) -> str:
        try:
            return to_12_hour(obj.time)
        except ValueError:
            return obj.time


class AppointmentCreateSerializer(serializers.Serializer):
    doctor_id = serializers.IntegerField()
    date = serializers.CharField(max_length=10)
    time = serializers.CharField(max_length=16)
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class AppointmentCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class AppointmentNotesSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True)


class AppointmentStatusFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatus.choices, required=False)
    bucket = serializers.ChoiceField(choices=["upcoming", "past"], required=False)
