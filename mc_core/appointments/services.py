# mc_core/appointments/services.py
from __future__ import annotations

import logging
from datetime import date as date_cls

from django.db import transaction
from django.utils import timezone

from mc_core.accounts.models import Account, AccountRole
from mc_core.accounts.permissions import require_role
from mc_core.appointments.models import Appointment, AppointmentStatus
from mc_core.appointments.state_machine import check_transition
from mc_core.common.exceptions import InputValidationError, RoleNotPermitted
from mc_core.common.lookups import get_record
from mc_core.common.timeutils import to_24_hour
from mc_core.common.transitions import conditional_update
from mc_core.common.validation import require, sanitize_input
from mc_core.notifications.models import NotificationType
from mc_core.notifications.services import NotificationService

logger = logging.getLogger(__name__)

DEFAULT_CANCEL_REASON = {
    AccountRole.PATIENT: "Cancelled by patient",
    AccountRole.DOCTOR: "Cancelled by doctor",
}


def _validate_slot(date_str: str, time_str: str) -> None:
    require(date_str, "date", "Please select a date.")
    require(time_str, "time", "Please select a time.")
    try:
        date_cls.fromisoformat(date_str)
    except ValueError:
        raise InputValidationError("Date must be YYYY-MM-DD.", details={"field": "date"})
    try:
        hh, mm = to_24_hour(time_str).split(":")
        if not (0 <= int(hh) <= 23 and 0 <= int(mm) <= 59):
            raise ValueError(time_str)
    except ValueError:
        raise InputValidationError("Invalid appointment time.", details={"field": "time"})


class AppointmentService:
    """
    Appointment write-model.

    Notes:
    - Every status change is validated against state_machine.TRANSITIONS before any write.
    - The write itself is conditional on the status read; a concurrent change surfaces
      as ConflictingTransition instead of silently overwriting.
    - Only the record's patient or doctor may act on it.
    """

    @staticmethod
    def _participant_role(appt: Appointment, account: Account) -> str:
        if account.role == AccountRole.PATIENT and appt.patient_id == account.user_id:
            return AccountRole.PATIENT
        if account.role == AccountRole.DOCTOR and appt.doctor_id == account.user_id:
            return AccountRole.DOCTOR
        raise RoleNotPermitted("You are not a participant of this appointment.")

    @staticmethod
    def _get(appointment_id) -> Appointment:
        return get_record(Appointment, message="Appointment not found.", id=appointment_id)

    @staticmethod
    def _move(appt: Appointment, *, to_status: str, role: str, **changes) -> Appointment:
        check_transition(appt.status, to_status, role)
        return conditional_update(
            appt,
            entity="appointment",
            expected_status=appt.status,
            status=to_status,
            **changes,
        )

    # -------------------------
    # Booking
    # -------------------------
    @staticmethod
    @transaction.atomic
    def book(*, patient, doctor_id, date: str, time: str, reason: str = "") -> Appointment:
        account = require_role(patient, AccountRole.PATIENT)
        _validate_slot(date, time)

        doctor = get_record(
            Account.objects.select_related("user"),
            message="Doctor not found.",
            user_id=doctor_id,
            role=AccountRole.DOCTOR,
        )

        appt = Appointment.objects.create(
            patient_id=account.user_id,
            doctor_id=doctor.user_id,
            date=date,
            time=time.strip(),
            reason=sanitize_input(reason),
            status=AppointmentStatus.PENDING,
        )

        NotificationService.notify(
            recipient_id=doctor.user_id,
            title="New appointment request",
            message=f"{account.display_name} requested an appointment on {date} at {appt.time}.",
            type=NotificationType.NEW_APPOINTMENT,
            related_id=appt.id,
        )
        logger.info("Appointment %s booked with doctor %s", appt.id, doctor.user_id)
        return appt

    # -------------------------
    # Transitions
    # -------------------------
    @staticmethod
    @transaction.atomic
    def accept(*, doctor, appointment_id) -> Appointment:
        account = require_role(doctor, AccountRole.DOCTOR)
        appt = AppointmentService._get(appointment_id)
        role = AppointmentService._participant_role(appt, account)

        appt = AppointmentService._move(
            appt, to_status=AppointmentStatus.RECEIVED, role=role, received_at=timezone.now()
        )
        NotificationService.notify(
            recipient_id=appt.patient_id,
            title="Appointment received",
            message=f"Dr. {account.display_name} has received your appointment on {appt.date} at {appt.time}.",
            type=NotificationType.APPOINTMENT_UPDATE,
            related_id=appt.id,
            meta={"status": appt.status},
        )
        return appt

    @staticmethod
    @transaction.atomic
    def complete(*, doctor, appointment_id) -> Appointment:
        account = require_role(doctor, AccountRole.DOCTOR)
        appt = AppointmentService._get(appointment_id)
        role = AppointmentService._participant_role(appt, account)

        appt = AppointmentService._move(
            appt, to_status=AppointmentStatus.COMPLETED, role=role, completed_at=timezone.now()
        )
        NotificationService.notify(
            recipient_id=appt.patient_id,
            title="Appointment completed",
            message=f"Your appointment with Dr. {account.display_name} on {appt.date} has been completed.",
            type=NotificationType.APPOINTMENT_UPDATE,
            related_id=appt.id,
            meta={"status": appt.status},
        )
        return appt

    @staticmethod
    @transaction.atomic
    def cancel(*, actor, appointment_id, reason: str = "") -> Appointment:
        """
        Patient and doctor cancel with the same rules (pending or received only).
        The other party is notified.
        """
        account = require_role(actor, AccountRole.PATIENT, AccountRole.DOCTOR)
        appt = AppointmentService._get(appointment_id)
        role = AppointmentService._participant_role(appt, account)

        reason = sanitize_input(reason) or DEFAULT_CANCEL_REASON[role]
        appt = AppointmentService._move(
            appt,
            to_status=AppointmentStatus.CANCELLED,
            role=role,
            cancellation_reason=reason,
            cancelled_by_role=role,
            cancelled_at=timezone.now(),
        )

        other_id = appt.doctor_id if role == AccountRole.PATIENT else appt.patient_id
        NotificationService.notify(
            recipient_id=other_id,
            title="Appointment cancelled",
            message=f"The appointment on {appt.date} at {appt.time} was cancelled: {reason}",
            type=NotificationType.APPOINTMENT_UPDATE,
            related_id=appt.id,
            meta={"status": appt.status, "cancelled_by": role},
        )
        return appt

    @staticmethod
    @transaction.atomic
    def update_notes(*, doctor, appointment_id, notes: str) -> Appointment:
        # Notes are not a status change: allowed in every status, terminal included.
        account = require_role(doctor, AccountRole.DOCTOR)
        appt = AppointmentService._get(appointment_id)
        AppointmentService._participant_role(appt, account)

        appt.notes = sanitize_input(notes)
        appt.save(update_fields=["notes", "updated_at"])
        return appt
