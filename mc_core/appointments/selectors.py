# mc_core/appointments/selectors.py
from __future__ import annotations

from datetime import datetime

from django.db.models import QuerySet
from django.utils import timezone

from mc_core.appointments.models import Appointment
from mc_core.appointments.state_machine import ACTIVE
from mc_core.common.timeutils import now_key, slot_key


def _base_qs() -> QuerySet[Appointment]:
    return Appointment.objects.select_related("patient__account", "doctor__account")


def for_patient(*, user_id) -> QuerySet[Appointment]:
    return _base_qs().filter(patient_id=user_id).order_by("date", "time_24")


def for_doctor(*, user_id) -> QuerySet[Appointment]:
    return _base_qs().filter(doctor_id=user_id).order_by("date", "time_24")


def classify(appointments, *, now: datetime | None = None) -> tuple[list[Appointment], list[Appointment]]:
    """
    Split into (upcoming, past).

    Upcoming: still active and its slot is not before `now`; sorted soonest first.
    Everything else is past, most recent first. Times are compared in 24-hour form
    so "2:30 PM" sorts after "09:00".
    """
    now = timezone.localtime(now or timezone.now())
    current = now_key(now)

    upcoming: list[Appointment] = []
    past: list[Appointment] = []
    for appt in appointments:
        key = slot_key(appt.date, appt.time)
        if appt.status in ACTIVE and key >= current:
            upcoming.append(appt)
        else:
            past.append(appt)

    upcoming.sort(key=lambda a: slot_key(a.date, a.time))
    past.sort(key=lambda a: slot_key(a.date, a.time), reverse=True)
    return upcoming, past


def today_for_doctor(*, user_id, now: datetime | None = None) -> list[Appointment]:
    now = timezone.localtime(now or timezone.now())
    qs = for_doctor(user_id=user_id).filter(date=now.strftime("%Y-%m-%d"))
    return sorted(qs, key=lambda a: slot_key(a.date, a.time))
