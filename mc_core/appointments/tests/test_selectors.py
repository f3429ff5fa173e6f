from datetime import datetime, timezone as dt_timezone

import pytest

from mc_core.appointments.models import Appointment, AppointmentStatus
from mc_core.appointments.selectors import classify, for_doctor, for_patient
from mc_core.realtime.queries import appointments_for_doctor

NOW = datetime(2030, 5, 1, 12, 0, tzinfo=dt_timezone.utc)


def _appt(date, time, status=AppointmentStatus.PENDING):
    return Appointment(date=date, time=time, status=status)


def test_classify_splits_on_slot_and_status():
    later_today = _appt("2030-05-01", "2:30 PM")
    morning = _appt("2030-05-01", "09:00")
    tomorrow = _appt("2030-05-02", "08:00", AppointmentStatus.RECEIVED)
    cancelled_future = _appt("2030-06-01", "10:00", AppointmentStatus.CANCELLED)
    yesterday = _appt("2030-04-30", "16:00")

    upcoming, past = classify([tomorrow, cancelled_future, later_today, morning, yesterday], now=NOW)

    assert upcoming == [later_today, tomorrow]
    assert past == [cancelled_future, morning, yesterday]


def test_twelve_hour_times_sort_after_morning_slots():
    noon = _appt("2030-05-03", "12:00 PM")
    early = _appt("2030-05-03", "9:15")
    afternoon = _appt("2030-05-03", "1:00 PM")

    upcoming, _ = classify([afternoon, noon, early], now=NOW)
    assert upcoming == [early, noon, afternoon]


@pytest.mark.django_db
def test_stored_ordering_uses_24_hour_times(patient_user, doctor_user):
    for time in ("2:30 PM", "14:00", "9:00 AM", "12:15 AM"):
        Appointment.objects.create(patient=patient_user, doctor=doctor_user, date="2030-05-04", time=time)

    expected = ["12:15 AM", "9:00 AM", "14:00", "2:30 PM"]
    assert [a.time for a in for_patient(user_id=patient_user.id)] == expected
    assert [a.time for a in for_doctor(user_id=doctor_user.id)] == expected
    assert [a.time for a in appointments_for_doctor(doctor_user.id).rows()] == expected


@pytest.mark.django_db
def test_time_24_follows_time_edits(patient_user, doctor_user):
    appt = Appointment.objects.create(patient=patient_user, doctor=doctor_user, date="2030-05-04", time="9:05 PM")
    assert appt.time_24 == "21:05"

    appt.time = "7:30 AM"
    appt.save(update_fields=["time"])
    assert Appointment.objects.get(pk=appt.pk).time_24 == "07:30"
