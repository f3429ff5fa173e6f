import pytest

from mc_core.appointments.models import AppointmentStatus

pytestmark = pytest.mark.django_db

BASE = "/api/v1/appointments/"


@pytest.fixture
def appointment_id(api_client_for, patient_user, doctor_user):
    res = api_client_for(patient_user).post(
        BASE, {"doctor_id": doctor_user.id, "date": "2030-05-01", "time": "14:30"}, format="json"
    )
    assert res.status_code == 201
    assert res.data["display_time"] == "2:30 PM"
    assert res.data["doctor_name"] == "Dana Doctor"
    return res.data["id"]


def test_doctor_accepts_and_patient_sees_status(api_client_for, appointment_id, patient_user, doctor_user):
    res = api_client_for(doctor_user).post(f"{BASE}{appointment_id}/accept/")
    assert res.status_code == 200
    assert res.data["status"] == AppointmentStatus.RECEIVED

    mine = api_client_for(patient_user).get(BASE, {"status": "received"})
    assert [row["id"] for row in mine.data["results"]] == [appointment_id]


def test_invalid_transition_returns_conflict_envelope(api_client_for, appointment_id, doctor_user):
    res = api_client_for(doctor_user).post(f"{BASE}{appointment_id}/complete/")

    assert res.status_code == 409
    assert res.data["error"]["code"] == "invalid_transition"
    assert res.data["error"]["details"]["from_status"] == "pending"


def test_patient_cannot_accept(api_client_for, appointment_id, patient_user):
    res = api_client_for(patient_user).post(f"{BASE}{appointment_id}/accept/")
    assert res.status_code == 403


def test_pharmacy_has_no_appointment_access(api_client_for, pharmacy_user):
    assert api_client_for(pharmacy_user).get(BASE).status_code == 403


def test_cancel_and_bucket_listing(api_client_for, appointment_id, patient_user):
    client = api_client_for(patient_user)
    res = client.post(f"{BASE}{appointment_id}/cancel/", {"reason": ""}, format="json")
    assert res.data["cancellation_reason"] == "Cancelled by patient"

    upcoming = client.get(BASE, {"bucket": "upcoming"})
    past = client.get(BASE, {"bucket": "past"})
    assert upcoming.data["results"] == []
    assert [row["id"] for row in past.data["results"]] == [appointment_id]
