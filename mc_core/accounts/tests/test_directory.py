import pytest

from mc_core.accounts.analytics import analytics_snapshot
from mc_core.accounts.models import AccountRole
from mc_core.accounts.selectors import contacts_for, pending_doctors, verified_doctors
from mc_core.accounts.services import AccountService
from mc_core.common.exceptions import RoleNotPermitted
from mc_core.notifications.models import Notification, NotificationType

pytestmark = pytest.mark.django_db


def test_verified_doctor_filter_excludes_unverified_and_other_roles(make_account):
    approved = make_account(AccountRole.DOCTOR, verified=True)
    make_account(AccountRole.DOCTOR)  # unverified
    make_account(AccountRole.PATIENT, verified=True)
    make_account(AccountRole.PHARMACY, verified=True)
    make_account(AccountRole.ADMIN, verified=True)

    assert list(verified_doctors()) == [approved]


def test_admin_approves_and_rejects_doctor(make_account, admin_user):
    doctor = make_account(AccountRole.DOCTOR)
    assert list(pending_doctors()) == [doctor]

    approved = AccountService.approve_doctor(actor=admin_user, doctor_account_id=doctor.id)
    assert approved.verified is True
    assert approved.approved_at is not None
    assert list(verified_doctors()) == [doctor]
    assert Notification.objects.filter(
        recipient=doctor.user, type=NotificationType.ACCOUNT_UPDATE, title="Account approved"
    ).exists()

    rejected = AccountService.reject_doctor(actor=admin_user, doctor_account_id=doctor.id)
    assert rejected.verified is False
    assert rejected.rejected_at is not None
    assert list(verified_doctors()) == []


def test_only_admin_can_verify(make_account):
    doctor = make_account(AccountRole.DOCTOR)
    other_doctor = make_account(AccountRole.DOCTOR, verified=True)
    with pytest.raises(RoleNotPermitted):
        AccountService.approve_doctor(actor=other_doctor.user, doctor_account_id=doctor.id)


def test_contacts_by_role(patient_account, doctor_account, pharmacy_account, admin_account, make_account):
    other_patient = make_account(AccountRole.PATIENT)

    assert set(contacts_for(patient_account)) == {doctor_account, pharmacy_account}
    assert set(contacts_for(doctor_account)) == {patient_account, other_patient, pharmacy_account}
    assert set(contacts_for(pharmacy_account)) == {patient_account, other_patient, doctor_account}
    assert set(contacts_for(admin_account)) == {patient_account, other_patient, doctor_account, pharmacy_account}


def test_analytics_snapshot_counts(make_account):
    make_account(AccountRole.PATIENT)
    make_account(AccountRole.DOCTOR, verified=True)
    make_account(AccountRole.DOCTOR)
    make_account(AccountRole.PHARMACY)
    make_account(AccountRole.ADMIN)

    assert analytics_snapshot() == {
        "total_users": 4,
        "patients": 1,
        "doctors": 2,
        "pharmacies": 1,
        "approved_doctors": 1,
        "pending_doctors": 1,
        "total_orders": 0,
        "total_appointments": 0,
    }
