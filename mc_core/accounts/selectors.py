# mc_core/accounts/selectors.py
from __future__ import annotations

from django.db.models import QuerySet

from mc_core.accounts.models import Account, AccountRole

# Who may start a conversation with whom.
CONTACT_ROLES = {
    AccountRole.PATIENT: (AccountRole.DOCTOR, AccountRole.PHARMACY),
    AccountRole.DOCTOR: (AccountRole.PATIENT, AccountRole.PHARMACY),
    AccountRole.PHARMACY: (AccountRole.PATIENT, AccountRole.DOCTOR),
    AccountRole.ADMIN: (AccountRole.PATIENT, AccountRole.DOCTOR, AccountRole.PHARMACY),
}


def _base_qs() -> QuerySet[Account]:
    return Account.objects.select_related(
        "user", "patient_profile", "doctor_profile", "pharmacy_profile"
    )


def list_accounts(*, role: str | None = None, verified: bool | None = None, exclude_admin: bool = True) -> QuerySet[Account]:
    qs = _base_qs()
    if exclude_admin:
        qs = qs.exclude(role=AccountRole.ADMIN)
    if role:
        qs = qs.filter(role=role)
    if verified is not None:
        qs = qs.filter(verified=verified)
    return qs.order_by("-created_at")


def verified_doctors(*, specialization: str | None = None) -> QuerySet[Account]:
    """
    Doctors visible to patients: role == doctor AND verified.
    """
    qs = _base_qs().filter(role=AccountRole.DOCTOR, verified=True)
    if specialization:
        qs = qs.filter(doctor_profile__specialization__iexact=specialization)
    return qs.order_by("display_name")


def pending_doctors() -> QuerySet[Account]:
    return _base_qs().filter(role=AccountRole.DOCTOR, verified=False).order_by("created_at")


def contacts_for(account: Account) -> QuerySet[Account]:
    roles = CONTACT_ROLES.get(account.role, ())
    return _base_qs().filter(role__in=roles).exclude(pk=account.pk).order_by("display_name")


def can_message(sender: Account, recipient: Account) -> bool:
    if sender.pk == recipient.pk:
        return False
    return recipient.role in CONTACT_ROLES.get(sender.role, ())
