# mc_core/appointments/state_machine.py
from __future__ import annotations

from mc_core.accounts.models import AccountRole
from mc_core.appointments.models import AppointmentStatus
from mc_core.common.exceptions import InvalidTransition

S = AppointmentStatus

# (from, to) -> roles allowed to perform it. Anything else is rejected.
TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    (S.PENDING, S.RECEIVED): frozenset({AccountRole.DOCTOR}),
    (S.PENDING, S.CANCELLED): frozenset({AccountRole.PATIENT, AccountRole.DOCTOR}),
    (S.RECEIVED, S.COMPLETED): frozenset({AccountRole.DOCTOR}),
    (S.RECEIVED, S.CANCELLED): frozenset({AccountRole.PATIENT, AccountRole.DOCTOR}),
}

TERMINAL = frozenset({S.COMPLETED, S.CANCELLED})
ACTIVE = frozenset({S.PENDING, S.RECEIVED})


def allowed_targets(from_status: str, role: str | None = None) -> list[str]:
    return [
        to for (frm, to), roles in TRANSITIONS.items()
        if frm == from_status and (role is None or role in roles)
    ]


def check_transition(from_status: str, to_status: str, role: str) -> None:
    roles = TRANSITIONS.get((from_status, to_status))
    if roles is None or role not in roles:
        raise InvalidTransition(
            entity="appointment",
            from_status=from_status,
            to_status=to_status,
            actor_role=role,
        )
