import itertools

import pytest

from mc_core.accounts.models import AccountRole
from mc_core.appointments.models import AppointmentStatus
from mc_core.appointments.state_machine import TERMINAL, TRANSITIONS, allowed_targets, check_transition
from mc_core.common.exceptions import InvalidTransition

S = AppointmentStatus


def test_doctor_moves_forward():
    assert allowed_targets(S.PENDING, AccountRole.DOCTOR) == [S.RECEIVED, S.CANCELLED]
    assert allowed_targets(S.RECEIVED, AccountRole.DOCTOR) == [S.COMPLETED, S.CANCELLED]


def test_patient_can_only_cancel():
    assert allowed_targets(S.PENDING, AccountRole.PATIENT) == [S.CANCELLED]
    assert allowed_targets(S.RECEIVED, AccountRole.PATIENT) == [S.CANCELLED]


@pytest.mark.parametrize("terminal", sorted(TERMINAL))
def test_terminal_states_have_no_exit(terminal):
    assert allowed_targets(terminal) == []
    for target, role in itertools.product(S.values, [AccountRole.PATIENT, AccountRole.DOCTOR]):
        with pytest.raises(InvalidTransition):
            check_transition(terminal, target, role)


def test_every_pair_outside_the_table_is_rejected():
    roles = [AccountRole.PATIENT, AccountRole.DOCTOR, AccountRole.PHARMACY]
    for frm, to, role in itertools.product(S.values, S.values, roles):
        allowed = role in TRANSITIONS.get((frm, to), ())
        if allowed:
            check_transition(frm, to, role)
        else:
            with pytest.raises(InvalidTransition):
                check_transition(frm, to, role)


def test_error_names_the_transition():
    with pytest.raises(InvalidTransition) as exc:
        check_transition(S.PENDING, S.COMPLETED, AccountRole.DOCTOR)
    assert exc.value.details == {
        "entity": "appointment",
        "from_status": "pending",
        "to_status": "completed",
        "actor_role": "doctor",
    }
