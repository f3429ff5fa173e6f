# mc_core/pharmacy/state_machine.py
from __future__ import annotations

from mc_core.accounts.models import AccountRole
from mc_core.common.exceptions import InvalidTransition
from mc_core.pharmacy.models import OrderStatus

S = OrderStatus

TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    (S.PENDING, S.PREPARING): frozenset({AccountRole.PHARMACY}),
    (S.PENDING, S.CANCELLED): frozenset({AccountRole.PHARMACY}),
    (S.PREPARING, S.OUT_FOR_DELIVERY): frozenset({AccountRole.PHARMACY}),
    (S.OUT_FOR_DELIVERY, S.DELIVERED): frozenset({AccountRole.PHARMACY}),
}

TERMINAL = frozenset({S.DELIVERED, S.CANCELLED})
IN_PROGRESS = frozenset({S.PREPARING, S.OUT_FOR_DELIVERY})

STATUS_MESSAGES = {
    S.PREPARING: "Your order is being prepared.",
    S.OUT_FOR_DELIVERY: "Your order is on its way.",
    S.DELIVERED: "Your order has been delivered.",
    S.CANCELLED: "Your order was declined by the pharmacy.",
}


def check_transition(from_status: str, to_status: str, role: str) -> None:
    roles = TRANSITIONS.get((from_status, to_status))
    if roles is None or role not in roles:
        raise InvalidTransition(entity="order", from_status=from_status, to_status=to_status, actor_role=role)
