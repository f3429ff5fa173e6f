# mc_core/realtime/analytics.py
from __future__ import annotations

from typing import Callable, Optional

from mc_core.accounts.analytics import analytics_snapshot
from mc_core.accounts.models import Account
from mc_core.appointments.models import Appointment
from mc_core.pharmacy.models import Order
from mc_core.realtime.registry import LiveQuery, SubscriptionGroup, SubscriptionRegistry


def subscribe_admin_analytics(
    on_snapshot: Callable[[dict], None],
    on_error: Optional[Callable[[BaseException], None]] = None,
    *,
    registry: Optional[SubscriptionRegistry] = None,
) -> SubscriptionGroup:
    """
    Live platform counters: one subscription per source collection, recomputed on any
    change and delivered only when the counters actually differ. Close the returned
    group to stop.
    """
    group = SubscriptionGroup(registry)
    last: dict = {}

    def _recompute(_rows) -> None:
        snapshot = analytics_snapshot()
        if snapshot != last:
            last.clear()
            last.update(snapshot)
            on_snapshot(dict(snapshot))

    for model in (Account, Order, Appointment):
        # Only membership/identity matters for counts.
        query = LiveQuery(model, order_by=("pk",), label=f"analytics:{model._meta.model_name}")
        group.subscribe(query, _recompute, on_error)
    return group
