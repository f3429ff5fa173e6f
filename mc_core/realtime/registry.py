# mc_core/realtime/registry.py
from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Iterable, Optional

from django.db import transaction
from django.db.models import Model, QuerySet

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list], None]
ErrorCallback = Callable[[BaseException], None]


class LiveQuery:
    """
    A standing query over one model.

    `filters` / `exclude` are ORM lookups, `order_by` the snapshot order.
    `transform` maps each row to what subscribers receive (model instances by default).
    `base` may replace the manager queryset (select_related, annotations...).
    """

    def __init__(
        self,
        model: type[Model],
        *,
        filters: Optional[dict[str, Any]] = None,
        exclude: Optional[dict[str, Any]] = None,
        order_by: Iterable[str] = (),
        transform: Optional[Callable[[Model], Any]] = None,
        base: Optional[Callable[[], QuerySet]] = None,
        label: str = "",
    ):
        self.model = model
        self.filters = dict(filters or {})
        self.exclude = dict(exclude or {})
        self.order_by = tuple(order_by)
        self.transform = transform
        self.base = base
        self.label = label or model._meta.label

    def __repr__(self) -> str:
        return f"LiveQuery({self.label}, filters={self.filters!r})"

    def queryset(self) -> QuerySet:
        qs = self.base() if self.base is not None else self.model._default_manager.all()
        if self.filters:
            qs = qs.filter(**self.filters)
        if self.exclude:
            qs = qs.exclude(**self.exclude)
        if self.order_by:
            qs = qs.order_by(*self.order_by)
        return qs

    def rows(self) -> list[Model]:
        return list(self.queryset())

    def present(self, rows: list[Model]) -> list:
        if self.transform is None:
            return rows
        return [self.transform(r) for r in rows]

    def evaluate(self) -> list:
        return self.present(self.rows())

    @staticmethod
    def fingerprint(rows: list[Model]) -> tuple:
        # Identity + last write per row, in snapshot order.
        return tuple((r.pk, getattr(r, "updated_at", None)) for r in rows)

    def watches(self, model: type[Model]) -> bool:
        return issubclass(model, self.model)


class Subscription:
    _ids = itertools.count(1)

    def __init__(self, registry: "SubscriptionRegistry", query: LiveQuery, on_snapshot: SnapshotCallback,
                 on_error: Optional[ErrorCallback] = None):
        self.id = next(self._ids)
        self.registry = registry
        self.query = query
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True
        self._fingerprint: tuple | None = None

    def __repr__(self) -> str:
        return f"Subscription(#{self.id}, {self.query!r}, active={self.active})"

    def refresh(self, *, force: bool = False) -> bool:
        """
        Re-evaluate and deliver if the result set changed. Returns True when delivered.
        Failures are reported to on_error and never propagate to the writer.
        """
        if not self.active:
            return False
        try:
            rows = self.query.rows()
            fp = self.query.fingerprint(rows)
            if not force and fp == self._fingerprint:
                return False
            self._fingerprint = fp
            self.on_snapshot(self.query.present(rows))
            return True
        except Exception as exc:  # isolate subscribers from each other and from writers
            logger.exception("Live query %r failed", self.query)
            self._report(exc)
            return False

    def _report(self, exc: BaseException) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(exc)
        except Exception:
            logger.exception("on_error callback for %r failed", self.query)

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.registry.release(self)


class SubscriptionRegistry:
    """
    Process-wide set of live subscriptions, fed by model post_save / post_delete.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._subs: dict[int, Subscription] = {}

    def subscribe(self, query: LiveQuery, on_snapshot: SnapshotCallback,
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        sub = Subscription(self, query, on_snapshot, on_error)
        with self._lock:
            self._subs[sub.id] = sub
        # Initial snapshot is always delivered, even when empty.
        sub.refresh(force=True)
        return sub

    def release(self, sub: Subscription) -> None:
        with self._lock:
            self._subs.pop(sub.id, None)

    def active_count(self) -> int:
        with self._lock:
            return len(self._subs)

    def clear(self) -> None:
        with self._lock:
            subs = list(self._subs.values())
        for sub in subs:
            sub.unsubscribe()

    def watches(self, model: type[Model]) -> bool:
        with self._lock:
            return any(s.query.watches(model) for s in self._subs.values())

    def model_changed(self, model: type[Model]) -> int:
        with self._lock:
            interested = [s for s in self._subs.values() if s.query.watches(model)]
        delivered = 0
        for sub in interested:
            if sub.refresh():
                delivered += 1
        return delivered

    def schedule(self, model: type[Model], using: str | None = None) -> None:
        """
        Deliver after the writing transaction commits (immediately in autocommit).
        """
        if not self.watches(model):
            return
        transaction.on_commit(lambda: self.model_changed(model), using=using)


class SubscriptionGroup:
    """
    Subscriptions owned by one consumer (a dashboard view); closed together.
    """

    def __init__(self, registry: Optional[SubscriptionRegistry] = None):
        self.registry = registry or default_registry
        self.subscriptions: list[Subscription] = []

    def subscribe(self, query: LiveQuery, on_snapshot: SnapshotCallback,
                  on_error: Optional[ErrorCallback] = None) -> Subscription:
        sub = self.registry.subscribe(query, on_snapshot, on_error)
        self.subscriptions.append(sub)
        return sub

    def close(self) -> None:
        for sub in self.subscriptions:
            sub.unsubscribe()
        self.subscriptions = []

    def __enter__(self) -> "SubscriptionGroup":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


default_registry = SubscriptionRegistry()


def subscribe(query: LiveQuery, on_snapshot: SnapshotCallback, on_error: Optional[ErrorCallback] = None) -> Subscription:
    return default_registry.subscribe(query, on_snapshot, on_error)
