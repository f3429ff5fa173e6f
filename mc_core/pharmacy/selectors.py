# mc_core/pharmacy/selectors.py
from __future__ import annotations

from django.db.models import F, QuerySet

from mc_core.pharmacy.filters import MedicineFilter
from mc_core.pharmacy.models import Medicine, Order


def inventory_for(*, pharmacy_id, params=None) -> QuerySet[Medicine]:
    qs = Medicine.objects.filter(pharmacy_id=pharmacy_id).order_by("name")
    if params:
        qs = MedicineFilter(params, queryset=qs).qs
    return qs


def low_stock_for(*, pharmacy_id) -> QuerySet[Medicine]:
    return (
        Medicine.objects.filter(pharmacy_id=pharmacy_id, stock__lte=F("min_stock"))
        .order_by("stock", "name")
    )


def categories_for(*, pharmacy_id) -> list[str]:
    return list(
        Medicine.objects.filter(pharmacy_id=pharmacy_id)
        .exclude(category="")
        .order_by("category")
        .values_list("category", flat=True)
        .distinct()
    )


def catalog_for_patients(*, pharmacy_id, params=None) -> QuerySet[Medicine]:
    # Out-of-stock rows stay visible; placement rejects them.
    return inventory_for(pharmacy_id=pharmacy_id, params=params)


def _orders_qs() -> QuerySet[Order]:
    return Order.objects.select_related("patient__account", "pharmacy__account").prefetch_related("items")


def orders_for_pharmacy(*, pharmacy_id, status: str | None = None) -> QuerySet[Order]:
    qs = _orders_qs().filter(pharmacy_id=pharmacy_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")


def orders_for_patient(*, patient_id, status: str | None = None) -> QuerySet[Order]:
    qs = _orders_qs().filter(patient_id=patient_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")


def all_orders(*, status: str | None = None) -> QuerySet[Order]:
    qs = _orders_qs()
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")
