# mc_core/pharmacy/filters.py
from __future__ import annotations

import django_filters
from django.db.models import F, Q

from mc_core.pharmacy.models import Medicine


class MedicineFilter(django_filters.FilterSet):
    """
    ?search= matches name/category/manufacturer, ?category= is exact (case-insensitive),
    ?low_stock=true keeps rows at or below their minimum.
    """
    search = django_filters.CharFilter(method="filter_search")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    requires_prescription = django_filters.BooleanFilter()
    low_stock = django_filters.BooleanFilter(method="filter_low_stock")

    class Meta:
        model = Medicine
        fields = ["search", "category", "requires_prescription", "low_stock"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) | Q(category__icontains=value) | Q(manufacturer__icontains=value)
        )

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(stock__lte=F("min_stock"))
        return queryset.filter(stock__gt=F("min_stock"))
