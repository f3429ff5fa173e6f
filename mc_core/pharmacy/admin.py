# mc_core/pharmacy/admin.py
from __future__ import annotations

from django.contrib import admin

from mc_core.pharmacy.models import Medicine, Order, OrderItem


@admin.register(Medicine)
class MedicineAdmin(admin.ModelAdmin):
    list_display = ("name", "pharmacy", "category", "price", "stock", "min_stock", "requires_prescription")
    list_filter = ("category", "requires_prescription")
    search_fields = ("name", "manufacturer", "pharmacy__email")
    list_select_related = ("pharmacy",)


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("medicine", "medicine_name", "unit_price", "quantity", "line_total")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "patient", "pharmacy", "status", "total", "delivery_method", "created_at")
    list_filter = ("status", "delivery_method", "payment_method")
    search_fields = ("id", "patient__email", "pharmacy__email")
    readonly_fields = ("status", "subtotal", "delivery_fee", "total", "inventory_applied_at", "created_at", "updated_at")
    inlines = [OrderItemInline]
    ordering = ("-created_at",)
