# mc_core/pharmacy/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from mc_core.common.models import DocumentModel

PICKUP_ADDRESS = "Pickup"


class Medicine(DocumentModel):
    """
    Inventory line owned by one pharmacy. `stock` never goes negative.
    """
    pharmacy = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="medicines")

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")
    category = models.CharField(max_length=64, blank=True, default="", db_index=True)
    manufacturer = models.CharField(max_length=255, blank=True, default="")

    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=10)
    requires_prescription = models.BooleanField(default=False)

    class Meta:
        db_table = "pharmacy_medicine"
        indexes = [
            models.Index(fields=["pharmacy", "name"]),
            models.Index(fields=["pharmacy", "category"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.stock})"

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock


class DeliveryMethod(models.TextChoices):
    DELIVERY = "delivery", "Home delivery"
    PICKUP = "pickup", "Pickup"


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    INSURANCE = "insurance", "Insurance"


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PREPARING = "preparing", "Preparing"
    OUT_FOR_DELIVERY = "out-for-delivery", "Out for delivery"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class Order(DocumentModel):
    patient = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="patient_orders")
    pharmacy = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="pharmacy_orders")

    delivery_method = models.CharField(max_length=16, choices=DeliveryMethod.choices, default=DeliveryMethod.DELIVERY)
    delivery_address = models.TextField(blank=True, default="")
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    notes = models.TextField(blank=True, default="")

    # Fixed at creation; later catalog price changes do not touch them.
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=24, choices=OrderStatus.choices, default=OrderStatus.PENDING, db_index=True)

    # Set once the delivered-time stock decrement has run.
    inventory_applied_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "pharmacy_order"
        indexes = [
            models.Index(fields=["pharmacy", "status"]),
            models.Index(fields=["patient", "created_at"]),
        ]

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    # Kept nullable so history survives catalog deletions; reconciliation reports the gap.
    medicine = models.ForeignKey(Medicine, on_delete=models.SET_NULL, null=True, blank=True, related_name="order_items")

    medicine_name = models.CharField(max_length=255)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    requires_prescription = models.BooleanField(default=False)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = "pharmacy_order_item"

    def __str__(self) -> str:
        return f"{self.medicine_name} x{self.quantity}"
