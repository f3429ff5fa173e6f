# mc_core/pharmacy/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import DatabaseError, transaction
from django.utils import timezone

from mc_core.accounts.models import Account, AccountRole
from mc_core.accounts.permissions import require_role
from mc_core.common.conf import delivery_fee, mc_setting
from mc_core.common.exceptions import InputValidationError, InventoryWarning, RoleNotPermitted
from mc_core.common.lookups import get_record
from mc_core.common.transitions import conditional_update
from mc_core.common.validation import require, sanitize_input
from mc_core.notifications.models import NotificationType
from mc_core.notifications.services import NotificationService
from mc_core.pharmacy.models import (
    PICKUP_ADDRESS,
    DeliveryMethod,
    Medicine,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
)
from mc_core.pharmacy.signals import low_stock
from mc_core.pharmacy.state_machine import STATUS_MESSAGES, check_transition

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

MEDICINE_FIELDS = (
    "name",
    "description",
    "category",
    "manufacturer",
    "price",
    "stock",
    "min_stock",
    "requires_prescription",
)


def _money(value, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(CENTS)
    except (InvalidOperation, ValueError, TypeError):
        raise InputValidationError("Invalid amount.", details={"field": field_name})
    if amount < 0:
        raise InputValidationError("Amount cannot be negative.", details={"field": field_name})
    return amount


def _count(value, field_name: str, *, minimum: int = 0) -> int:
    try:
        number = int(value)
    except (ValueError, TypeError):
        raise InputValidationError("Must be a whole number.", details={"field": field_name})
    if number < minimum:
        raise InputValidationError(f"Must be at least {minimum}.", details={"field": field_name})
    return number


@dataclass
class InventoryResult:
    """
    Outcome of the delivered-time stock decrement.
    `skipped` is True when the order had already been reconciled.
    """
    updated: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[InventoryWarning] = field(default_factory=list)
    low_stock: list[dict[str, Any]] = field(default_factory=list)
    skipped: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "updated": self.updated,
            "warnings": [w.as_dict() for w in self.warnings],
            "low_stock": self.low_stock,
            "skipped": self.skipped,
        }


class InventoryService:
    """
    Medicine catalog writes. Only the owning pharmacy may touch its rows.
    """

    @staticmethod
    def _clean(fields: dict[str, Any]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for name in MEDICINE_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            if name == "price":
                value = _money(value, "price")
            elif name in ("stock", "min_stock"):
                value = _count(value, name)
            elif name == "requires_prescription":
                value = bool(value)
            else:
                value = sanitize_input(value or "")
            out[name] = value
        if "name" in out:
            require(out["name"], "name", "Medicine name is required.")
        return out

    @staticmethod
    def _owned(pharmacy_account: Account, medicine_id) -> Medicine:
        return get_record(
            Medicine,
            message="Medicine not found.",
            id=medicine_id,
            pharmacy_id=pharmacy_account.user_id,
        )

    @staticmethod
    @transaction.atomic
    def create_medicine(*, pharmacy, **fields) -> Medicine:
        account = require_role(pharmacy, AccountRole.PHARMACY)
        data = InventoryService._clean(fields)
        require(data.get("name"), "name", "Medicine name is required.")
        if "price" not in data:
            raise InputValidationError("Price is required.", details={"field": "price"})
        data.setdefault("min_stock", int(mc_setting("MC_DEFAULT_MIN_STOCK")))

        med = Medicine.objects.create(pharmacy_id=account.user_id, **data)
        logger.info("Medicine %s added by pharmacy %s", med.id, account.user_id)
        return med

    @staticmethod
    @transaction.atomic
    def update_medicine(*, pharmacy, medicine_id, fields: dict[str, Any]) -> Medicine:
        account = require_role(pharmacy, AccountRole.PHARMACY)
        med = InventoryService._owned(account, medicine_id)

        data = InventoryService._clean(fields)
        changed = [name for name, value in data.items() if getattr(med, name) != value]
        for name in changed:
            setattr(med, name, data[name])
        if changed:
            med.save(update_fields=changed + ["updated_at"])
        return med

    @staticmethod
    @transaction.atomic
    def delete_medicine(*, pharmacy, medicine_id) -> None:
        account = require_role(pharmacy, AccountRole.PHARMACY)
        med = InventoryService._owned(account, medicine_id)
        med.delete()


class OrderService:
    """
    Order write-model.

    - Prices are snapshotted from the catalog at creation.
    - Status moves follow state_machine.TRANSITIONS with a conditional write.
    - Reaching `delivered` decrements stock once, best-effort: a missing medicine
      yields an InventoryWarning but the status change stays committed.
    """

    # -------------------------
    # Placement
    # -------------------------
    @staticmethod
    @transaction.atomic
    def place_order(
        *,
        patient,
        pharmacy_id,
        items: list[dict[str, Any]],
        delivery_method: str = DeliveryMethod.DELIVERY,
        delivery_address: str = "",
        payment_method: str = PaymentMethod.CASH,
        notes: str = "",
    ) -> Order:
        account = require_role(patient, AccountRole.PATIENT)

        if not items:
            raise InputValidationError("Please add items to your cart before checkout.", details={"field": "items"})
        if delivery_method not in DeliveryMethod.values:
            raise InputValidationError("Unknown delivery method.", details={"field": "delivery_method"})
        if payment_method not in PaymentMethod.values:
            raise InputValidationError("Unknown payment method.", details={"field": "payment_method"})

        delivery_address = sanitize_input(delivery_address)
        if delivery_method == DeliveryMethod.DELIVERY:
            require(delivery_address, "delivery_address", "Please provide a delivery address.")
        else:
            delivery_address = PICKUP_ADDRESS

        pharmacy = get_record(
            Account, message="Pharmacy not found.", user_id=pharmacy_id, role=AccountRole.PHARMACY
        )

        # Same medicine twice in the cart -> one line.
        quantities: dict[str, int] = {}
        for line in items:
            med_id = str(require(line.get("medicine_id"), "medicine_id"))
            quantities[med_id] = quantities.get(med_id, 0) + _count(line.get("quantity"), "quantity", minimum=1)

        medicines = {
            str(m.id): m
            for m in Medicine.objects.filter(pharmacy_id=pharmacy.user_id, id__in=list(quantities))
        }
        missing = [mid for mid in quantities if mid not in medicines]
        if missing:
            raise InputValidationError(
                "Some items are not sold by this pharmacy.", details={"field": "items", "medicine_ids": missing}
            )

        lines: list[OrderItem] = []
        subtotal = Decimal("0.00")
        for med_id, qty in quantities.items():
            med = medicines[med_id]
            if med.stock <= 0:
                raise InputValidationError(
                    f"{med.name} is out of stock.", details={"field": "items", "medicine_id": med_id}
                )
            line_total = (med.price * qty).quantize(CENTS)
            subtotal += line_total
            lines.append(
                OrderItem(
                    medicine=med,
                    medicine_name=med.name,
                    unit_price=med.price,
                    quantity=qty,
                    requires_prescription=med.requires_prescription,
                    line_total=line_total,
                )
            )

        fee = delivery_fee() if delivery_method == DeliveryMethod.DELIVERY else Decimal("0.00")
        order = Order.objects.create(
            patient_id=account.user_id,
            pharmacy_id=pharmacy.user_id,
            delivery_method=delivery_method,
            delivery_address=delivery_address,
            payment_method=payment_method,
            notes=sanitize_input(notes),
            subtotal=subtotal.quantize(CENTS),
            delivery_fee=fee,
            total=(subtotal + fee).quantize(CENTS),
            status=OrderStatus.PENDING,
        )
        for line in lines:
            line.order = order
        OrderItem.objects.bulk_create(lines)

        NotificationService.notify(
            recipient_id=pharmacy.user_id,
            title="New order",
            message=f"{account.display_name} placed an order ({len(lines)} items, total {order.total}).",
            type=NotificationType.NEW_ORDER,
            related_id=order.id,
        )
        logger.info("Order %s placed with pharmacy %s total=%s", order.id, pharmacy.user_id, order.total)
        return order

    # -------------------------
    # Transitions
    # -------------------------
    @staticmethod
    @transaction.atomic
    def transition(*, pharmacy, order_id, to_status: str) -> tuple[Order, InventoryResult | None]:
        account = require_role(pharmacy, AccountRole.PHARMACY)
        order = get_record(Order, message="Order not found.", id=order_id)
        if order.pharmacy_id != account.user_id:
            raise RoleNotPermitted("This order belongs to another pharmacy.")

        check_transition(order.status, to_status, account.role)
        order = conditional_update(order, entity="order", expected_status=order.status, status=to_status)

        inventory = None
        if to_status == OrderStatus.DELIVERED:
            inventory = OrderService.apply_inventory_decrement(order)

        NotificationService.notify(
            recipient_id=order.patient_id,
            title="Order update",
            message=STATUS_MESSAGES.get(to_status, f"Your order is now {to_status}."),
            type=NotificationType.ORDER_UPDATE,
            related_id=order.id,
            meta={"status": to_status},
        )
        return order, inventory

    @staticmethod
    def accept(*, pharmacy, order_id):
        return OrderService.transition(pharmacy=pharmacy, order_id=order_id, to_status=OrderStatus.PREPARING)

    @staticmethod
    def decline(*, pharmacy, order_id):
        return OrderService.transition(pharmacy=pharmacy, order_id=order_id, to_status=OrderStatus.CANCELLED)

    @staticmethod
    def dispatch(*, pharmacy, order_id):
        return OrderService.transition(pharmacy=pharmacy, order_id=order_id, to_status=OrderStatus.OUT_FOR_DELIVERY)

    @staticmethod
    def deliver(*, pharmacy, order_id):
        return OrderService.transition(pharmacy=pharmacy, order_id=order_id, to_status=OrderStatus.DELIVERED)

    # -------------------------
    # Inventory reconciliation
    # -------------------------
    @staticmethod
    @transaction.atomic
    def decrement_stock(*, medicine_id, quantity: int) -> Medicine | None:
        """
        stock = max(0, stock - quantity) under a row lock. None when the medicine is gone.
        """
        med = Medicine.objects.select_for_update().filter(id=medicine_id).first()
        if med is None:
            return None
        med.stock = max(0, med.stock - int(quantity))
        med.save(update_fields=["stock", "updated_at"])
        return med

    @staticmethod
    def apply_inventory_decrement(order: Order, *, force: bool = False) -> InventoryResult:
        """
        Runs once per order (guarded by inventory_applied_at) unless `force`.
        Each line gets its own savepoint so one bad line cannot undo the others
        or the already-written status.
        """
        result = InventoryResult()
        if order.inventory_applied_at is not None and not force:
            result.skipped = True
            return result

        for item in order.items.all():
            med = None
            try:
                # Nested atomic: a savepoint per line.
                if item.medicine_id:
                    med = OrderService.decrement_stock(medicine_id=item.medicine_id, quantity=item.quantity)
            except DatabaseError as e:
                logger.exception("Stock update failed for order %s item %s", order.id, item.medicine_name)
                result.warnings.append(
                    InventoryWarning(
                        medicine_id=str(item.medicine_id) if item.medicine_id else None,
                        medicine_name=item.medicine_name,
                        message=f"Stock update failed: {e}",
                    )
                )
                continue

            if med is None:
                warning = InventoryWarning(
                    medicine_id=str(item.medicine_id) if item.medicine_id else None,
                    medicine_name=item.medicine_name,
                    message="Medicine not found in inventory; stock was not updated.",
                    meta={"order_id": str(order.id), "quantity": item.quantity},
                )
                logger.warning("Order %s: %s (%s)", order.id, warning.message, item.medicine_name)
                result.warnings.append(warning)
                continue

            result.updated.append({"medicine_id": str(med.id), "name": med.name, "stock": med.stock})
            if med.is_low_stock:
                logger.info("Low stock: %s at %s (min %s)", med.name, med.stock, med.min_stock)
                result.low_stock.append(
                    {"medicine_id": str(med.id), "name": med.name, "stock": med.stock, "min_stock": med.min_stock}
                )
                low_stock.send(
                    sender=Medicine,
                    medicine=med,
                    stock=med.stock,
                    min_stock=med.min_stock,
                    order_id=order.id,
                )

        order.inventory_applied_at = timezone.now()
        order.save(update_fields=["inventory_applied_at", "updated_at"])
        return result
