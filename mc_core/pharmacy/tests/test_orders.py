from decimal import Decimal

import pytest

from mc_core.common.exceptions import InputValidationError, InvalidTransition, RoleNotPermitted
from mc_core.notifications.models import Notification, NotificationType
from mc_core.pharmacy.models import PICKUP_ADDRESS, DeliveryMethod, Medicine, OrderStatus
from mc_core.pharmacy.services import InventoryService, OrderService
from mc_core.pharmacy.signals import low_stock

pytestmark = pytest.mark.django_db


def _order(patient_user, pharmacy_user, medicine, quantity=1, **kwargs):
    kwargs.setdefault("delivery_address", "12 Elm Street")
    return OrderService.place_order(
        patient=patient_user,
        pharmacy_id=pharmacy_user.id,
        items=[{"medicine_id": medicine.id, "quantity": quantity}],
        **kwargs,
    )


def _deliver(pharmacy_user, order):
    OrderService.accept(pharmacy=pharmacy_user, order_id=order.id)
    OrderService.dispatch(pharmacy=pharmacy_user, order_id=order.id)
    return OrderService.deliver(pharmacy=pharmacy_user, order_id=order.id)


def test_delivery_total_includes_fee(patient_user, pharmacy_user, medicine):
    order = _order(patient_user, pharmacy_user, medicine, quantity=5)

    assert order.subtotal == Decimal("12.50")
    assert order.delivery_fee == Decimal("2.99")
    assert order.total == Decimal("15.49")

    line = order.items.get()
    assert line.medicine_name == "Paracetamol"
    assert line.unit_price == Decimal("2.50")
    assert line.line_total == Decimal("12.50")

    note = Notification.objects.get(recipient=pharmacy_user)
    assert note.type == NotificationType.NEW_ORDER


def test_pickup_has_no_fee_and_fixed_address(patient_user, pharmacy_user, medicine):
    order = _order(patient_user, pharmacy_user, medicine, quantity=2, delivery_method=DeliveryMethod.PICKUP)

    assert order.delivery_fee == Decimal("0.00")
    assert order.total == Decimal("5.00")
    assert order.delivery_address == PICKUP_ADDRESS


def test_price_is_snapshotted(patient_user, pharmacy_user, medicine):
    order = _order(patient_user, pharmacy_user, medicine, quantity=1)
    InventoryService.update_medicine(pharmacy=pharmacy_user, medicine_id=medicine.id, fields={"price": "9.99"})

    assert order.items.get().unit_price == Decimal("2.50")


def test_duplicate_cart_lines_are_merged(patient_user, pharmacy_user, medicine):
    order = OrderService.place_order(
        patient=patient_user,
        pharmacy_id=pharmacy_user.id,
        items=[{"medicine_id": medicine.id, "quantity": 1}, {"medicine_id": str(medicine.id), "quantity": 2}],
        delivery_address="12 Elm Street",
    )
    assert order.items.get().quantity == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"delivery_address": ""},
        {"delivery_method": "drone"},
        {"payment_method": "barter"},
    ],
)
def test_placement_validation(patient_user, pharmacy_user, medicine, overrides):
    with pytest.raises(InputValidationError):
        _order(patient_user, pharmacy_user, medicine, **overrides)


def test_empty_cart_and_out_of_stock_are_rejected(patient_user, pharmacy_user, medicine):
    with pytest.raises(InputValidationError):
        OrderService.place_order(patient=patient_user, pharmacy_id=pharmacy_user.id, items=[], delivery_address="x")

    InventoryService.update_medicine(pharmacy=pharmacy_user, medicine_id=medicine.id, fields={"stock": 0})
    with pytest.raises(InputValidationError) as exc:
        _order(patient_user, pharmacy_user, medicine)
    assert "out of stock" in exc.value.message


def test_foreign_medicine_is_rejected(patient_user, pharmacy_user, make_account, medicine):
    other = make_account("pharmacy")
    with pytest.raises(InputValidationError):
        OrderService.place_order(
            patient=patient_user,
            pharmacy_id=other.user_id,
            items=[{"medicine_id": medicine.id, "quantity": 1}],
            delivery_address="x",
        )


def test_lifecycle_decrements_stock_once(patient_user, pharmacy_user, medicine):
    order = _order(patient_user, pharmacy_user, medicine, quantity=4)

    order, inventory = _deliver(pharmacy_user, order)
    assert order.status == OrderStatus.DELIVERED
    assert order.inventory_applied_at is not None
    assert inventory.updated == [{"medicine_id": str(medicine.id), "name": "Paracetamol", "stock": 16}]
    assert inventory.warnings == []

    medicine.refresh_from_db()
    assert medicine.stock == 16

    again = OrderService.apply_inventory_decrement(order)
    assert again.skipped is True
    medicine.refresh_from_db()
    assert medicine.stock == 16

    statuses = list(
        Notification.objects.filter(recipient=patient_user, type=NotificationType.ORDER_UPDATE)
        .order_by("created_at")
        .values_list("meta__status", flat=True)
    )
    assert statuses == ["preparing", "out-for-delivery", "delivered"]


def test_stock_clamps_at_zero(patient_user, pharmacy_user, medicine):
    InventoryService.update_medicine(pharmacy=pharmacy_user, medicine_id=medicine.id, fields={"stock": 5})
    order = _order(patient_user, pharmacy_user, medicine, quantity=3)

    _deliver(pharmacy_user, order)
    medicine.refresh_from_db()
    assert medicine.stock == 2

    order.refresh_from_db()
    OrderService.apply_inventory_decrement(order, force=True)
    medicine.refresh_from_db()
    assert medicine.stock == 0

    OrderService.apply_inventory_decrement(order, force=True)
    medicine.refresh_from_db()
    assert medicine.stock == 0


def test_low_stock_signal_and_notification(patient_user, pharmacy_user, medicine):
    received = []

    def handler(sender, **kwargs):
        received.append(kwargs)

    low_stock.connect(handler, dispatch_uid="test-low-stock")
    try:
        order = _order(patient_user, pharmacy_user, medicine, quantity=15)
        _, inventory = _deliver(pharmacy_user, order)
    finally:
        low_stock.disconnect(dispatch_uid="test-low-stock")

    assert [r["stock"] for r in received] == [5]
    assert inventory.low_stock[0]["min_stock"] == 10

    note = Notification.objects.get(recipient=pharmacy_user, type=NotificationType.LOW_STOCK)
    assert "Paracetamol" in note.message
    assert note.meta["order_id"] == str(order.id)


def test_missing_medicine_warns_but_status_commits(patient_user, pharmacy_user, medicine):
    order = _order(patient_user, pharmacy_user, medicine, quantity=2)
    InventoryService.delete_medicine(pharmacy=pharmacy_user, medicine_id=medicine.id)

    order, inventory = _deliver(pharmacy_user, order)

    assert order.status == OrderStatus.DELIVERED
    assert inventory.updated == []
    assert [w.medicine_name for w in inventory.warnings] == ["Paracetamol"]
    assert not Medicine.objects.filter(id=medicine.id).exists()


def test_invalid_and_foreign_transitions(patient_user, pharmacy_user, make_account, medicine):
    order = _order(patient_user, pharmacy_user, medicine)

    with pytest.raises(InvalidTransition):
        OrderService.deliver(pharmacy=pharmacy_user, order_id=order.id)

    other = make_account("pharmacy")
    with pytest.raises(RoleNotPermitted):
        OrderService.accept(pharmacy=other.user, order_id=order.id)
    with pytest.raises(RoleNotPermitted):
        OrderService.accept(pharmacy=patient_user, order_id=order.id)

    declined, inventory = OrderService.decline(pharmacy=pharmacy_user, order_id=order.id)
    assert declined.status == OrderStatus.CANCELLED
    assert inventory is None
    with pytest.raises(InvalidTransition):
        OrderService.accept(pharmacy=pharmacy_user, order_id=order.id)
