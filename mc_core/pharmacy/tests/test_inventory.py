from decimal import Decimal

import pytest

from mc_core.common.exceptions import InputValidationError, RecordNotFound, RoleNotPermitted
from mc_core.pharmacy import selectors
from mc_core.pharmacy.services import InventoryService

pytestmark = pytest.mark.django_db


def test_create_uses_default_min_stock(pharmacy_user):
    med = InventoryService.create_medicine(pharmacy=pharmacy_user, name="Ibuprofen", price="4.10", stock=3)

    assert med.min_stock == 10
    assert med.price == Decimal("4.10")
    assert med.is_low_stock is True


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "", "price": "1.00"},
        {"name": "X"},
        {"name": "X", "price": "-1"},
        {"name": "X", "price": "1.00", "stock": -2},
        {"name": "X", "price": "abc"},
    ],
)
def test_create_validation(pharmacy_user, fields):
    with pytest.raises(InputValidationError):
        InventoryService.create_medicine(pharmacy=pharmacy_user, **fields)


def test_only_owner_edits(pharmacy_user, patient_user, make_account, medicine):
    with pytest.raises(RoleNotPermitted):
        InventoryService.update_medicine(pharmacy=patient_user, medicine_id=medicine.id, fields={"stock": 1})

    other = make_account("pharmacy")
    with pytest.raises(RecordNotFound):
        InventoryService.update_medicine(pharmacy=other.user, medicine_id=medicine.id, fields={"stock": 1})


def test_selectors(pharmacy_user, medicine):
    InventoryService.create_medicine(
        pharmacy=pharmacy_user, name="Amoxicillin", category="Antibiotics", price="7.00", stock=50,
        requires_prescription=True,
    )
    InventoryService.create_medicine(pharmacy=pharmacy_user, name="Aspirin", category="Pain Relief", price="1.00", stock=2)

    assert [m.name for m in selectors.inventory_for(pharmacy_id=pharmacy_user.id)] == [
        "Amoxicillin",
        "Aspirin",
        "Paracetamol",
    ]
    assert [m.name for m in selectors.low_stock_for(pharmacy_id=pharmacy_user.id)] == ["Aspirin"]
    assert selectors.categories_for(pharmacy_id=pharmacy_user.id) == ["Antibiotics", "Pain Relief"]

    pain = selectors.inventory_for(pharmacy_id=pharmacy_user.id, params={"category": "pain relief"})
    assert {m.name for m in pain} == {"Aspirin", "Paracetamol"}
    rx = selectors.inventory_for(pharmacy_id=pharmacy_user.id, params={"requires_prescription": "true"})
    assert [m.name for m in rx] == ["Amoxicillin"]
    search = selectors.inventory_for(pharmacy_id=pharmacy_user.id, params={"search": "para"})
    assert [m.name for m in search] == ["Paracetamol"]
