# mc_core/conftest.py
from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from mc_core.accounts.models import AccountRole
from mc_core.accounts.services import AccountService
from mc_core.realtime.registry import default_registry

PASSWORD = "Secret#123"


@pytest.fixture(autouse=True)
def _isolate_process_state():
    """
    Live subscriptions and the idle-session cache are process-wide; reset them per test.
    """
    yield
    default_registry.clear()
    cache.clear()


@pytest.fixture
def make_account(db):
    counter = {"n": 0}

    def _make(role: str, *, name: str | None = None, verified: bool | None = None, profile: dict | None = None):
        counter["n"] += 1
        n = counter["n"]
        return AccountService.register(
            email=f"{role}{n}@example.com",
            password=PASSWORD,
            role=role,
            display_name=name or f"{role.title()} {n}",
            profile=profile,
            verified=verified,
            allow_admin=(role == AccountRole.ADMIN),
        )

    return _make


@pytest.fixture
def patient_account(make_account):
    return make_account(AccountRole.PATIENT, name="Pat Patient")


@pytest.fixture
def doctor_account(make_account):
    return make_account(
        AccountRole.DOCTOR,
        name="Dana Doctor",
        verified=True,
        profile={"specialization": "Cardiology", "license_number": "LIC-1", "years_of_experience": 7},
    )


@pytest.fixture
def pharmacy_account(make_account):
    return make_account(AccountRole.PHARMACY, name="Corner Pharmacy", profile={"pharmacy_name": "Corner Pharmacy"})


@pytest.fixture
def admin_account(make_account):
    return make_account(AccountRole.ADMIN, name="Ada Admin")


@pytest.fixture
def patient_user(patient_account):
    return patient_account.user


@pytest.fixture
def doctor_user(doctor_account):
    return doctor_account.user


@pytest.fixture
def pharmacy_user(pharmacy_account):
    return pharmacy_account.user


@pytest.fixture
def admin_user(admin_account):
    return admin_account.user


@pytest.fixture
def api_client_for():
    def _client(user=None):
        c = APIClient()
        if user is not None:
            c.force_authenticate(user=user)
        return c

    return _client


@pytest.fixture
def medicine(pharmacy_user):
    from mc_core.pharmacy.services import InventoryService

    return InventoryService.create_medicine(
        pharmacy=pharmacy_user,
        name="Paracetamol",
        category="Pain Relief",
        price=Decimal("2.50"),
        stock=20,
        min_stock=10,
    )


class SnapshotRecorder:
    """
    Collects live-query deliveries and errors in arrival order.
    """

    def __init__(self):
        self.snapshots: list = []
        self.errors: list = []

    def __call__(self, snapshot):
        self.snapshots.append(snapshot)

    def on_error(self, exc):
        self.errors.append(exc)

    @property
    def last(self):
        return self.snapshots[-1] if self.snapshots else None


@pytest.fixture
def recorder():
    return SnapshotRecorder()
