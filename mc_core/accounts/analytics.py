# mc_core/accounts/analytics.py
from __future__ import annotations

from django.apps import apps

from mc_core.accounts.models import Account, AccountRole


def analytics_snapshot() -> dict[str, int]:
    """
    Platform counters for the admin dashboard. Admin accounts are not counted as users.
    """
    accounts = Account.objects.exclude(role=AccountRole.ADMIN)
    doctors = accounts.filter(role=AccountRole.DOCTOR)

    # Resolved through the app registry: accounts sits below appointments/pharmacy.
    Order = apps.get_model("pharmacy", "Order")
    Appointment = apps.get_model("appointments", "Appointment")

    return {
        "total_users": accounts.count(),
        "patients": accounts.filter(role=AccountRole.PATIENT).count(),
        "doctors": doctors.count(),
        "pharmacies": accounts.filter(role=AccountRole.PHARMACY).count(),
        "approved_doctors": doctors.filter(verified=True).count(),
        "pending_doctors": doctors.filter(verified=False).count(),
        "total_orders": Order.objects.count(),
        "total_appointments": Appointment.objects.count(),
    }
