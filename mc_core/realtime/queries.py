# mc_core/realtime/queries.py
from __future__ import annotations

from django.db.models import F

from mc_core.accounts.models import Account, AccountRole
from mc_core.appointments.models import Appointment
from mc_core.messaging.models import Message
from mc_core.notifications.models import Notification
from mc_core.pharmacy.models import Medicine, Order
from mc_core.realtime.registry import LiveQuery


def appointments_for_patient(user_id) -> LiveQuery:
    return LiveQuery(Appointment, filters={"patient_id": user_id}, order_by=("date", "time_24"),
                     label="appointments:patient")


def appointments_for_doctor(user_id, *, status: str | None = None) -> LiveQuery:
    filters = {"doctor_id": user_id}
    if status:
        filters["status"] = status
    return LiveQuery(Appointment, filters=filters, order_by=("date", "time_24"), label="appointments:doctor")


def orders_for_pharmacy(user_id) -> LiveQuery:
    return LiveQuery(Order, filters={"pharmacy_id": user_id}, order_by=("-created_at",), label="orders:pharmacy")


def orders_for_patient(user_id) -> LiveQuery:
    return LiveQuery(Order, filters={"patient_id": user_id}, order_by=("-created_at",), label="orders:patient")


def conversation_messages(conversation_id: str) -> LiveQuery:
    return LiveQuery(Message, filters={"conversation_id": conversation_id}, order_by=("sent_at",),
                     label="messages:conversation")


def verified_doctors() -> LiveQuery:
    return LiveQuery(
        Account,
        filters={"role": AccountRole.DOCTOR, "verified": True},
        order_by=("display_name",),
        label="accounts:verified-doctors",
    )


def pending_doctors() -> LiveQuery:
    return LiveQuery(
        Account,
        filters={"role": AccountRole.DOCTOR, "verified": False},
        order_by=("created_at",),
        label="accounts:pending-doctors",
    )


def notifications_for(user_id, *, unread_only: bool = False) -> LiveQuery:
    filters = {"recipient_id": user_id}
    if unread_only:
        filters["read"] = False
    return LiveQuery(Notification, filters=filters, order_by=("-created_at",), label="notifications")


def medicines_for_pharmacy(user_id) -> LiveQuery:
    return LiveQuery(Medicine, filters={"pharmacy_id": user_id}, order_by=("name",), label="medicines")


def low_stock_for_pharmacy(user_id) -> LiveQuery:
    return LiveQuery(
        Medicine,
        filters={"pharmacy_id": user_id, "stock__lte": F("min_stock")},
        order_by=("stock", "name"),
        label="medicines:low-stock",
    )
