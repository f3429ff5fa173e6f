# mc_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from mc_core.accounts.api.views import (
    AccountAdminViewSet,
    DoctorDirectoryViewSet,
    LoginView,
    LogoutView,
    MeLicenseDocumentView,
    MePhotoView,
    MeView,
    PasswordResetView,
    RefreshView,
    RegisterView,
    RouteCheckView,
    SessionBootstrapView,
)
from mc_core.appointments.api.views import AppointmentViewSet
from mc_core.messaging.api.views import ContactsView, ConversationReadView, ConversationView
from mc_core.notifications.api.views import NotificationViewSet
from mc_core.pharmacy.api.views import MedicineViewSet, OrderViewSet, PharmacyViewSet

router = DefaultRouter()

router.register(r"doctors", DoctorDirectoryViewSet, basename="doctors")
router.register(r"admin/accounts", AccountAdminViewSet, basename="admin-accounts")
router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"medicines", MedicineViewSet, basename="medicines")
router.register(r"pharmacies", PharmacyViewSet, basename="pharmacies")
router.register(r"orders", OrderViewSet, basename="orders")
router.register(r"notifications", NotificationViewSet, basename="notifications")

urlpatterns = [
    # Auth + /me + session
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/password-reset/", PasswordResetView.as_view(), name="password-reset"),
    path("me/", MeView.as_view(), name="me"),
    path("me/photo/", MePhotoView.as_view(), name="me-photo"),
    path("me/license-document/", MeLicenseDocumentView.as_view(), name="me-license-document"),
    path("session/bootstrap/", SessionBootstrapView.as_view(), name="session-bootstrap"),
    path("session/route-check/", RouteCheckView.as_view(), name="session-route-check"),

    # Messaging (addressed by the other participant's user id)
    path("messages/contacts/", ContactsView.as_view(), name="message-contacts"),
    path("messages/<int:user_id>/", ConversationView.as_view(), name="message-conversation"),
    path("messages/<int:user_id>/read/", ConversationReadView.as_view(), name="message-read"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
