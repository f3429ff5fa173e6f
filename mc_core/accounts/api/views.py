# mc_core/accounts/api/views.py

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import RefreshToken

from mc_core.accounts.analytics import analytics_snapshot
from mc_core.accounts.auth import CookieOrHeaderJWTAuthentication, SessionExpired
from mc_core.accounts.api.serializers import (
    AccountSerializer,
    AdminCreateAccountSerializer,
    DetailResponseSerializer,
    FileUploadSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
    PasswordResetRequestSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    RouteCheckResponseSerializer,
)
from mc_core.accounts.errors import AuthError
from mc_core.accounts.models import Account
from mc_core.accounts.permissions import RolePermission, account_of, role_of
from mc_core.accounts.routing import dashboard_root, resolve_route
from mc_core.accounts.selectors import list_accounts, pending_doctors, verified_doctors
from mc_core.accounts.services import AccountService, IdentityService
from mc_core.accounts.session import SessionActivityTracker
from mc_core.common.api.pagination import paginated_response
from mc_core.common.lookups import get_record


def _seconds(value: Any) -> int:
    """
    Convert a JWT lifetime setting into seconds.
    Supports timedelta OR int/float (already seconds).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        # 0 means "session cookie"
        return 0


def _cookie_names() -> tuple[str, str]:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    return jwt_cfg.get("AUTH_COOKIE", "mc_access"), jwt_cfg.get("AUTH_COOKIE_REFRESH", "mc_refresh")


def set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    access_name, refresh_name = _cookie_names()

    common = {
        "httponly": True,
        "secure": bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False)),
        "samesite": jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }
    response.set_cookie(
        access_name,
        access,
        max_age=_seconds(jwt_cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=10))),
        **common,
    )
    response.set_cookie(
        refresh_name,
        refresh,
        max_age=_seconds(jwt_cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
        **common,
    )


def clear_auth_cookies(response: Response) -> None:
    for name in _cookie_names():
        response.delete_cookie(name, path="/")


def _account_payload(user) -> dict:
    account = account_of(user)
    role = role_of(user)
    return {
        "account": AccountSerializer(account).data if account else None,
        "dashboard": dashboard_root(role) if role else None,
    }


# -------------------------
# Auth
# -------------------------
class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "login"

    def throttled(self, request, wait):
        raise AuthError("too-many-requests")

    @extend_schema(request=LoginRequestSerializer, responses={200: LoginResponseSerializer}, tags=["Auth"])
    def post(self, request):
        ser = LoginRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        user = IdentityService.authenticate(
            email=ser.validated_data["email"],
            password=ser.validated_data["password"],
        )
        refresh = RefreshToken.for_user(user)

        # Fresh login opens a new idle window.
        SessionActivityTracker().start(user.pk)

        res = Response({"detail": "login ok", **_account_payload(user)}, status=status.HTTP_200_OK)
        set_auth_cookies(res, access=str(refresh.access_token), refresh=str(refresh))
        return res


class RefreshView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    def get_authenticate_header(self, request):
        # Keeps SessionExpired a 401 even though this view authenticates nothing.
        return CookieOrHeaderJWTAuthentication().authenticate_header(request)

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        _, refresh_cookie_name = _cookie_names()
        refresh = request.COOKIES.get(refresh_cookie_name) or request.data.get("refresh")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        # An idled-out or logged-out session cannot be revived with its refresh token.
        user_id = RefreshToken(refresh)[jwt_settings.USER_ID_CLAIM]
        tracker = SessionActivityTracker()
        if tracker.is_expired(user_id):
            tracker.end(user_id)
            raise SessionExpired()

        access = serializer.validated_data["access"]
        new_refresh = serializer.validated_data.get("refresh", refresh)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        set_auth_cookies(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        SessionActivityTracker().end(request.user.pk)
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        clear_auth_cookies(res)
        return res


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(request=RegisterSerializer, responses={201: AccountSerializer}, tags=["Auth"])
    def post(self, request):
        ser = RegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        account = AccountService.register(**ser.validated_data)
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class PasswordResetView(APIView):
    permission_classes = [AllowAny]
    authentication_classes: list = []

    @extend_schema(request=PasswordResetRequestSerializer, responses={200: DetailResponseSerializer}, tags=["Auth"])
    def post(self, request):
        ser = PasswordResetRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        IdentityService.request_password_reset(
            email=ser.validated_data["email"],
            domain=request.get_host(),
            use_https=request.is_secure(),
        )
        return Response({"detail": "Password reset email sent."}, status=status.HTTP_200_OK)


# -------------------------
# Own account + session
# -------------------------
class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: AccountSerializer}, tags=["Accounts"])
    def get(self, request):
        account = account_of(request.user)
        if account is None:
            return Response({"detail": "No account profile."}, status=status.HTTP_404_NOT_FOUND)
        return Response(AccountSerializer(account).data)

    @extend_schema(request=ProfileUpdateSerializer, responses={200: AccountSerializer}, tags=["Accounts"])
    def patch(self, request):
        ser = ProfileUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        fields = {**data.pop("profile", {}), **data}
        # Role/verified are rejected by the service, not silently dropped.
        for guarded in ("role", "verified"):
            if guarded in request.data:
                fields[guarded] = request.data[guarded]
        account = AccountService.update_profile(actor=request.user, fields=fields)
        return Response(AccountSerializer(account).data)

    @extend_schema(request=None, responses={204: None}, tags=["Accounts"])
    def delete(self, request):
        account = account_of(request.user)
        if account is None:
            return Response({"detail": "No account profile."}, status=status.HTTP_404_NOT_FOUND)
        AccountService.delete_account(actor=request.user, account_id=account.id)
        res = Response(status=status.HTTP_204_NO_CONTENT)
        clear_auth_cookies(res)
        return res


class MePhotoView(APIView):
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=FileUploadSerializer, responses={200: AccountSerializer}, tags=["Accounts"])
    def post(self, request):
        ser = FileUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        account = AccountService.upload_photo(actor=request.user, upload=ser.validated_data["file"])
        return Response(AccountSerializer(account).data)


class MeLicenseDocumentView(APIView):
    """
    Doctors and pharmacies attach their license (image or PDF) for admin review.
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(request=FileUploadSerializer, responses={200: AccountSerializer}, tags=["Accounts"])
    def post(self, request):
        ser = FileUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        account = AccountService.upload_license_document(actor=request.user, upload=ser.validated_data["file"])
        return Response(AccountSerializer(account).data)


class SessionBootstrapView(APIView):
    """
    Client bootstrap: who am I, which dashboard do I belong to, and the idle policy.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Session"])
    def get(self, request):
        tracker = SessionActivityTracker()
        user = request.user
        return Response(
            {
                "user": {
                    "id": user.id,
                    "email": getattr(user, "email", None),
                    "is_superuser": bool(getattr(user, "is_superuser", False)),
                },
                "role": role_of(user),
                **_account_payload(user),
                "idle_timeout_seconds": tracker.timeout,
                "server_time": timezone.now(),
                "api_version": "0.1.0",
            }
        )


class RouteCheckView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        responses={200: RouteCheckResponseSerializer},
        tags=["Session"],
        parameters=[OpenApiParameter(name="path", location=OpenApiParameter.QUERY, required=True, type=str)],
    )
    def get(self, request):
        path = request.query_params.get("path", "/")
        redirect_to = resolve_route(account_of(request.user), path)
        return Response({"path": path, "allowed": redirect_to is None, "redirect_to": redirect_to})


# -------------------------
# Directory + admin
# -------------------------
class DoctorDirectoryViewSet(viewsets.ViewSet):
    """
    Patients browse verified doctors only.
    """
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer
    queryset = Account.objects.none()

    def list(self, request):
        qs = verified_doctors(specialization=request.query_params.get("specialization"))
        return paginated_response(request, qs, AccountSerializer, view=self)

    def retrieve(self, request, pk=None):
        doctor = get_record(verified_doctors(), message="Doctor not found.", id=pk)
        return Response(AccountSerializer(doctor).data)


class AccountAdminViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, RolePermission]
    role_rules: dict = {}  # admin only
    serializer_class = AccountSerializer
    queryset = Account.objects.none()

    @extend_schema(
        tags=["Admin"],
        parameters=[
            OpenApiParameter(name="role", location=OpenApiParameter.QUERY, required=False, type=str),
            OpenApiParameter(name="verified", location=OpenApiParameter.QUERY, required=False, type=bool),
        ],
    )
    def list(self, request):
        verified_q = request.query_params.get("verified")
        verified = None if verified_q is None else verified_q.lower() == "true"
        qs = list_accounts(role=request.query_params.get("role"), verified=verified)
        return paginated_response(request, qs, AccountSerializer, view=self)

    def retrieve(self, request, pk=None):
        account = get_record(list_accounts(exclude_admin=False), message="Account not found.", id=pk)
        return Response(AccountSerializer(account).data)

    @extend_schema(request=AdminCreateAccountSerializer, responses={201: AccountSerializer}, tags=["Admin"])
    def create(self, request):
        ser = AdminCreateAccountSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        account = AccountService.create_by_admin(actor=request.user, allow_admin=True, **ser.validated_data)
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        AccountService.delete_account(actor=request.user, account_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(methods=["GET"], detail=False, url_path="pending-doctors")
    def pending(self, request):
        return paginated_response(request, pending_doctors(), AccountSerializer, view=self)

    @action(methods=["POST"], detail=True)
    def approve(self, request, pk=None):
        account = AccountService.approve_doctor(actor=request.user, doctor_account_id=pk)
        return Response(AccountSerializer(account).data)

    @action(methods=["POST"], detail=True)
    def reject(self, request, pk=None):
        account = AccountService.reject_doctor(actor=request.user, doctor_account_id=pk)
        return Response(AccountSerializer(account).data)

    @action(methods=["GET"], detail=False)
    def analytics(self, request):
        return Response(analytics_snapshot())
