# mc_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.conf import settings
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from mc_core.common.exceptions import (
    ConflictingTransition,
    DomainError,
    InputValidationError,
    InvalidTransition,
    RecordNotFound,
    RoleNotPermitted,
    TransientStorageError,
)

logger = logging.getLogger(__name__)


DOMAIN_STATUS = {
    InvalidTransition: status.HTTP_409_CONFLICT,
    ConflictingTransition: status.HTTP_409_CONFLICT,
    RoleNotPermitted: status.HTTP_403_FORBIDDEN,
    RecordNotFound: status.HTTP_404_NOT_FOUND,
    InputValidationError: status.HTTP_400_BAD_REQUEST,
    TransientStorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope for MediConnect.
    Reusable from Django middleware (JsonResponse) and DRF (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


def _clear_auth_cookies(response: Response) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    for name in (jwt_cfg.get("AUTH_COOKIE", "mc_access"), jwt_cfg.get("AUTH_COOKIE_REFRESH", "mc_refresh")):
        response.delete_cookie(name, path="/")


def _status_for_domain(exc: DomainError) -> int:
    explicit = getattr(exc, "status_code", None)
    if explicit:
        return int(explicit)
    for cls in type(exc).__mro__:
        if cls in DOMAIN_STATUS:
            return DOMAIN_STATUS[cls]
    return status.HTTP_400_BAD_REQUEST


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    if isinstance(exc, DomainError):
        return Response(
            build_error_envelope(
                request=request,
                code=exc.code,
                message=exc.message,
                details=exc.details,
            ),
            status=_status_for_domain(exc),
        )

    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)
    data = response.data

    # {"detail": "..."} -> message=detail; any other keys become details.
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None

    out = Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
    if getattr(exc, "clear_auth_cookies", False):
        _clear_auth_cookies(out)
    return out
