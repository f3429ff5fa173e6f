# mc_core/accounts/errors.py
from __future__ import annotations

from mc_core.common.exceptions import DomainError

# Identity error code -> user-facing message.
AUTH_ERROR_MESSAGES = {
    "email-already-in-use": "This email is already registered. Please use a different email or log in.",
    "invalid-email": "Invalid email address format.",
    "weak-password": "Password is too weak. Please choose a stronger password.",
    "user-disabled": "This account has been disabled. Please contact support.",
    "user-not-found": "No account found with this email. Please check your email or register.",
    "wrong-password": "Incorrect password. Please try again.",
    "too-many-requests": "Too many unsuccessful login attempts. Please try again later or reset your password.",
    "network-request-failed": "Network error. Please check your internet connection and try again.",
    "session-expired": "Your session expired due to inactivity. Please log in again.",
}

PASSWORD_RESET_MESSAGES = {
    "invalid-email": "Invalid email address.",
    "user-not-found": "No account found with this email.",
}

DEFAULT_AUTH_MESSAGE = "Authentication failed. Please try again."
DEFAULT_RESET_MESSAGE = "Failed to send password reset email. Please try again."

# HTTP status per code; anything unlisted is a 400.
AUTH_ERROR_STATUS = {
    "user-not-found": 401,
    "wrong-password": 401,
    "user-disabled": 403,
    "too-many-requests": 429,
    "network-request-failed": 503,
    "session-expired": 401,
}


def auth_message(code: str, *, password_reset: bool = False) -> str:
    if password_reset:
        return PASSWORD_RESET_MESSAGES.get(code, DEFAULT_RESET_MESSAGE)
    return AUTH_ERROR_MESSAGES.get(code, DEFAULT_AUTH_MESSAGE)


class AuthError(DomainError):
    """
    Identity failure classified by a stable code. Never retried automatically.
    """
    code = "auth_error"

    def __init__(self, auth_code: str, *, password_reset: bool = False):
        self.auth_code = auth_code
        self.status_code = AUTH_ERROR_STATUS.get(auth_code, 400)
        super().__init__(auth_message(auth_code, password_reset=password_reset), details={"auth_code": auth_code})
