# mc_core/common/validation.py
from __future__ import annotations

import re
from typing import Iterable

from mc_core.common.exceptions import InputValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[+]?[1-9][\d]{0,15}$")
SPECIAL_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def validate_email(email: str) -> str:
    value = (email or "").strip()
    if not EMAIL_RE.match(value):
        raise InputValidationError("Invalid email address format.", details={"field": "email"})
    return value.lower()


def validate_password(password: str, confirm: str | None = None) -> str:
    """
    Password policy: 8+ chars with upper, lower, digit and special character.
    """
    pw = password or ""
    problems = [
        (len(pw) < 8, "Password must be at least 8 characters"),
        (not re.search(r"[A-Z]", pw), "Password must contain at least one uppercase letter"),
        (not re.search(r"[a-z]", pw), "Password must contain at least one lowercase letter"),
        (not re.search(r"[0-9]", pw), "Password must contain at least one number"),
        (not SPECIAL_RE.search(pw), "Password must contain at least one special character"),
    ]
    for failed, message in problems:
        if failed:
            raise InputValidationError(message, details={"field": "password"})

    if confirm is not None and confirm != pw:
        raise InputValidationError("Passwords do not match", details={"field": "confirm_password"})
    return pw


def validate_phone(phone: str) -> str:
    value = re.sub(r"\s", "", phone or "")
    if not PHONE_RE.match(value):
        raise InputValidationError("Invalid phone number.", details={"field": "phone"})
    return value


def validate_file_size(size: int, max_size_mb: float) -> None:
    if size > max_size_mb * 1024 * 1024:
        raise InputValidationError(
            f"File is too large. Maximum size is {max_size_mb} MB.",
            details={"field": "file", "size": size},
        )


def validate_file_type(content_type: str | None, allowed: Iterable[str]) -> None:
    allowed = list(allowed)
    if content_type not in allowed:
        raise InputValidationError(
            "Unsupported file type.",
            details={"field": "file", "content_type": content_type, "allowed": allowed},
        )


def sanitize_input(value: str) -> str:
    return (value or "").strip().replace("<", "").replace(">", "")


def require(value, field: str, message: str | None = None):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InputValidationError(message or f"{field} is required.", details={"field": field})
    return value
