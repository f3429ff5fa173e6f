# mc_core/accounts/permissions.py

from __future__ import annotations

from typing import Iterable

from rest_framework.permissions import BasePermission

from mc_core.accounts.models import Account, AccountRole
from mc_core.common.exceptions import RoleNotPermitted


def account_of(user) -> Account | None:
    """
    Resolve the Account for a Django user (None for anonymous users or users
    created outside the registration flow, e.g. bare superusers).
    """
    if not user or not getattr(user, "is_authenticated", False):
        return None
    try:
        return user.account
    except Account.DoesNotExist:
        return None


def role_of(user) -> str | None:
    account = account_of(user)
    if account is not None:
        return account.role
    if getattr(user, "is_superuser", False):
        return AccountRole.ADMIN
    return None


def require_role(user, *roles: str) -> Account:
    """
    Service-level guard: returns the caller's Account or raises RoleNotPermitted.
    """
    account = account_of(user)
    if account is None or (roles and account.role not in roles):
        allowed = ", ".join(roles) if roles else "a registered account"
        raise RoleNotPermitted(f"This action requires {allowed}.")
    return account


def is_admin(user) -> bool:
    return role_of(user) == AccountRole.ADMIN


class RolePermission(BasePermission):
    """
    Role-based permission for ViewSets.

    Views declare `role_rules = {"<action>": {"patient", "doctor"}, ...}`.
    - Admin may call everything.
    - An action missing from role_rules falls back to role_rules["*"] when present.
    - Unknown action with no "*" rule => deny by default.

    Object-level rules (participant checks) are enforced by services.
    """

    message = "Your account type cannot perform this action."

    def _allowed_roles(self, view) -> Iterable[str] | None:
        rules = getattr(view, "role_rules", None) or {}
        action = getattr(view, "action", None)
        if action in rules:
            return rules[action]
        return rules.get("*")

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False

        role = role_of(user)
        if role is None:
            return False
        if role == AccountRole.ADMIN:
            return True

        allowed = self._allowed_roles(view)
        if allowed is None:
            return False
        return role in set(allowed)
