# mc_core/accounts/routing.py
from __future__ import annotations

from mc_core.accounts.models import Account, AccountRole

LOGIN_PATH = "/login"
HOME_PATH = "/"

PUBLIC_PATHS = {"/", "/login", "/register", "/forgot-password", "/privacy", "/terms"}


def dashboard_root(role: str) -> str:
    return f"/dashboard/{role}"


def resolve_route(account: Account | None, path: str) -> str | None:
    """
    Route gate for the client.

    Returns None when `account` may open `path`, otherwise the path to redirect to:
    - unauthenticated -> /login
    - unknown role -> /
    - another role's dashboard or registration page -> own dashboard
    """
    path = "/" + (path or "").strip("/")
    if path in PUBLIC_PATHS:
        return None

    parts = [p for p in path.split("/") if p]
    protected = bool(parts) and parts[0] in ("dashboard", "register")
    if not protected:
        return None

    if account is None:
        if parts[0] == "register":
            return None
        return LOGIN_PATH

    role = account.role
    if role not in AccountRole.values:
        return HOME_PATH

    if len(parts) > 1 and parts[1] != role:
        return dashboard_root(role)
    if parts[0] == "register":
        return dashboard_root(role)
    return None
