# mc_core/common/conf.py
from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "MC_SESSION_IDLE_TIMEOUT_SECONDS": 30 * 60,
    "MC_DELIVERY_FEE": Decimal("2.99"),
    "MC_DEFAULT_MIN_STOCK": 10,
    "MC_UPLOAD_MAX_ATTEMPTS": 3,
    "MC_UPLOAD_BASE_DELAY_SECONDS": 1.0,
    "MC_UPLOAD_MAX_SIZE_MB": 5,
}


def mc_setting(name: str, default: Any = None) -> Any:
    """
    App-level setting lookup: Django settings first, then DEFAULTS, then `default`.
    """
    if hasattr(settings, name):
        return getattr(settings, name)
    if name in DEFAULTS:
        return DEFAULTS[name]
    return default


def delivery_fee() -> Decimal:
    return Decimal(str(mc_setting("MC_DELIVERY_FEE"))).quantize(Decimal("0.01"))
