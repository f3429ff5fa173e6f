# mc_core/common/lookups.py
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db.models import Model, QuerySet

from mc_core.common.exceptions import RecordNotFound


def get_record(source, *, message: str = "Record not found.", **lookup):
    """
    `Model.objects.get(**lookup)` that raises RecordNotFound for both a missing row and
    a malformed id (UUIDField rejects non-UUID strings with ValidationError).
    """
    qs: QuerySet = source._default_manager.all() if isinstance(source, type) and issubclass(source, Model) else source
    try:
        return qs.get(**lookup)
    except (qs.model.DoesNotExist, ValidationError, ValueError):
        raise RecordNotFound(message)
