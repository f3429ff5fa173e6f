# mc_core/common/models.py
from __future__ import annotations

import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class DocumentModel(TimeStampedModel):
    """
    Base for every stored record (appointments, orders, messages, notifications...).

    Records are addressed by an opaque UUID and mutated with merge semantics:
    services always save with update_fields, so fields they don't name are preserved.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True
