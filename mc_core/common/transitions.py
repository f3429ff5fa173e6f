# mc_core/common/transitions.py
from __future__ import annotations

from django.db.models import Model
from django.db.models.signals import post_save
from django.utils import timezone

from mc_core.common.exceptions import ConflictingTransition


def conditional_update(instance: Model, *, entity: str, expected_status: str, **changes) -> Model:
    """
    Compare-and-set write: UPDATE ... WHERE id = <pk> AND status = <expected_status>.

    Zero rows updated means another writer moved the record first; ConflictingTransition
    carries the status found. On success the instance is refreshed and post_save is sent
    (QuerySet.update skips model signals, live subscriptions depend on them).
    """
    model = type(instance)
    changes.setdefault("updated_at", timezone.now())

    updated = model._default_manager.filter(pk=instance.pk, status=expected_status).update(**changes)
    if updated == 0:
        actual = model._default_manager.filter(pk=instance.pk).values_list("status", flat=True).first()
        raise ConflictingTransition(entity=entity, expected_status=expected_status, actual_status=actual)

    instance.refresh_from_db()
    post_save.send(
        sender=model,
        instance=instance,
        created=False,
        update_fields=frozenset(changes),
        raw=False,
        using=instance._state.db,
    )
    return instance
