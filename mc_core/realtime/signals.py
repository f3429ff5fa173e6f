# mc_core/realtime/signals.py
from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from mc_core.realtime.registry import default_registry


@receiver(post_save, dispatch_uid="mc_realtime_post_save")
def on_saved(sender, instance, raw=False, using=None, **kwargs):
    if raw:
        return
    default_registry.schedule(sender, using=using)


@receiver(post_delete, dispatch_uid="mc_realtime_post_delete")
def on_deleted(sender, instance, using=None, **kwargs):
    default_registry.schedule(sender, using=using)
