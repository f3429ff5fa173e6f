from django.apps import AppConfig


class RealtimeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "mc_core.realtime"

    def ready(self) -> None:
        # import here so app loading doesn’t break tooling
        from mc_core.realtime import signals  # noqa: F401
