from django.apps import AppConfig


class AccountsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "mc_core.accounts"

    def ready(self) -> None:
        # import here so app loading doesn’t break tooling
        from mc_core.accounts import openapi  # noqa: F401
