from django.apps import AppConfig


class PharmacyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "mc_core.pharmacy"

    def ready(self):
        # Import the signals package; __init__.py will import submodules
        import mc_core.pharmacy.signals  # noqa: F401
