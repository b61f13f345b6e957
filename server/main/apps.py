from __future__ import annotations
from django.apps import AppConfig


class MainConfig(AppConfig):
    name = "main"
    verbose_name = "School LMS"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        # Import signal handlers
        from main import signals  # noqa: F401
