from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.analytics"
    verbose_name = "Learning Analytics"

    def ready(self):
        import apps.analytics.signals  # noqa: F401
