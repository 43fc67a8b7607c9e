from django.apps import AppConfig


class LearningPathsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.learning_paths"
    verbose_name = "Learning Paths"
