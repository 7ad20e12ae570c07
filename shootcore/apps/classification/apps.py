from django.apps import AppConfig


class ClassificationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "shootcore.apps.classification"
    verbose_name = "Clasificación"
