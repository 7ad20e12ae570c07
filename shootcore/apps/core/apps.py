from django.apps import AppConfig
from django.db.models.signals import post_migrate


def ensure_coaches_group(sender, **kwargs):
    # Crea el grupo "coaches" si no existe (idempotente)
    from django.contrib.auth.models import Group
    Group.objects.get_or_create(name="coaches")


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "shootcore.apps.core"
    verbose_name = "Core (errores, permisos, transacciones)"

    def ready(self):
        # Conectamos el hook post_migrate una sola vez
        post_migrate.connect(ensure_coaches_group, dispatch_uid="core.ensure_coaches_group")
