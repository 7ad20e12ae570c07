from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from shootcore.apps.accounts.models import CLASS_FIELDS
from shootcore.apps.core.exceptions import ShootCoreError
from shootcore.apps.classification.services import classify_all


class Command(BaseCommand):
    help = "Calcula (y opcionalmente guarda) la clase A–E de cada atleta según la política de cada organismo."

    def add_arguments(self, parser):
        parser.add_argument("--body", action="append", choices=sorted(CLASS_FIELDS),
                            help="Organismo a procesar (repetible). Por defecto: todos.")
        parser.add_argument("--apply", action="store_true", help="Guarda las clases en los atletas")

    def handle(self, *args, **opts):
        bodies = opts.get("body") or list(CLASS_FIELDS)
        for body in bodies:
            try:
                counts = classify_all(body, apply=opts["apply"])
            except ShootCoreError as e:
                raise CommandError(f"{body}: {e.detail}") from e
            summary = "  ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "sin historial"
            self.stdout.write(self.style.SUCCESS(f"{body}: {summary}"))
        if not opts["apply"]:
            self.stdout.write(self.style.WARNING("Solo cálculo: usa --apply para guardar."))
