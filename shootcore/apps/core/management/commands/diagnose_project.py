from __future__ import annotations

import json
from typing import Any, Dict, List

from django.apps import apps
from django.core.management.base import BaseCommand
from django.db.models import Count, F
from django.urls import URLPattern, URLResolver, get_resolver


def iter_urlpatterns(resolver, prefix="") -> List[str]:
    results = []
    for p in resolver.url_patterns:
        if isinstance(p, URLPattern):
            results.append(prefix + str(p.pattern))
        elif isinstance(p, URLResolver):
            results.extend(iter_urlpatterns(p, prefix + str(p.pattern)))
    return results


def check_invariants() -> Dict[str, List[Dict[str, Any]]]:
    """
    Recorre la BD buscando violaciones de los invariantes del scheduler y el ledger.
    Devuelve {nombre_chequeo: [hallazgos]}; todo vacío = BD sana.
    """
    from shootcore.apps.events.models import Squad, SquadMember, TimeSlot
    from shootcore.apps.registration.models import Registration
    from shootcore.apps.scoring.models import Score

    findings: Dict[str, List[Dict[str, Any]]] = {}

    # 1) capacidad por TimeSlot
    findings["time_slot_over_capacity"] = [
        {"time_slot": s.pk, "occupancy": s.occ, "capacity": s.capacity}
        for s in TimeSlot.objects.annotate(occ=Count("squads__members")).filter(occ__gt=F("capacity"))
    ]

    # 2) capacidad por Squad
    findings["squad_over_capacity"] = [
        {"squad": s.pk, "members": s.n, "capacity": s.capacity}
        for s in Squad.objects.annotate(n=Count("members")).filter(n__gt=F("capacity"))
    ]

    # 3) squads colgados de un slot de otro torneo
    findings["cross_tournament_squad"] = [
        {"squad": s.pk, "tournament": s.tournament_id, "time_slot_tournament": s.time_slot.tournament_id}
        for s in Squad.objects.select_related("time_slot")
        .filter(time_slot__isnull=False)
        .exclude(time_slot__tournament=F("tournament"))
    ]

    # 4) copia desnormalizada del squad desalineada (rompería el unique de doble reserva)
    findings["member_key_mismatch"] = [
        {"member": m.pk, "squad": m.squad_id}
        for m in SquadMember.objects.exclude(
            tournament=F("squad__tournament"),
            discipline=F("squad__discipline"),
            round_number=F("squad__round_number"),
        )
    ]

    # 5) miembros sin inscripción en esa disciplina
    unregistered = []
    for m in SquadMember.objects.select_related("squad"):
        ok = Registration.objects.filter(
            athlete_id=m.athlete_id,
            tournament_id=m.tournament_id,
            disciplines__discipline_id=m.discipline_id,
        ).exists()
        if not ok:
            unregistered.append({"member": m.pk, "athlete": m.athlete_id, "squad": m.squad_id})
    findings["member_not_registered"] = unregistered

    # 6) scores finales sin squad que los cubra
    uncovered = []
    for sc in Score.objects.filter(is_final=True).select_related("shoot"):
        covered = SquadMember.objects.filter(
            athlete_id=sc.shoot.athlete_id,
            tournament_id=sc.shoot.tournament_id,
            discipline_id=sc.shoot.discipline_id,
            round_number=sc.round_number,
        ).exists()
        if not covered:
            uncovered.append({"score": sc.pk, "athlete": sc.shoot.athlete_id, "round": sc.round_number})
    findings["score_without_squad"] = uncovered

    return findings


class Command(BaseCommand):
    help = "Diagnóstico del proyecto: modelos, URLs y chequeo de invariantes (capacidad, doble reserva, torneos cruzados)."

    def add_arguments(self, parser):
        parser.add_argument("--json", action="store_true", help="Imprime salida en JSON")
        parser.add_argument("--output", type=str, default="", help="Ruta de archivo para guardar JSON")

    def handle(self, *args, **opts):
        models_info = {}
        for model in apps.get_models():
            if not model.__module__.startswith("shootcore."):
                continue
            models_info[f"{model._meta.app_label}.{model.__name__}"] = [
                f.name for f in model._meta.get_fields() if hasattr(f, "get_internal_type")
            ]

        url_list = iter_urlpatterns(get_resolver())
        invariants = check_invariants()
        problems = sum(len(v) for v in invariants.values())

        data = {
            "models": models_info,
            "urls": sorted(url_list),
            "invariants": invariants,
            "problems": problems,
        }

        if opts["json"]:
            output = json.dumps(data, indent=2, ensure_ascii=False)
            if opts["output"]:
                with open(opts["output"], "w", encoding="utf-8") as f:
                    f.write(output)
                self.stdout.write(self.style.SUCCESS(f"✓ Diagnóstico guardado en {opts['output']}"))
            else:
                self.stdout.write(output)
            return

        self.stdout.write(self.style.SUCCESS("Modelos:"))
        for k in sorted(models_info):
            self.stdout.write(f" - {k}: {models_info[k]}")
        self.stdout.write(self.style.SUCCESS("\nURLs:"))
        for u in sorted(url_list):
            self.stdout.write(f" - /{u}")
        self.stdout.write(self.style.SUCCESS("\nInvariantes:"))
        for name, hits in invariants.items():
            if hits:
                self.stdout.write(self.style.ERROR(f" ✗ {name}: {len(hits)}"))
                for h in hits[:20]:
                    self.stdout.write(f"     {h}")
            else:
                self.stdout.write(f" ✓ {name}")
        if problems:
            self.stdout.write(self.style.ERROR(f"\n{problems} problema(s) encontrados."))
        else:
            self.stdout.write(self.style.SUCCESS("\nSin violaciones."))
