# shootcore/apps/events/services/tournaments.py
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, Union

from django.db import transaction

from shootcore.apps.core.exceptions import ConflictError, ValidationError

from ..models import Discipline, Squad, Tournament, TournamentDiscipline

logger = logging.getLogger(__name__)

# disciplina → rondas; también acepta una lista (1 ronda cada una)
DisciplineSpec = Union[Dict[Union[Discipline, int, str], int], Iterable[Union[Discipline, int, str]]]


def resolve_discipline(value) -> Discipline:
    """Acepta instancia, pk o nombre (slug) de la disciplina."""
    if isinstance(value, Discipline):
        return value
    qs = Discipline.objects.all()
    d = None
    if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
        d = qs.filter(pk=int(value)).first()
    if d is None and isinstance(value, str):
        raw = value.strip()
        d = (
            qs.filter(name=raw.lower().replace(" ", "_").replace("-", "_")).first()
            or qs.filter(display_name__iexact=raw).first()
        )
    if d is None:
        raise ValidationError(f"Disciplina '{value}' no existe.")
    return d


def _normalize_disciplines(disciplines: DisciplineSpec) -> Dict[Discipline, int]:
    items = disciplines.items() if isinstance(disciplines, dict) else ((d, 1) for d in disciplines or [])
    out: Dict[Discipline, int] = {}
    for raw, rounds in items:
        try:
            rounds = int(rounds)
        except (TypeError, ValueError):
            raise ValidationError("La cantidad de rondas debe ser un entero.") from None
        if rounds < 1:
            raise ValidationError("Cada disciplina debe tener al menos una ronda.")
        out[resolve_discipline(raw)] = rounds
    return out


def create_tournament(
    name: str,
    *,
    start_date: date,
    end_date: date,
    disciplines: DisciplineSpec,
    location: str = "",
    created_by=None,
) -> Tournament:
    name = (name or "").strip()
    if not name:
        raise ValidationError("El nombre del torneo es obligatorio.")
    if not start_date or not end_date:
        raise ValidationError("Fechas de inicio y fin obligatorias.")
    if end_date < start_date:
        raise ValidationError("end_date no puede ser anterior a start_date")
    offered = _normalize_disciplines(disciplines)
    if not offered:
        raise ValidationError("El torneo debe ofrecer al menos una disciplina.")

    with transaction.atomic():
        t = Tournament.objects.create(
            name=name,
            location=location or "",
            start_date=start_date,
            end_date=end_date,
            created_by=created_by,
        )
        TournamentDiscipline.objects.bulk_create(
            [TournamentDiscipline(tournament=t, discipline=d, rounds=r) for d, r in offered.items()]
        )
    logger.info("Torneo creado: %s (%s disciplinas)", t.slug, len(offered))
    return t


def update_tournament_dates(tournament: Tournament, *, start_date: date, end_date: date) -> Tournament:
    """El rango de fechas queda fijo apenas existe algún squad."""
    if end_date < start_date:
        raise ValidationError("end_date no puede ser anterior a start_date")
    with transaction.atomic():
        t = Tournament.objects.select_for_update().get(pk=tournament.pk)
        if (t.start_date, t.end_date) == (start_date, end_date):
            return t
        if Squad.objects.filter(tournament=t).exists():
            raise ConflictError("No se pueden cambiar las fechas: el torneo ya tiene squads.")
        t.start_date = start_date
        t.end_date = end_date
        t.save(update_fields=["start_date", "end_date"])
    return t


def set_status(tournament: Tournament, status: str) -> Tournament:
    valid = {k for k, _ in Tournament.STATUS_CHOICES}
    if status not in valid:
        raise ValidationError(f"Estado inválido: {status}")
    tournament.status = status
    tournament.save(update_fields=["status"])
    return tournament
