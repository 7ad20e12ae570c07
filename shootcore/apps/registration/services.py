# shootcore/apps/registration/services.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from shootcore.apps.core.exceptions import ConflictError, NotFoundError, ValidationError
from shootcore.apps.core.transactions import atomic_with_retry
from shootcore.apps.events.models import Discipline, SquadMember, Tournament, TournamentDiscipline
from shootcore.apps.events.services.tournaments import resolve_discipline
from shootcore.apps.orgs.services import get_or_create_individual_team

from .models import Registration

logger = logging.getLogger(__name__)


def _offered(tournament: Tournament, disciplines: Iterable[Any]) -> list[TournamentDiscipline]:
    wanted = [resolve_discipline(d) for d in (disciplines or [])]
    if not wanted:
        raise ValidationError("Debes elegir al menos una disciplina.")
    by_discipline = {
        td.discipline_id: td
        for td in TournamentDiscipline.objects.filter(tournament=tournament).select_related("discipline")
    }
    missing = [d.name for d in wanted if d.pk not in by_discipline]
    if missing:
        raise ValidationError(f"El torneo no ofrece: {', '.join(missing)}.")
    # sin duplicados, en el orden pedido
    return list({d.pk: by_discipline[d.pk] for d in wanted}.values())


@atomic_with_retry
def register(athlete, tournament: Tournament, disciplines: Iterable[Any]) -> Registration:
    if tournament.status == "completed":
        raise ValidationError("El torneo ya finalizó; no admite inscripciones.")
    offered = _offered(tournament, disciplines)

    if Registration.objects.filter(athlete=athlete, tournament=tournament).exists():
        raise ConflictError(f"{athlete} ya está inscrito en {tournament}.")

    # El equipo Individual se obtiene en la MISMA transacción que la inscripción
    team = athlete.team if athlete.team_id else get_or_create_individual_team(tournament)

    reg = Registration.objects.create(athlete=athlete, tournament=tournament, team=team)
    reg.disciplines.set(offered)
    logger.info(
        "Inscripción %s: atleta=%s torneo=%s disciplinas=%s",
        reg.pk, athlete.pk, tournament.pk, [td.discipline.name for td in offered],
    )
    return reg


@atomic_with_retry
def unregister(athlete, tournament: Tournament) -> None:
    reg = Registration.objects.select_for_update().filter(athlete=athlete, tournament=tournament).first()
    if reg is None:
        raise NotFoundError(f"{athlete} no está inscrito en {tournament}.")
    if SquadMember.objects.filter(athlete=athlete, tournament=tournament).exists():
        raise ConflictError("El atleta sigue asignado a squads de este torneo; quítalo primero.")
    reg.delete()
    logger.info("Inscripción borrada: atleta=%s torneo=%s", athlete.pk, tournament.pk)


def register_team(team, tournament: Tournament, disciplines: Iterable[Any]) -> Dict[str, int]:
    """Inscribe a todos los atletas del equipo que aún no lo estén."""
    disciplines = list(disciplines or [])
    created = skipped = 0
    for athlete in team.athletes.select_related("user", "team").order_by("id"):
        try:
            register(athlete, tournament, disciplines)
        except ConflictError:
            skipped += 1
        else:
            created += 1
    return {"created": created, "skipped": skipped}


def is_registered_for(athlete, tournament: Tournament, discipline: Discipline) -> bool:
    return Registration.objects.filter(
        athlete=athlete, tournament=tournament, disciplines__discipline=discipline
    ).exists()


def registration_payload(reg: Registration) -> Dict[str, Any]:
    return {
        "id": reg.pk,
        "athlete_id": reg.athlete_id,
        "tournament_id": reg.tournament_id,
        "team_id": reg.team_id,
        "disciplines": sorted(td.discipline.name for td in reg.disciplines.select_related("discipline")),
    }
