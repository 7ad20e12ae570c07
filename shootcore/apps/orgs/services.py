# shootcore/apps/orgs/services.py
from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from shootcore.apps.core.exceptions import ConflictError, NotFoundError, ValidationError

from .models import JoinRequest, Team, TeamCoach

logger = logging.getLogger(__name__)

INDIVIDUAL_TEAM_NAME = "Individual"


def create_team(name: str, *, affiliation: str = "", coach=None) -> Team:
    name = (name or "").strip()
    if not name:
        raise ValidationError("El nombre del equipo es obligatorio.")
    with transaction.atomic():
        if Team.objects.filter(is_individual_team=False, name__iexact=name).exists():
            raise ValidationError(f"Ya existe un equipo llamado '{name}'.")
        team = Team.objects.create(name=name, affiliation=affiliation or "")
        if coach is not None:
            TeamCoach.objects.create(team=team, user=coach)
    logger.info("Equipo creado: %s (id=%s)", team.name, team.pk)
    return team


def get_or_create_individual_team(tournament) -> Team:
    """
    Equipo "Individual" del torneo, creado a demanda.
    Idempotente: get_or_create + constraint único por torneo; llamarlo dentro
    de la transacción de la inscripción evita dos equipos para el mismo torneo.
    """
    team, created = Team.objects.get_or_create(
        is_individual_team=True,
        tournament=tournament,
        defaults={"name": INDIVIDUAL_TEAM_NAME},
    )
    if created:
        logger.info("Equipo Individual creado para el torneo %s", tournament.pk)
    return team


def join_team(athlete, team: Team):
    if team.is_individual_team:
        raise ValidationError("No se puede unir manualmente al equipo Individual.")
    with transaction.atomic():
        athlete = type(athlete).objects.select_for_update().get(pk=athlete.pk)
        if athlete.team_id == team.pk:
            raise ConflictError("El atleta ya pertenece a este equipo.")
        if athlete.team_id is not None:
            raise ConflictError("El atleta ya pertenece a otro equipo; debe salir primero.")
        athlete.team = team
        athlete.save(update_fields=["team"])
    logger.info("Atleta %s se unió al equipo %s", athlete.pk, team.pk)
    return athlete


def leave_team(athlete, team: Team):
    with transaction.atomic():
        athlete = type(athlete).objects.select_for_update().get(pk=athlete.pk)
        if athlete.team_id != team.pk:
            raise ConflictError("El atleta no pertenece a este equipo.")
        athlete.team = None
        athlete.save(update_fields=["team"])
    logger.info("Atleta %s salió del equipo %s", athlete.pk, team.pk)
    return athlete


def create_join_request(team: Team, athlete, message: str = "") -> JoinRequest:
    if team.is_individual_team:
        raise ValidationError("El equipo Individual no acepta solicitudes.")
    with transaction.atomic():
        if athlete.team_id == team.pk:
            raise ConflictError("El atleta ya pertenece a este equipo.")
        if JoinRequest.objects.filter(team=team, athlete=athlete, status="PENDING").exists():
            raise ConflictError("Ya hay una solicitud pendiente para este equipo.")
        return JoinRequest.objects.create(team=team, athlete=athlete, message=message or "")


def respond_join_request(join_request_id, *, approve: bool) -> JoinRequest:
    with transaction.atomic():
        try:
            jr = JoinRequest.objects.select_for_update().select_related("team", "athlete").get(pk=join_request_id)
        except JoinRequest.DoesNotExist:
            raise NotFoundError("Solicitud no encontrada.") from None
        if jr.status != "PENDING":
            raise ConflictError("La solicitud ya fue respondida.")
        if approve:
            join_team(jr.athlete, jr.team)
        jr.status = "APPROVED" if approve else "REJECTED"
        jr.responded_at = timezone.now()
        jr.save(update_fields=["status", "responded_at"])
    return jr
