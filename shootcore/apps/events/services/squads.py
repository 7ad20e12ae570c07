# shootcore/apps/events/services/squads.py
"""
Scheduler de squads: asigna atletas inscritos a squads con cupo, y squads a
TimeSlots, sin doble reserva ni mezcla entre torneos.

Todas las operaciones que escriben:
  - corren en una transacción (``atomic_with_retry``),
  - bloquean primero el squad y después los TimeSlots, estos en orden de pk,
  - re-leen la ocupación DENTRO de esa transacción antes de escribir.
No hay caché en memoria de ocupación: la BD es la única fuente de verdad.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db.models import Count, Max
from django.utils import timezone

from shootcore.apps.accounts.roster import athlete_payload, get_athlete
from shootcore.apps.core.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ValidationError,
)
from shootcore.apps.core.transactions import atomic_with_retry
from shootcore.apps.registration.services import is_registered_for

from ..models import Discipline, Squad, SquadMember, TimeSlot, Tournament

logger = logging.getLogger(__name__)


# ------------------------------
# Utilidades
# ------------------------------
def _default_capacity() -> int:
    return int(getattr(settings, "SHOOTCORE", {}).get("DEFAULT_SQUAD_CAPACITY", 5))


def _lock_squad(squad_id) -> Squad:
    try:
        return Squad.objects.select_for_update().get(pk=squad_id)
    except (Squad.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"Squad {squad_id} no encontrado.") from None


def _lock_time_slot(time_slot_id) -> TimeSlot:
    try:
        return TimeSlot.objects.select_for_update().get(pk=time_slot_id)
    except (TimeSlot.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"TimeSlot {time_slot_id} no encontrado.") from None


def _lock_time_slots(*time_slot_ids) -> Dict[int, TimeSlot]:
    """Bloquea varios TimeSlots en orden ascendente de pk. Ignora los None."""
    wanted = sorted({pk for pk in time_slot_ids if pk is not None})
    return {s.pk: s for s in TimeSlot.objects.select_for_update().filter(pk__in=wanted).order_by("pk")}


def _slot_occupancy(slot: TimeSlot, exclude_squad: Optional[Squad] = None) -> int:
    qs = SquadMember.objects.filter(squad__time_slot=slot)
    if exclude_squad is not None:
        qs = qs.exclude(squad=exclude_squad)
    return qs.count()


def _check_round(tournament: Tournament, discipline: Discipline, round_number: int) -> None:
    rounds = tournament.rounds_for(discipline)
    if rounds is None:
        raise ValidationError(f"El torneo no ofrece la disciplina '{discipline.name}'.")
    if not (1 <= int(round_number) <= rounds):
        raise ValidationError(f"Ronda {round_number} fuera de rango (1..{rounds}) para '{discipline.name}'.")


def _check_slot_accepts(slot: TimeSlot, squad: Squad) -> None:
    if slot.tournament_id != squad.tournament_id:
        raise ConsistencyError("El TimeSlot pertenece a otro torneo; los squads no cruzan torneos.")
    if slot.discipline_id and slot.discipline_id != squad.discipline_id:
        raise ValidationError("El TimeSlot está reservado para otra disciplina.")


def time_slot_payload(slot: TimeSlot) -> Dict[str, Any]:
    return {
        "id": slot.pk,
        "tournament_id": slot.tournament_id,
        "discipline": slot.discipline.name if slot.discipline_id else None,
        "start_time": slot.start_time.isoformat(),
        "end_time": slot.end_time.isoformat() if slot.end_time else None,
        "capacity": slot.capacity,
        "occupancy": slot.occupancy(),
        "field_number": slot.field_number,
    }


def squad_payload(squad: Squad) -> Dict[str, Any]:
    """Squad con miembros, atletas y equipos resueltos."""
    members = (
        SquadMember.objects.filter(squad=squad)
        .select_related("athlete__user", "athlete__team")
        .order_by("position", "id")
    )
    slot = squad.time_slot
    return {
        "id": squad.pk,
        "name": squad.name,
        "status": squad.status,
        "tournament_id": squad.tournament_id,
        "discipline": squad.discipline.name,
        "round": squad.round_number,
        "capacity": squad.capacity,
        "team_only": squad.team_only,
        "time_slot": time_slot_payload(slot) if slot else None,
        "members": [{"position": m.position, "athlete": athlete_payload(m.athlete)} for m in members],
    }


# ------------------------------
# Alta / baja de squads
# ------------------------------
@atomic_with_retry
def create_squad(
    tournament: Tournament,
    discipline: Discipline,
    round_number: int = 1,
    *,
    name: str = "",
    capacity: Optional[int] = None,
    time_slot: Optional[TimeSlot] = None,
    team_only: bool = False,
) -> Squad:
    _check_round(tournament, discipline, round_number)
    capacity = _default_capacity() if capacity is None else int(capacity)
    if capacity <= 0:
        raise ValidationError("La capacidad del squad debe ser mayor que 0.")

    if not name:
        n = Squad.objects.filter(tournament=tournament).count() + 1
        name = f"Squad {n}"

    squad = Squad(
        tournament=tournament,
        discipline=discipline,
        round_number=int(round_number),
        name=name,
        capacity=capacity,
        team_only=team_only,
    )
    if time_slot is not None:
        slot = _lock_time_slot(time_slot.pk)
        _check_slot_accepts(slot, squad)
        squad.time_slot = slot
    squad.save()
    logger.info("Squad %s creado (torneo=%s, %s R%s)", squad.pk, tournament.pk, discipline.name, round_number)
    return squad


@atomic_with_retry
def dissolve_squad(squad_id) -> int:
    """Borra el squad y sus miembros. Inscripciones y scores quedan intactos."""
    squad = _lock_squad(squad_id)
    removed = squad.members.count()
    squad.delete()
    logger.info("Squad %s disuelto (%s miembros liberados)", squad_id, removed)
    return removed


# ------------------------------
# Mover squad de TimeSlot
# ------------------------------
@atomic_with_retry
def move_squad(squad_id, target_time_slot_id) -> Dict[str, Any]:
    """
    Reasigna el squad al TimeSlot destino.

    1. Carga squad, slot actual y slot destino (bloqueados).
    2. NotFoundError si falta alguno.
    3. ConsistencyError si el destino es de otro torneo.
    4. ConflictError si el destino se pasa de capacidad o si algún miembro ya
       está en el destino por otro squad en la misma (disciplina, ronda).
    5. Aplica todo o nada y devuelve el squad resuelto.
    """
    squad = _lock_squad(squad_id)
    try:
        target_pk = int(target_time_slot_id)
    except (ValueError, TypeError):
        raise NotFoundError(f"TimeSlot {target_time_slot_id} no encontrado.") from None
    # slot actual y destino en orden de pk: dos movimientos cruzados bloquean en el mismo orden
    slots = _lock_time_slots(squad.time_slot_id, target_pk)
    target = slots.get(target_pk)
    if target is None:
        raise NotFoundError(f"TimeSlot {target_time_slot_id} no encontrado.")

    _check_slot_accepts(target, squad)

    if squad.time_slot_id == target.pk:
        return squad_payload(squad)

    # Re-lectura de ocupación dentro de la misma transacción que escribe
    incoming = SquadMember.objects.filter(squad=squad).count()
    occupied = _slot_occupancy(target, exclude_squad=squad)
    if occupied + incoming > target.capacity:
        logger.warning(
            "move_squad rechazado: squad=%s slot=%s (%s + %s > %s)",
            squad.pk, target.pk, occupied, incoming, target.capacity,
        )
        raise ConflictError(
            f"El TimeSlot no tiene cupo: {occupied} ocupados + {incoming} del squad > capacidad {target.capacity}."
        )

    athlete_ids = list(SquadMember.objects.filter(squad=squad).values_list("athlete_id", flat=True))
    clash = (
        SquadMember.objects.filter(
            squad__time_slot=target,
            athlete_id__in=athlete_ids,
            discipline_id=squad.discipline_id,
            round_number=squad.round_number,
        )
        .exclude(squad=squad)
        .select_related("athlete__user")
        .first()
    )
    if clash is not None:
        logger.warning("move_squad rechazado: atleta %s ya está en el slot %s", clash.athlete_id, target.pk)
        raise ConflictError(f"{clash.athlete} ya tiene lugar en ese TimeSlot para la misma disciplina y ronda.")

    was_scheduled = squad.time_slot_id is not None
    squad.time_slot = target
    fields = ["time_slot"]
    if was_scheduled:
        squad.moved_at = timezone.now()
        fields.append("moved_at")
    squad.save(update_fields=fields)
    logger.info("Squad %s movido al TimeSlot %s", squad.pk, target.pk)
    return squad_payload(squad)


# ------------------------------
# Miembros
# ------------------------------
@atomic_with_retry
def assign_athlete_to_squad(athlete_id, squad_id, position: Optional[int] = None) -> SquadMember:
    squad = _lock_squad(squad_id)
    athlete = get_athlete(athlete_id)

    if not is_registered_for(athlete, squad.tournament, squad.discipline):
        raise ConsistencyError(
            f"{athlete} no está inscrito en '{squad.discipline.name}' para este torneo."
        )

    if SquadMember.objects.filter(squad=squad, athlete=athlete).exists():
        raise ConflictError(f"{athlete} ya está en este squad.")

    other = (
        SquadMember.objects.filter(
            athlete=athlete,
            tournament_id=squad.tournament_id,
            discipline_id=squad.discipline_id,
            round_number=squad.round_number,
        )
        .select_related("squad")
        .first()
    )
    if other is not None:
        raise ConflictError(
            f"{athlete} ya está en '{other.squad.name}' para {squad.discipline.name} ronda {squad.round_number}."
        )

    current = SquadMember.objects.filter(squad=squad)
    if current.count() >= squad.capacity:
        raise ConflictError("El squad está completo.")

    if squad.team_only:
        first = current.select_related("athlete").order_by("position", "id").first()
        if first is not None:
            if athlete.team_id is None:
                raise ConflictError("Squad solo de equipo: el atleta debe pertenecer a un equipo.")
            if athlete.team_id != first.athlete.team_id:
                raise ConflictError("Squad solo de equipo: el atleta es de otro equipo.")

    if squad.time_slot_id is not None:
        slot = _lock_time_slot(squad.time_slot_id)
        if _slot_occupancy(slot) + 1 > slot.capacity:
            raise ConflictError("El TimeSlot del squad ya está completo.")

    if position is None:
        position = (current.aggregate(m=Max("position"))["m"] or 0) + 1

    member = SquadMember(squad=squad, athlete=athlete, position=position)
    member.save()
    logger.info("Atleta %s asignado al squad %s (pos %s)", athlete.pk, squad.pk, position)
    return member


@atomic_with_retry
def remove_athlete_from_squad(athlete_id, squad_id) -> None:
    squad = _lock_squad(squad_id)
    deleted, _ = SquadMember.objects.filter(squad=squad, athlete_id=athlete_id).delete()
    if not deleted:
        raise NotFoundError("El atleta no está en este squad.")
    logger.info("Atleta %s removido del squad %s", athlete_id, squad.pk)


# ------------------------------
# Armado automático
# ------------------------------
def _unsquadded_entrants(tournament: Tournament, discipline: Discipline, round_number: int) -> List[Any]:
    """
    Atletas inscritos en la disciplina que aún no tienen squad para esa ronda,
    agrupados por equipo y luego por nombre (los compañeros quedan juntos).
    """
    from shootcore.apps.registration.models import Registration  # import local para evitar ciclos

    taken = SquadMember.objects.filter(
        tournament=tournament, discipline=discipline, round_number=round_number
    ).values_list("athlete_id", flat=True)
    regs = (
        Registration.objects.filter(tournament=tournament, disciplines__discipline=discipline)
        .exclude(athlete_id__in=taken)
        .select_related("athlete__user", "athlete__team", "team")
        .distinct()
    )
    athletes = [r.athlete for r in regs]
    athletes.sort(key=lambda a: ((a.team.name.lower() if a.team else "~"), a.display_name.lower(), a.pk))
    return athletes


@atomic_with_retry
def auto_assign_squads(
    tournament: Tournament,
    discipline: Discipline,
    round_number: int = 1,
    *,
    squad_capacity: Optional[int] = None,
) -> Dict[str, Any]:
    """
    - Completa primero los squads existentes de esa disciplina-ronda que tengan cupo
      (respetando también la capacidad de su TimeSlot).
    - Con el resto crea squads nuevos sin TimeSlot (unscheduled) de ``squad_capacity``.
    """
    _check_round(tournament, discipline, round_number)
    capacity = _default_capacity() if squad_capacity is None else int(squad_capacity)
    if capacity <= 0:
        raise ValidationError("La capacidad del squad debe ser mayor que 0.")

    entrants = _unsquadded_entrants(tournament, discipline, round_number)
    assignments = 0
    touched: set[int] = set()

    existing = (
        Squad.objects.filter(tournament=tournament, discipline=discipline, round_number=round_number, team_only=False)
        .annotate(n=Count("members"))
        .order_by("name", "id")
    )
    queue = list(entrants)
    for squad in existing:
        room = squad.capacity - squad.n
        if squad.time_slot_id is not None:
            slot = _lock_time_slot(squad.time_slot_id)
            room = min(room, slot.capacity - _slot_occupancy(slot))
        while room > 0 and queue:
            assign_athlete_to_squad(queue.pop(0).pk, squad.pk)
            assignments += 1
            room -= 1
            touched.add(squad.pk)

    created = 0
    while queue:
        chunk, queue = queue[:capacity], queue[capacity:]
        squad = create_squad(tournament, discipline, round_number, capacity=capacity)
        created += 1
        for athlete in chunk:
            assign_athlete_to_squad(athlete.pk, squad.pk)
            assignments += 1
        touched.add(squad.pk)

    logger.info(
        "auto_assign_squads torneo=%s %s R%s: %s asignaciones, %s squads nuevos",
        tournament.pk, discipline.name, round_number, assignments, created,
    )
    return {
        "squads_touched": len(touched),
        "squads_created": created,
        "assignments": assignments,
        "capacity_used": capacity,
    }
