# shootcore/apps/events/services/schedule.py
"""
TimeSlots del torneo: alta, generación por ventana y baja.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from shootcore.apps.core.exceptions import ConflictError, NotFoundError, ValidationError

from ..models import Discipline, Squad, TimeSlot, Tournament

logger = logging.getLogger(__name__)


def _combine(d: date, t: time) -> datetime:
    return timezone.make_aware(datetime(d.year, d.month, d.day, t.hour, t.minute, t.second))


def _local_date(dt: datetime) -> date:
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return timezone.localtime(dt).date()


def _check_in_range(tournament: Tournament, start_time: datetime) -> None:
    day = _local_date(start_time)
    if not (tournament.start_date <= day <= tournament.end_date):
        raise ValidationError(
            f"El horario {day.isoformat()} está fuera del rango del torneo "
            f"({tournament.start_date.isoformat()} – {tournament.end_date.isoformat()})."
        )


def create_time_slot(
    tournament: Tournament,
    start_time: datetime,
    capacity: int,
    *,
    end_time: Optional[datetime] = None,
    discipline: Optional[Discipline] = None,
    field_number: str = "",
    notes: str = "",
) -> TimeSlot:
    if capacity is None or int(capacity) <= 0:
        raise ValidationError("La capacidad del TimeSlot debe ser mayor que 0.")
    if start_time is None:
        raise ValidationError("start_time es obligatorio.")
    if timezone.is_naive(start_time):
        start_time = timezone.make_aware(start_time)
    _check_in_range(tournament, start_time)
    if end_time is not None:
        if timezone.is_naive(end_time):
            end_time = timezone.make_aware(end_time)
        if end_time <= start_time:
            raise ValidationError("end_time debe ser posterior a start_time.")
    if discipline is not None and tournament.rounds_for(discipline) is None:
        raise ValidationError(f"El torneo no ofrece la disciplina '{discipline.name}'.")

    slot = TimeSlot.objects.create(
        tournament=tournament,
        discipline=discipline,
        start_time=start_time,
        end_time=end_time,
        capacity=int(capacity),
        field_number=field_number or "",
        notes=notes or "",
    )
    logger.info("TimeSlot %s creado en torneo %s (cap=%s)", slot.pk, tournament.pk, slot.capacity)
    return slot


def generate_time_slots(
    tournament: Tournament,
    day: date,
    start: time,
    end: time,
    duration_minutes: int,
    capacity: int,
    *,
    discipline: Optional[Discipline] = None,
    field_number: str = "",
) -> List[TimeSlot]:
    """
    Crea slots contiguos de ``duration_minutes`` entre ``start`` y ``end``.
    Solo se crean los que caben completos en la ventana.
    """
    if duration_minutes <= 0:
        raise ValidationError("La duración del slot debe ser mayor que 0.")
    if end <= start:
        raise ValidationError("La hora de fin debe ser posterior a la de inicio.")

    current = _combine(day, start)
    end_of_window = _combine(day, end)
    step = timedelta(minutes=duration_minutes)

    created: List[TimeSlot] = []
    with transaction.atomic():
        while current + step <= end_of_window:
            created.append(
                create_time_slot(
                    tournament,
                    current,
                    capacity,
                    end_time=current + step,
                    discipline=discipline,
                    field_number=field_number,
                )
            )
            current = current + step
    return created


@transaction.atomic
def delete_time_slot(time_slot_id) -> None:
    try:
        slot = TimeSlot.objects.select_for_update().get(pk=time_slot_id)
    except (TimeSlot.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("TimeSlot no encontrado.") from None
    if Squad.objects.filter(time_slot=slot).exists():
        logger.warning("Borrado de TimeSlot %s rechazado: tiene squads", slot.pk)
        raise ConflictError("No se puede borrar un TimeSlot con squads. Mueve o disuelve los squads primero.")
    slot.delete()
    logger.info("TimeSlot %s borrado", time_slot_id)
