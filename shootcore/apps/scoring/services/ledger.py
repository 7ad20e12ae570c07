# shootcore/apps/scoring/services/ledger.py
"""
Score Ledger: registro idempotente de resultados por (atleta, ronda, estación)
y correcciones con auditoría.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from shootcore.apps.core.exceptions import (
    ConflictError,
    ConsistencyError,
    NotFoundError,
    ValidationError,
)
from shootcore.apps.core.transactions import atomic_with_retry
from shootcore.apps.events.models import Discipline, Squad, SquadMember, Tournament

from ..models import Score, ScoreCorrection, Shoot

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


# ------------------------------
# Validación
# ------------------------------
def _as_count(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"'{field}' debe ser un entero.")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{field}' debe ser un entero.") from None
    if n != value and not isinstance(value, str):
        # 23.5 no es un conteo válido
        raise ValidationError(f"'{field}' debe ser un entero.")
    if n < 0:
        raise ValidationError(f"'{field}' no puede ser negativo.")
    return n


def parse_breakdown(value: Any) -> List[int]:
    """Acepta None, '5,5,4,4,5' o una lista de enteros."""
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",") if p.strip()]
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        raise ValidationError("El desglose por estación debe ser una lista o '5,5,4'.")
    return [_as_count(p, "breakdown") for p in parts]


def validate_counts(targets_thrown: Any, targets_hit: Any, breakdown: Any = None) -> Tuple[int, int, List[int]]:
    thrown = _as_count(targets_thrown, "targets_thrown")
    hit = _as_count(targets_hit, "targets_hit")
    if hit > thrown:
        raise ValidationError(f"targets_hit ({hit}) no puede superar targets_thrown ({thrown}).")
    stations = parse_breakdown(breakdown)
    if stations and sum(stations) != hit:
        raise ValidationError(f"El desglose suma {sum(stations)} pero targets_hit es {hit}.")
    return thrown, hit, stations


def _check_round(tournament: Tournament, discipline: Discipline, round_number: int) -> int:
    rounds = tournament.rounds_for(discipline)
    if rounds is None:
        raise ValidationError(f"El torneo no ofrece la disciplina '{discipline.name}'.")
    rn = _as_count(round_number, "round")
    if not (1 <= rn <= rounds):
        raise ValidationError(f"Ronda {rn} fuera de rango (1..{rounds}).")
    return rn


# ------------------------------
# Registro
# ------------------------------
@atomic_with_retry
def record_score(
    athlete,
    tournament: Tournament,
    discipline: Discipline,
    round_number: int,
    *,
    targets_thrown: Any,
    targets_hit: Any,
    station: Any = 1,
    breakdown: Any = None,
    field: str = "",
    time: str = "",
    notes: str = "",
    finalize: bool = True,
    shoot_date: Optional[date] = None,
    source_key: str = "",
) -> Tuple[Score, str]:
    """
    Upsert idempotente por (atleta, ronda, estación). Devuelve (score, estado)
    con estado ∈ {created, updated, unchanged}.

    - Mismos valores → unchanged (reimportar la misma fila converge).
    - Score en borrador → se sobreescribe.
    - Score final con otros valores → ConflictError (usar correct_score).
    """
    thrown, hit, stations = validate_counts(targets_thrown, targets_hit, breakdown)
    rn = _check_round(tournament, discipline, round_number)
    station = _as_count(station, "station")
    if station < 1:
        raise ValidationError("'station' debe ser mayor o igual a 1.")

    covered = SquadMember.objects.filter(
        athlete=athlete, tournament=tournament, discipline=discipline, round_number=rn
    ).exists()
    if not covered:
        raise ConsistencyError(
            f"{athlete} no tiene squad para {discipline.name} ronda {rn}; el score no corresponde a un tiro asignado."
        )

    shoot, _ = Shoot.objects.get_or_create(tournament=tournament, athlete=athlete, discipline=discipline)
    # serializa escritores concurrentes sobre el mismo atleta-disciplina
    shoot = Shoot.objects.select_for_update().get(pk=shoot.pk)
    if shoot_date and shoot.date != shoot_date:
        shoot.date = shoot_date
        shoot.save(update_fields=["date", "updated_at"])

    values = {
        "targets_thrown": thrown,
        "targets_hit": hit,
        "breakdown": stations,
        "field": field or "",
        "time": time or "",
        "notes": notes or "",
    }

    existing = Score.objects.select_for_update().filter(shoot=shoot, round_number=rn, station=station).first()
    if existing is None:
        score = Score.objects.create(
            shoot=shoot, round_number=rn, station=station, is_final=finalize, source_key=source_key or "", **values
        )
        logger.info("Score creado %s: atleta=%s %s R%s E%s %s/%s", score.pk, athlete.pk, discipline.name, rn, station, hit, thrown)
        return score, CREATED

    same = all(getattr(existing, k) == v for k, v in values.items())
    if same:
        if finalize and not existing.is_final:
            existing.is_final = True
            existing.save(update_fields=["is_final", "updated_at"])
            return existing, UPDATED
        return existing, UNCHANGED

    if existing.is_final:
        logger.warning("Score %s final: cambio rechazado, requiere corrección", existing.pk)
        raise ConflictError("El score ya es final; usa una corrección para cambiarlo.")

    for k, v in values.items():
        setattr(existing, k, v)
    existing.is_final = finalize
    if source_key:
        existing.source_key = source_key
    existing.save()
    logger.info("Score %s actualizado (borrador)", existing.pk)
    return existing, UPDATED


@atomic_with_retry
def correct_score(
    score_id,
    *,
    reason: str,
    targets_thrown: Any = None,
    targets_hit: Any = None,
    breakdown: Any = None,
    user=None,
) -> Score:
    """Cambia un score dejando el valor anterior en ScoreCorrection. Nunca borra historia."""
    if not (reason or "").strip():
        raise ValidationError("La corrección requiere un motivo.")
    try:
        score = Score.objects.select_for_update().get(pk=score_id)
    except (Score.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"Score {score_id} no encontrado.") from None

    new_thrown = score.targets_thrown if targets_thrown is None else targets_thrown
    new_hit = score.targets_hit if targets_hit is None else targets_hit
    new_breakdown = score.breakdown if breakdown is None else breakdown
    # si cambian los aciertos y no se manda desglose, el viejo ya no cuadra
    if breakdown is None and targets_hit is not None and score.breakdown:
        if sum(score.breakdown) != _as_count(new_hit, "targets_hit"):
            new_breakdown = []
    thrown, hit, stations = validate_counts(new_thrown, new_hit, new_breakdown)

    if (thrown, hit, stations) == (score.targets_thrown, score.targets_hit, list(score.breakdown or [])):
        raise ValidationError("La corrección no cambia ningún valor.")

    ScoreCorrection.objects.create(
        score=score,
        previous_thrown=score.targets_thrown,
        previous_hit=score.targets_hit,
        previous_breakdown=list(score.breakdown or []),
        new_thrown=thrown,
        new_hit=hit,
        new_breakdown=stations,
        reason=reason.strip(),
        corrected_by=user if getattr(user, "is_authenticated", False) else None,
    )
    score.targets_thrown = thrown
    score.targets_hit = hit
    score.breakdown = stations
    score.is_final = True
    score.save()
    logger.info("Score %s corregido: %s", score.pk, reason.strip())
    return score


@atomic_with_retry
def finalize_scores(tournament: Tournament, discipline: Discipline) -> int:
    updated = Score.objects.filter(
        shoot__tournament=tournament, shoot__discipline=discipline, is_final=False
    ).update(is_final=True)
    logger.info("finalize_scores torneo=%s %s: %s scores", tournament.pk, discipline.name, updated)
    return updated


# ------------------------------
# Lectura
# ------------------------------
def score_payload(score: Score) -> Dict[str, Any]:
    return {
        "id": score.pk,
        "athlete_id": score.shoot.athlete_id,
        "tournament_id": score.shoot.tournament_id,
        "discipline": score.shoot.discipline.name,
        "round": score.round_number,
        "station": score.station,
        "targets_thrown": score.targets_thrown,
        "targets_hit": score.targets_hit,
        "breakdown": list(score.breakdown or []),
        "is_final": score.is_final,
        "corrections": score.corrections.count(),
    }


def score_history(score: Score) -> List[Dict[str, Any]]:
    return [
        {
            "previous": {"thrown": c.previous_thrown, "hit": c.previous_hit, "breakdown": c.previous_breakdown},
            "new": {"thrown": c.new_thrown, "hit": c.new_hit, "breakdown": c.new_breakdown},
            "reason": c.reason,
            "corrected_by": c.corrected_by.username if c.corrected_by_id else None,
            "at": c.created_at.isoformat(),
        }
        for c in score.corrections.select_related("corrected_by").order_by("created_at", "id")
    ]


def squad_completion(tournament: Tournament, discipline: Discipline) -> List[Dict[str, Any]]:
    """
    Avance por squad: cuántos miembros ya tienen score final en la ronda del squad.
    Un squad está completo cuando todos sus miembros lo tienen.
    """
    rows: List[Dict[str, Any]] = []
    squads: Sequence[Squad] = Squad.objects.filter(tournament=tournament, discipline=discipline).order_by("name", "id")
    for squad in squads:
        athlete_ids = list(squad.members.values_list("athlete_id", flat=True))
        done = (
            Score.objects.filter(
                shoot__tournament=tournament,
                shoot__discipline=discipline,
                shoot__athlete_id__in=athlete_ids,
                round_number=squad.round_number,
                is_final=True,
            )
            .values("shoot__athlete_id")
            .distinct()
            .count()
        )
        rows.append(
            {
                "squad_id": squad.pk,
                "name": squad.name,
                "round": squad.round_number,
                "members": len(athlete_ids),
                "scored": done,
                "complete": bool(athlete_ids) and done == len(athlete_ids),
            }
        )
    return rows
