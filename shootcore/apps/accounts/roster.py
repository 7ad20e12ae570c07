# shootcore/apps/accounts/roster.py
"""
Roster Directory: vista de solo lectura de atletas, equipos y staff.
Lo consumen el scheduler, el ledger y el leaderboard; no escribe nada.
"""
from __future__ import annotations

from typing import Any, Dict, List

from django.db.models import Q

from shootcore.apps.core.exceptions import NotFoundError

from .models import Athlete


def get_athlete(athlete_id) -> Athlete:
    try:
        return Athlete.objects.select_related("user", "team").get(pk=athlete_id)
    except (Athlete.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"Atleta {athlete_id} no existe.") from None


def athlete_for_user(user) -> Athlete:
    """Perfil de atleta del usuario logueado."""
    try:
        return Athlete.objects.select_related("user", "team").get(user=user)
    except Athlete.DoesNotExist:
        raise NotFoundError("Tu usuario no tiene perfil de atleta.") from None


def find_athlete(*, shooter_id: str | None = None, name: str | None = None) -> Athlete | None:
    """
    Resuelve un atleta para importaciones:
    - primero por shooter_id exacto,
    - luego por nombre visible (sin distinguir mayúsculas), solo si es único.
    """
    if shooter_id:
        a = Athlete.objects.select_related("user", "team").filter(shooter_id=str(shooter_id).strip()).first()
        if a:
            return a
    if name:
        target = " ".join(name.split()).lower()
        candidates = Athlete.objects.select_related("user", "team").filter(_name_filter(target))
        matches = [a for a in candidates if a.display_name.lower() == target]
        if len(matches) == 1:
            return matches[0]
    return None


def _name_filter(target: str) -> Q:
    """
    Candidatos cuyo nombre visible puede ser ``target``: cada corte posible entre
    nombre y apellido ("Mary Ann Smith" → "Mary"/"Ann Smith", "Mary Ann"/"Smith"),
    solo nombre, solo apellido, o sin nombre propio (se muestra el del usuario).
    """
    words = target.split(" ")
    q = Q(first_name__iexact=target, last_name="") | Q(first_name="", last_name__iexact=target)
    for i in range(1, len(words)):
        q |= Q(first_name__iexact=" ".join(words[:i]), last_name__iexact=" ".join(words[i:]))
    q |= Q(first_name="", last_name="")
    return q


def team_display_name(team) -> str | None:
    if team is None:
        return None
    return "Individual" if team.is_individual_team else team.name


def athlete_payload(athlete: Athlete) -> Dict[str, Any]:
    return {
        "id": athlete.pk,
        "name": athlete.display_name,
        "shooter_id": athlete.shooter_id,
        "gender": athlete.gender,
        "division": athlete.division,
        "team": (
            {"id": athlete.team_id, "name": team_display_name(athlete.team)}
            if athlete.team_id else None
        ),
        "classes": {
            "NSCA": athlete.nsca_class or None,
            "ATA": athlete.ata_class or None,
            "NSSA": athlete.nssa_class or None,
        },
    }


def team_athletes(team) -> List[Athlete]:
    return list(Athlete.objects.filter(team=team).select_related("user"))


def team_coaches(team) -> List[Any]:
    return [tc.user for tc in team.coaches.select_related("user").order_by("user__username")]
