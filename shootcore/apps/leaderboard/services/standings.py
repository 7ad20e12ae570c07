# shootcore/apps/leaderboard/services/standings.py
"""
Leaderboard Aggregator.

Suma los scores finales de cada atleta en (torneo, disciplina), calcula
hit_ratio = hits / thrown y ordena por grupo:

  1) hit_ratio descendente (comparación racional exacta, sin floats),
  2) hits totales descendente,
  3) nombre visible ascendente sin distinguir mayúsculas,
  4) id del atleta (orden total, determinista).

Ranking "de competencia" (1, 1, 3): comparten puesto solo quienes empatan
exactamente en ratio y hits; el nombre ordena la lista pero no el puesto.
Los atletas con thrown = 0 no tienen ratio y van al final del grupo.
"""
from __future__ import annotations

import logging
from fractions import Fraction
from itertools import groupby
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from django.db.models import Sum

from shootcore.apps.accounts.models import Athlete
from shootcore.apps.accounts.roster import team_display_name
from shootcore.apps.core.exceptions import ValidationError
from shootcore.apps.core.transactions import atomic_with_retry
from shootcore.apps.events.models import Discipline, Tournament
from shootcore.apps.scoring.models import Score

from ..models import LeaderboardSnapshot

logger = logging.getLogger(__name__)

GROUP_KEYS = ("division", "gender", "classification")
DEFAULT_GROUP_BY = ("division", "gender")


class LeaderboardRow(NamedTuple):
    group: Tuple[str, ...]
    rank: int
    athlete_id: int
    name: str
    team: Optional[str]
    total_hit: int
    total_thrown: int
    hit_ratio: Optional[Fraction]

    def as_dict(self, group_by: Sequence[str]) -> Dict[str, Any]:
        return {
            "group": dict(zip(group_by, self.group)),
            "rank": self.rank,
            "athlete_id": self.athlete_id,
            "name": self.name,
            "team": self.team,
            "total_hit": self.total_hit,
            "total_thrown": self.total_thrown,
            "hit_ratio": None if self.hit_ratio is None else round(float(self.hit_ratio), 4),
        }


def normalize_group_by(group_by: Sequence[str] | str | None) -> Tuple[str, ...]:
    if group_by is None:
        return DEFAULT_GROUP_BY
    if isinstance(group_by, str):
        group_by = [g for g in (p.strip() for p in group_by.split(",")) if g]
    keys = tuple(group_by)
    unknown = [k for k in keys if k not in GROUP_KEYS]
    if unknown:
        raise ValidationError(f"Agrupación no soportada: {', '.join(unknown)}. Usa {', '.join(GROUP_KEYS)}.")
    if len(set(keys)) != len(keys):
        raise ValidationError("Claves de agrupación repetidas.")
    return keys


def _group_value(athlete: Athlete, key: str, discipline: Discipline) -> str:
    if key == "division":
        return athlete.division
    if key == "gender":
        return athlete.gender or ""
    # classification: la clase del organismo que rige la disciplina
    if not discipline.governing_body:
        return ""
    return athlete.class_for(discipline.governing_body) or ""


def _sort_key(entry: Dict[str, Any]) -> Tuple:
    ratio = entry["ratio"]
    return (
        ratio is None,
        -ratio if ratio is not None else 0,
        -entry["hit"],
        entry["name"].casefold(),
        entry["athlete"].pk,
    )


def compute_leaderboard(
    tournament: Tournament,
    discipline: Discipline,
    group_by: Sequence[str] | str | None = DEFAULT_GROUP_BY,
) -> Iterator[LeaderboardRow]:
    """
    Genera LeaderboardRow grupo por grupo (grupos en orden de clave).
    Solo cuentan scores finales; un atleta sin ninguno no aparece.
    """
    keys = normalize_group_by(group_by)

    totals = (
        Score.objects.filter(shoot__tournament=tournament, shoot__discipline=discipline, is_final=True)
        .values("shoot__athlete_id")
        .annotate(hit=Sum("targets_hit"), thrown=Sum("targets_thrown"))
    )
    by_athlete = {t["shoot__athlete_id"]: t for t in totals}
    if not by_athlete:
        return

    athletes = Athlete.objects.filter(pk__in=by_athlete).select_related("user", "team")
    entries: List[Dict[str, Any]] = []
    for a in athletes:
        t = by_athlete[a.pk]
        hit, thrown = int(t["hit"] or 0), int(t["thrown"] or 0)
        entries.append(
            {
                "athlete": a,
                "name": a.display_name,
                "group": tuple(_group_value(a, k, discipline) for k in keys),
                "hit": hit,
                "thrown": thrown,
                "ratio": Fraction(hit, thrown) if thrown else None,
            }
        )

    entries.sort(key=lambda e: (e["group"], *_sort_key(e)))
    for group, members in groupby(entries, key=lambda e: e["group"]):
        rank = 0
        prev: Optional[Tuple[Optional[Fraction], int]] = None
        for position, e in enumerate(members, start=1):
            current = (e["ratio"], e["hit"])
            if current != prev:
                rank = position
                prev = current
            yield LeaderboardRow(
                group=group,
                rank=rank,
                athlete_id=e["athlete"].pk,
                name=e["name"],
                team=team_display_name(e["athlete"].team),
                total_hit=e["hit"],
                total_thrown=e["thrown"],
                hit_ratio=e["ratio"],
            )


def leaderboard_payload(rows: Iterator[LeaderboardRow], group_by: Sequence[str]) -> List[Dict[str, Any]]:
    """Agrupa filas consecutivas en [{"group": {...}, "rows": [...]}, ...]."""
    out: List[Dict[str, Any]] = []
    for group, members in groupby(rows, key=lambda r: r.group):
        out.append({"group": dict(zip(group_by, group)), "rows": [r.as_dict(group_by) for r in members]})
    return out


@atomic_with_retry
def refresh_snapshot(
    tournament: Tournament,
    discipline: Discipline,
    group_by: Sequence[str] | str | None = DEFAULT_GROUP_BY,
) -> LeaderboardSnapshot:
    keys = normalize_group_by(group_by)
    rows = leaderboard_payload(compute_leaderboard(tournament, discipline, keys), keys)
    snapshot, _ = LeaderboardSnapshot.objects.update_or_create(
        tournament=tournament,
        discipline=discipline,
        group_by=",".join(keys),
        defaults={"rows": rows},
    )
    logger.info(
        "Snapshot leaderboard torneo=%s %s [%s]: %s grupos", tournament.pk, discipline.name, snapshot.group_by, len(rows)
    )
    return snapshot


def get_snapshot(tournament: Tournament, discipline: Discipline, group_by: Sequence[str] | str | None = DEFAULT_GROUP_BY):
    keys = normalize_group_by(group_by)
    return LeaderboardSnapshot.objects.filter(
        tournament=tournament, discipline=discipline, group_by=",".join(keys)
    ).first()
