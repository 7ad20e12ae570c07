# shootcore/apps/scoring/services/importer.py
"""
Adaptador de importación de scores por filas (JSON por HTTP o .xlsx por comando).
Cada fila es su propia transacción: una fila mala no tumba el lote.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction

from shootcore.apps.accounts.roster import find_athlete, team_display_name
from shootcore.apps.core.exceptions import ShootCoreError, ValidationError
from shootcore.apps.events.models import Tournament
from shootcore.apps.events.services.tournaments import resolve_discipline

from ..models import ImportedScore
from .ledger import parse_breakdown, record_score

logger = logging.getLogger(__name__)


def _strip_accents(s: str) -> str:
    return "".join(c for c in unicodedata.normalize("NFKD", s) if not unicodedata.combining(c))


def normalize_key(header: Any) -> str:
    """'Targets Hit' / 'targets-hit' / 'TARGETS_HIT' → 'targets_hit'."""
    s = _strip_accents(str(header or "")).strip().lower()
    s = re.sub(r"[^a-z0-9]+", "_", s)
    return s.strip("_")


# alias de cabecera → clave canónica
HEADER_ALIASES = {
    "shooter": "shooter_name",
    "name": "shooter_name",
    "athlete": "shooter_name",
    "shooter_name": "shooter_name",
    "shooter_id": "shooter_id",
    "id": "shooter_id",
    "member_id": "shooter_id",
    "team": "team_name",
    "team_name": "team_name",
    "gender": "gender",
    "division": "division",
    "event": "discipline",
    "discipline": "discipline",
    "round": "round",
    "round_number": "round",
    "station": "station",
    "targets_thrown": "targets_thrown",
    "thrown": "targets_thrown",
    "targets": "targets_thrown",
    "targets_hit": "targets_hit",
    "hit": "targets_hit",
    "hits": "targets_hit",
    "score": "targets_hit",
    "station_breakdown": "breakdown",
    "breakdown": "breakdown",
    "field": "field",
    "time": "time",
    "notes": "notes",
    "date": "date",
    "final": "final",
    "first_name": "first_name",
    "last_name": "last_name",
}


def canonical_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in row.items():
        key = HEADER_ALIASES.get(normalize_key(k))
        if key is None:
            continue
        if isinstance(v, str):
            v = v.strip()
        out[key] = v
    if not out.get("shooter_name") and (out.get("first_name") or out.get("last_name")):
        out["shooter_name"] = f"{out.get('first_name') or ''} {out.get('last_name') or ''}".strip()
    return out


def _parse_date(value) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    raise ValidationError(f"Fecha inválida: '{s}'.")


def _as_bool(value, default: bool = True) -> bool:
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y", "si", "sí", "x")


def _or_default(value, default):
    return default if value in (None, "") else value


def _source_key(tournament: Tournament, data: Dict[str, Any]) -> str:
    who = data.get("shooter_id") or normalize_key(data.get("shooter_name"))
    rn = _or_default(data.get("round"), 1)
    station = _or_default(data.get("station"), 1)
    return f"{tournament.pk}:{who}:{normalize_key(data.get('discipline'))}:{rn}:{station}"


def import_row(tournament: Tournament, data: Dict[str, Any]) -> Dict[str, Any]:
    """Importa una fila ya canonicalizada. Lanza ShootCoreError si no se puede."""
    if not data.get("shooter_id") and not data.get("shooter_name"):
        raise ValidationError("La fila no identifica al tirador (shooter_id o shooter_name).")
    if not data.get("discipline"):
        raise ValidationError("La fila no indica la disciplina.")
    for f in ("targets_thrown", "targets_hit"):
        if data.get(f) in (None, ""):
            raise ValidationError(f"Falta '{f}'.")

    athlete = find_athlete(shooter_id=data.get("shooter_id"), name=data.get("shooter_name"))
    if athlete is None:
        raise ValidationError(
            f"Tirador no encontrado: id='{data.get('shooter_id') or ''}' nombre='{data.get('shooter_name') or ''}'."
        )
    discipline = resolve_discipline(data["discipline"])
    # solo las celdas vacías toman el valor por defecto; un 0 explícito se rechaza
    round_number = _or_default(data.get("round"), 1)
    station = _or_default(data.get("station"), 1)

    with transaction.atomic():
        score, status = record_score(
            athlete,
            tournament,
            discipline,
            round_number,
            station=station,
            targets_thrown=data["targets_thrown"],
            targets_hit=data["targets_hit"],
            breakdown=data.get("breakdown"),
            field=str(data.get("field") or ""),
            time=str(data.get("time") or ""),
            notes=str(data.get("notes") or ""),
            finalize=_as_bool(data.get("final")),
            shoot_date=_parse_date(data.get("date")),
            source_key=_source_key(tournament, data),
        )
        ImportedScore.objects.update_or_create(
            tournament=tournament,
            athlete=athlete,
            discipline=discipline,
            round_number=score.round_number,
            station=score.station,
            defaults={
                "shooter_name": athlete.display_name,
                "team_name": team_display_name(athlete.team) or "",
                "gender": athlete.gender or "",
                "division": athlete.division,
                "targets_thrown": score.targets_thrown,
                "targets_hit": score.targets_hit,
                "station_breakdown": ",".join(str(n) for n in parse_breakdown(score.breakdown)),
                "field": score.field,
                "time": score.time,
                "notes": score.notes,
            },
        )
    return {"score_id": score.pk, "result": status, "athlete_id": athlete.pk}


def import_scores(tournament: Tournament, rows: Iterable[Dict[str, Any]], *, first_row: int = 1) -> Dict[str, Any]:
    """
    Importa filas de score. Devuelve
    {"total", "ok", "errors", "created", "updated", "unchanged", "rows": [...]}
    donde cada fila del reporte trae su número, estado y detalle del error.
    """
    report: List[Dict[str, Any]] = []
    counts = {"created": 0, "updated": 0, "unchanged": 0}
    ok = errs = 0

    for idx, raw in enumerate(rows, start=first_row):
        data = canonical_row(raw or {})
        try:
            result = import_row(tournament, data)
        except ShootCoreError as e:
            errs += 1
            report.append({"row": idx, "status": "ERROR", "error": e.kind, "detail": e.detail})
            logger.warning("Import torneo=%s fila %s rechazada: %s", tournament.pk, idx, e.detail)
        else:
            ok += 1
            counts[result["result"]] += 1
            report.append({"row": idx, "status": "OK", **result})

    logger.info(
        "Import torneo=%s: %s filas, %s ok, %s errores (%s)", tournament.pk, ok + errs, ok, errs, counts
    )
    return {"total": ok + errs, "ok": ok, "errors": errs, **counts, "rows": report}
