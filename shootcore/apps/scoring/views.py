from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_http_methods

from shootcore.apps.accounts.roster import get_athlete
from shootcore.apps.core.exceptions import ValidationError
from shootcore.apps.core.http import as_int, get_or_404, json_endpoint, read_json, require_fields
from shootcore.apps.core.permissions import require_capability
from shootcore.apps.events.models import Tournament
from shootcore.apps.events.services.tournaments import resolve_discipline

from .models import Score
from .services.importer import import_scores
from .services.ledger import (
    correct_score,
    finalize_scores,
    record_score,
    score_history,
    score_payload,
    squad_completion,
)


@require_http_methods(["POST"])
@json_endpoint
@require_capability("scores.record")
def tournament_scores(request: HttpRequest, tournament_id: int) -> JsonResponse:
    """
    {"athlete_id", "discipline", "round", "station"?, "targets_thrown", "targets_hit",
     "breakdown"?, "field"?, "time"?, "notes"?, "final"?}
    """
    tournament = get_or_404(Tournament, pk=tournament_id)
    data = read_json(request)
    require_fields(data, "athlete_id", "discipline", "round", "targets_thrown", "targets_hit")
    score, status = record_score(
        get_athlete(data["athlete_id"]),
        tournament,
        resolve_discipline(data["discipline"]),
        data["round"],
        station=data.get("station", 1),
        targets_thrown=data["targets_thrown"],
        targets_hit=data["targets_hit"],
        breakdown=data.get("breakdown"),
        field=data.get("field", ""),
        time=data.get("time", ""),
        notes=data.get("notes", ""),
        finalize=bool(data.get("final", True)),
    )
    return JsonResponse({**score_payload(score), "result": status}, status=201 if status == "created" else 200)


@require_http_methods(["POST"])
@json_endpoint
@require_capability("scores.import")
def tournament_import_scores(request: HttpRequest, tournament_id: int) -> JsonResponse:
    """{"rows": [{...}, ...]}; cada fila se reporta por separado."""
    tournament = get_or_404(Tournament, pk=tournament_id)
    data = read_json(request)
    rows = data.get("rows")
    if not isinstance(rows, list) or not rows:
        raise ValidationError("'rows' debe ser una lista no vacía.")
    if not all(isinstance(r, dict) for r in rows):
        raise ValidationError("Cada fila debe ser un objeto JSON.")
    return JsonResponse(import_scores(tournament, rows))


@require_http_methods(["POST"])
@json_endpoint
@require_capability("scores.correct")
def score_correct(request: HttpRequest, score_id: int) -> JsonResponse:
    data = read_json(request)
    require_fields(data, "reason")
    score = correct_score(
        score_id,
        reason=data["reason"],
        targets_thrown=data.get("targets_thrown"),
        targets_hit=data.get("targets_hit"),
        breakdown=data.get("breakdown"),
        user=request.user,
    )
    return JsonResponse({**score_payload(score), "history": score_history(score)})


@require_GET
@json_endpoint
def score_detail(request: HttpRequest, score_id: int) -> JsonResponse:
    score = get_or_404(Score, pk=score_id)
    return JsonResponse({**score_payload(score), "history": score_history(score)})


@require_http_methods(["POST"])
@json_endpoint
@require_capability("scores.record")
def scores_finalize(request: HttpRequest, tournament_id: int, discipline: str) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    return JsonResponse({"finalized": finalize_scores(tournament, resolve_discipline(discipline))})


@require_GET
@json_endpoint
def completion(request: HttpRequest, tournament_id: int, discipline: str) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    rows = squad_completion(tournament, resolve_discipline(discipline))
    if request.GET.get("round"):
        rn = as_int(request.GET["round"], "round")
        rows = [r for r in rows if r["round"] == rn]
    return JsonResponse({"squads": rows})
