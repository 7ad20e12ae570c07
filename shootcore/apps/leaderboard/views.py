from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET, require_http_methods

from shootcore.apps.core.exceptions import NotFoundError
from shootcore.apps.core.http import get_or_404, json_endpoint
from shootcore.apps.core.permissions import require_capability
from shootcore.apps.events.models import Tournament
from shootcore.apps.events.services.tournaments import resolve_discipline

from .services.standings import (
    compute_leaderboard,
    get_snapshot,
    leaderboard_payload,
    normalize_group_by,
    refresh_snapshot,
)


@require_GET
@json_endpoint
def leaderboard(request: HttpRequest, tournament_id: int, discipline: str) -> JsonResponse:
    """
    Leaderboard público por disciplina.
      ?group_by=division,gender   (division | gender | classification)
      ?snapshot=1                 sirve la última foto guardada en vez de calcular
    """
    tournament = get_or_404(Tournament, pk=tournament_id)
    d = resolve_discipline(discipline)
    keys = normalize_group_by(request.GET.get("group_by"))

    if request.GET.get("snapshot") in ("1", "true", "yes"):
        snap = get_snapshot(tournament, d, keys)
        if snap is None:
            raise NotFoundError("No hay snapshot para este leaderboard; refréscalo primero.")
        return JsonResponse({
            "tournament_id": tournament.pk,
            "discipline": d.name,
            "group_by": list(keys),
            "computed_at": snap.computed_at.isoformat(),
            "groups": snap.rows,
        })

    return JsonResponse({
        "tournament_id": tournament.pk,
        "discipline": d.name,
        "group_by": list(keys),
        "computed_at": None,
        "groups": leaderboard_payload(compute_leaderboard(tournament, d, keys), keys),
    })


@require_http_methods(["POST"])
@json_endpoint
@require_capability("scores.record")
def leaderboard_refresh(request: HttpRequest, tournament_id: int, discipline: str) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    snap = refresh_snapshot(tournament, resolve_discipline(discipline), request.GET.get("group_by"))
    return JsonResponse({"group_by": snap.group_by, "computed_at": snap.computed_at.isoformat(), "groups": len(snap.rows)})
