from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_http_methods

from shootcore.apps.accounts.roster import athlete_for_user, get_athlete
from shootcore.apps.core.exceptions import UnauthorizedError
from shootcore.apps.core.http import get_or_404, json_endpoint, read_json, require_fields
from shootcore.apps.core.permissions import ROLE_ATHLETE, require_capability, role_for
from shootcore.apps.events.models import Tournament
from shootcore.apps.orgs.models import Team

from .models import Registration
from .services import register, register_team, registration_payload, unregister


def _athlete_from(request: HttpRequest, data: dict):
    if data.get("athlete_id") in (None, ""):
        return athlete_for_user(request.user)
    athlete = get_athlete(data["athlete_id"])
    if athlete.user_id != request.user.pk and role_for(request.user) == ROLE_ATHLETE:
        raise UnauthorizedError("Solo puedes inscribirte a ti mismo.")
    return athlete


@require_http_methods(["GET", "POST", "DELETE"])
@json_endpoint
@require_capability("registrations.manage")
def tournament_registrations(request: HttpRequest, tournament_id: int) -> JsonResponse:
    """
    GET    → inscripciones del torneo.
    POST   → {"disciplines": [...], "athlete_id"?: id}
    DELETE → {"athlete_id"?: id}
    """
    tournament = get_or_404(Tournament, pk=tournament_id)

    if request.method == "GET":
        regs = Registration.objects.filter(tournament=tournament).order_by("id")
        return JsonResponse({"registrations": [registration_payload(r) for r in regs]})

    data = read_json(request)
    if request.method == "DELETE":
        unregister(_athlete_from(request, data), tournament)
        return JsonResponse({"ok": True})

    require_fields(data, "disciplines")
    reg = register(_athlete_from(request, data), tournament, data["disciplines"])
    return JsonResponse(registration_payload(reg), status=201)


@require_http_methods(["POST"])
@json_endpoint
@require_capability("squads.manage")
def team_registrations(request: HttpRequest, tournament_id: int) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    data = read_json(request)
    require_fields(data, "team_id", "disciplines")
    team = get_or_404(Team, pk=data["team_id"])
    return JsonResponse(register_team(team, tournament, data["disciplines"]))
