from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_http_methods

from shootcore.apps.accounts.roster import athlete_for_user, athlete_payload, get_athlete, team_athletes, team_coaches
from shootcore.apps.core.exceptions import UnauthorizedError
from shootcore.apps.core.http import get_or_404, json_endpoint, read_json, require_fields
from shootcore.apps.core.permissions import ROLE_ATHLETE, require_capability, role_for

from .models import JoinRequest, Team
from .services import (
    create_join_request,
    create_team,
    join_team,
    leave_team,
    respond_join_request,
)


def team_payload(team: Team) -> dict:
    return {
        "id": team.pk,
        "name": team.name,
        "affiliation": team.affiliation,
        "is_individual_team": team.is_individual_team,
        "athletes": [athlete_payload(a) for a in team_athletes(team)],
        "coaches": [u.username for u in team_coaches(team)],
    }


def _target_athlete(request: HttpRequest, data: dict):
    """El propio atleta, o el indicado en athlete_id si quien pide es coach/admin."""
    if data.get("athlete_id") in (None, ""):
        return athlete_for_user(request.user)
    athlete = get_athlete(data["athlete_id"])
    if athlete.user_id != request.user.pk and role_for(request.user) == ROLE_ATHLETE:
        raise UnauthorizedError("Solo puedes operar sobre tu propio perfil.")
    return athlete


@require_http_methods(["POST"])
@json_endpoint
@require_capability("teams.manage")
def team_create(request: HttpRequest) -> JsonResponse:
    data = read_json(request)
    require_fields(data, "name")
    coach = request.user if role_for(request.user) != ROLE_ATHLETE else None
    team = create_team(data["name"], affiliation=data.get("affiliation", ""), coach=coach)
    return JsonResponse(team_payload(team), status=201)


@require_http_methods(["POST"])
@json_endpoint
@require_capability("teams.manage")
def team_join(request: HttpRequest, team_id: int) -> JsonResponse:
    team = get_or_404(Team, pk=team_id)
    athlete = join_team(_target_athlete(request, read_json(request)), team)
    return JsonResponse(athlete_payload(athlete))


@require_http_methods(["POST"])
@json_endpoint
@require_capability("teams.manage")
def team_leave(request: HttpRequest, team_id: int) -> JsonResponse:
    team = get_or_404(Team, pk=team_id)
    athlete = leave_team(_target_athlete(request, read_json(request)), team)
    return JsonResponse(athlete_payload(athlete))


@require_http_methods(["POST"])
@json_endpoint
@require_capability("teams.manage")
def team_join_request(request: HttpRequest, team_id: int) -> JsonResponse:
    team = get_or_404(Team, pk=team_id)
    data = read_json(request)
    jr = create_join_request(team, athlete_for_user(request.user), data.get("message", ""))
    return JsonResponse({"id": jr.pk, "team_id": team.pk, "status": jr.status}, status=201)


@require_http_methods(["POST"])
@json_endpoint
@require_capability("teams.manage")
def join_request_respond(request: HttpRequest, request_id: int) -> JsonResponse:
    jr = get_or_404(JoinRequest, pk=request_id)
    if role_for(request.user) == ROLE_ATHLETE:
        raise UnauthorizedError("Solo coaches o admins responden solicitudes.")
    data = read_json(request)
    require_fields(data, "approve")
    jr = respond_join_request(jr.pk, approve=bool(data["approve"]))
    return JsonResponse({"id": jr.pk, "status": jr.status})
