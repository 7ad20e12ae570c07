from __future__ import annotations

from django.http import HttpRequest, JsonResponse
from django.views.decorators.http import require_GET

from shootcore.apps.core.exceptions import UnauthorizedError
from shootcore.apps.core.http import json_endpoint

from .roster import athlete_for_user, athlete_payload, get_athlete


@require_GET
@json_endpoint
def me(request: HttpRequest) -> JsonResponse:
    if not request.user.is_authenticated:
        raise UnauthorizedError("Debes iniciar sesión.")
    return JsonResponse(athlete_payload(athlete_for_user(request.user)))


@require_GET
@json_endpoint
def athlete_detail(request: HttpRequest, athlete_id: int) -> JsonResponse:
    return JsonResponse(athlete_payload(get_athlete(athlete_id)))
