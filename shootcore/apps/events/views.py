from __future__ import annotations

from datetime import time

from django.http import HttpRequest, JsonResponse
from django.utils.dateparse import parse_time
from django.views.decorators.http import require_GET, require_http_methods

from shootcore.apps.core.exceptions import ValidationError
from shootcore.apps.core.http import (
    as_date,
    as_datetime,
    as_int,
    get_or_404,
    json_endpoint,
    read_json,
    require_fields,
)
from shootcore.apps.core.permissions import require_capability

from .models import Squad, TimeSlot, Tournament
from .services.schedule import create_time_slot, delete_time_slot, generate_time_slots
from .services.squads import (
    assign_athlete_to_squad,
    auto_assign_squads,
    create_squad,
    dissolve_squad,
    move_squad,
    remove_athlete_from_squad,
    squad_payload,
    time_slot_payload,
)
from .services.tournaments import create_tournament, resolve_discipline


def health(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"ok": True})


def tournament_payload(t: Tournament) -> dict:
    return {
        "id": t.pk,
        "name": t.name,
        "slug": t.slug,
        "location": t.location,
        "start_date": t.start_date.isoformat(),
        "end_date": t.end_date.isoformat(),
        "status": t.status,
        "disciplines": [
            {"name": td.discipline.name, "display_name": td.discipline.display_name, "rounds": td.rounds}
            for td in t.tournament_disciplines.select_related("discipline").order_by("discipline__name")
        ],
    }


def _as_time(value, field: str) -> time:
    try:
        t = parse_time(str(value)) if value else None
    except ValueError:
        t = None
    if t is None:
        raise ValidationError(f"'{field}' debe ser una hora HH:MM.")
    return t


# ---------- Torneos ----------

@require_http_methods(["GET", "POST"])
@json_endpoint
def tournaments(request: HttpRequest) -> JsonResponse:
    if request.method == "GET":
        return JsonResponse({"tournaments": [tournament_payload(t) for t in Tournament.objects.all()]})
    return _tournament_create(request)


@require_capability("tournaments.create")
def _tournament_create(request: HttpRequest) -> JsonResponse:
    data = read_json(request)
    require_fields(data, "name", "start_date", "end_date", "disciplines")
    t = create_tournament(
        data["name"],
        start_date=as_date(data["start_date"], "start_date"),
        end_date=as_date(data["end_date"], "end_date"),
        disciplines=data["disciplines"],
        location=data.get("location", ""),
        created_by=request.user,
    )
    return JsonResponse(tournament_payload(t), status=201)


@require_GET
@json_endpoint
def tournament_detail(request: HttpRequest, tournament_id: int) -> JsonResponse:
    return JsonResponse(tournament_payload(get_or_404(Tournament, pk=tournament_id)))


# ---------- TimeSlots ----------

@require_http_methods(["GET", "POST"])
@json_endpoint
def tournament_timeslots(request: HttpRequest, tournament_id: int) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    if request.method == "GET":
        slots = TimeSlot.objects.filter(tournament=tournament).select_related("discipline")
        return JsonResponse({"time_slots": [time_slot_payload(s) for s in slots]})
    return _timeslot_create(request, tournament)


@require_capability("schedule.manage")
def _timeslot_create(request: HttpRequest, tournament: Tournament) -> JsonResponse:
    """
    Un slot:      {"start_time", "capacity", "end_time"?, "discipline"?, "field_number"?}
    Generación:   {"day", "start", "end", "duration_minutes", "capacity", "discipline"?}
    """
    data = read_json(request)
    discipline = resolve_discipline(data["discipline"]) if data.get("discipline") else None

    if "duration_minutes" in data:
        require_fields(data, "day", "start", "end", "duration_minutes", "capacity")
        slots = generate_time_slots(
            tournament,
            as_date(data["day"], "day"),
            _as_time(data["start"], "start"),
            _as_time(data["end"], "end"),
            as_int(data["duration_minutes"], "duration_minutes"),
            as_int(data["capacity"], "capacity"),
            discipline=discipline,
            field_number=data.get("field_number", ""),
        )
        return JsonResponse({"time_slots": [time_slot_payload(s) for s in slots]}, status=201)

    require_fields(data, "start_time", "capacity")
    slot = create_time_slot(
        tournament,
        as_datetime(data["start_time"], "start_time"),
        as_int(data["capacity"], "capacity"),
        end_time=as_datetime(data["end_time"], "end_time") if data.get("end_time") else None,
        discipline=discipline,
        field_number=data.get("field_number", ""),
        notes=data.get("notes", ""),
    )
    return JsonResponse(time_slot_payload(slot), status=201)


@require_http_methods(["DELETE"])
@json_endpoint
@require_capability("schedule.manage")
def timeslot_delete(request: HttpRequest, time_slot_id: int) -> JsonResponse:
    delete_time_slot(time_slot_id)
    return JsonResponse({"ok": True})


# ---------- Squads ----------

@require_http_methods(["GET", "POST"])
@json_endpoint
def tournament_squads(request: HttpRequest, tournament_id: int) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    if request.method == "GET":
        squads = Squad.objects.filter(tournament=tournament).select_related("discipline", "time_slot")
        return JsonResponse({"squads": [squad_payload(s) for s in squads]})
    return _squad_create(request, tournament)


@require_capability("squads.manage")
def _squad_create(request: HttpRequest, tournament: Tournament) -> JsonResponse:
    data = read_json(request)
    require_fields(data, "discipline")
    slot = get_or_404(TimeSlot, pk=data["time_slot_id"]) if data.get("time_slot_id") else None
    squad = create_squad(
        tournament,
        resolve_discipline(data["discipline"]),
        as_int(data.get("round", 1), "round"),
        name=data.get("name", ""),
        capacity=as_int(data["capacity"], "capacity") if data.get("capacity") is not None else None,
        time_slot=slot,
        team_only=bool(data.get("team_only", False)),
    )
    return JsonResponse(squad_payload(squad), status=201)


@require_http_methods(["POST"])
@json_endpoint
@require_capability("squads.manage")
def squads_auto_assign(request: HttpRequest, tournament_id: int) -> JsonResponse:
    tournament = get_or_404(Tournament, pk=tournament_id)
    data = read_json(request)
    require_fields(data, "discipline")
    result = auto_assign_squads(
        tournament,
        resolve_discipline(data["discipline"]),
        as_int(data.get("round", 1), "round"),
        squad_capacity=as_int(data["capacity"], "capacity") if data.get("capacity") is not None else None,
    )
    return JsonResponse(result)


@require_http_methods(["GET", "DELETE"])
@json_endpoint
def squad_detail(request: HttpRequest, squad_id: int) -> JsonResponse:
    squad = get_or_404(Squad, pk=squad_id)
    if request.method == "GET":
        return JsonResponse(squad_payload(squad))
    return _squad_dissolve(request, squad)


@require_capability("squads.manage")
def _squad_dissolve(request: HttpRequest, squad: Squad) -> JsonResponse:
    removed = dissolve_squad(squad.pk)
    return JsonResponse({"ok": True, "members_released": removed})


@require_http_methods(["PUT"])
@json_endpoint
@require_capability("squads.manage")
def squad_move(request: HttpRequest, squad_id: int) -> JsonResponse:
    data = read_json(request)
    require_fields(data, "time_slot_id")
    return JsonResponse(move_squad(squad_id, data["time_slot_id"]))


@require_http_methods(["POST", "DELETE"])
@json_endpoint
@require_capability("squads.manage")
def squad_members(request: HttpRequest, squad_id: int) -> JsonResponse:
    data = read_json(request)
    require_fields(data, "athlete_id")
    if request.method == "DELETE":
        remove_athlete_from_squad(data["athlete_id"], squad_id)
        return JsonResponse(squad_payload(get_or_404(Squad, pk=squad_id)))
    position = as_int(data["position"], "position") if data.get("position") is not None else None
    member = assign_athlete_to_squad(data["athlete_id"], squad_id, position)
    return JsonResponse(squad_payload(member.squad), status=201)
