"""Constructores mínimos para los tests de todas las apps."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from itertools import count

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils import timezone

from shootcore.apps.accounts.models import Athlete
from shootcore.apps.core.permissions import COACHES_GROUP
from shootcore.apps.events.models import Discipline, Tournament, TournamentDiscipline

User = get_user_model()
_seq = count(1)

START = date(2025, 6, 14)


def discipline(name: str = "skeet") -> Discipline:
    defaults = {
        "skeet": ("Skeet", "NSSA"),
        "trap": ("Trap", "ATA"),
        "sporting_clays": ("Sporting Clays", "NSCA"),
    }.get(name, (name.title(), ""))
    d, _ = Discipline.objects.get_or_create(
        name=name, defaults={"display_name": defaults[0], "governing_body": defaults[1]}
    )
    return d


def user(username: str | None = None, *, staff: bool = False, coach: bool = False, password: str = "Pass1234!"):
    username = username or f"user{next(_seq)}"
    u = User.objects.create_user(username=username, email=f"{username}@example.com", password=password)
    if staff:
        u.is_staff = True
        u.save(update_fields=["is_staff"])
    if coach:
        group, _ = Group.objects.get_or_create(name=COACHES_GROUP)
        u.groups.add(group)
    return u


def athlete(first: str = "", last: str = "", *, gender: str = "M", grade: str = "10", team=None, **extra) -> Athlete:
    n = next(_seq)
    return Athlete.objects.create(
        user=user(f"ath{n}"),
        first_name=first or f"Athlete{n}",
        last_name=last or "Test",
        gender=gender,
        grade=grade,
        team=team,
        **extra,
    )


def tournament(name: str = "", *, start: date = START, days: int = 2, disciplines=None) -> Tournament:
    t = Tournament.objects.create(
        name=name or f"Open {next(_seq)}",
        start_date=start,
        end_date=start + timedelta(days=days - 1),
    )
    for d, rounds in (disciplines or {discipline(): 2}).items():
        TournamentDiscipline.objects.create(tournament=t, discipline=d, rounds=rounds)
    return t


def at(t: Tournament, hour: int = 9, minute: int = 0, day_offset: int = 0) -> datetime:
    d = t.start_date + timedelta(days=day_offset)
    return timezone.make_aware(datetime(d.year, d.month, d.day, hour, minute))
