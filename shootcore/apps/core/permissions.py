# shootcore/apps/core/permissions.py
"""
Capa única de capacidades.

En lugar de repetir ``if user.role != ...`` en cada vista, cada operación
declara la capacidad que necesita y ``require_capability`` la verifica antes
de tocar el Scheduler o el Ledger.
"""
from __future__ import annotations

import functools
from typing import Callable

from django.http import HttpRequest

from .exceptions import UnauthorizedError

ROLE_ATHLETE = "athlete"
ROLE_COACH = "coach"
ROLE_ADMIN = "admin"

COACHES_GROUP = "coaches"

CAPABILITIES: dict[str, frozenset[str]] = {
    "tournaments.create": frozenset({ROLE_COACH, ROLE_ADMIN}),
    "schedule.manage": frozenset({ROLE_COACH, ROLE_ADMIN}),
    "squads.manage": frozenset({ROLE_COACH, ROLE_ADMIN}),
    "registrations.manage": frozenset({ROLE_ATHLETE, ROLE_COACH, ROLE_ADMIN}),
    "scores.record": frozenset({ROLE_COACH, ROLE_ADMIN}),
    "scores.import": frozenset({ROLE_ADMIN}),
    "scores.correct": frozenset({ROLE_ADMIN}),
    "teams.manage": frozenset({ROLE_ATHLETE, ROLE_COACH, ROLE_ADMIN}),
    "classes.assign": frozenset({ROLE_ADMIN}),
}


def role_for(user) -> str | None:
    if user is None or not user.is_authenticated:
        return None
    if user.is_superuser or user.is_staff:
        return ROLE_ADMIN
    if user.groups.filter(name=COACHES_GROUP).exists():
        return ROLE_COACH
    return ROLE_ATHLETE


def has_capability(user, capability: str) -> bool:
    role = role_for(user)
    if role is None:
        return False
    return role in CAPABILITIES[capability]


def check_capability(user, capability: str) -> None:
    if capability not in CAPABILITIES:
        raise KeyError(f"Capacidad desconocida: {capability}")
    if not has_capability(user, capability):
        raise UnauthorizedError(f"Tu rol no permite '{capability}'.")


def require_capability(capability: str):
    """Decorador de vistas: corta con UnauthorizedError si el rol no alcanza."""
    if capability not in CAPABILITIES:
        raise KeyError(f"Capacidad desconocida: {capability}")

    def _decorator(view_func: Callable):
        @functools.wraps(view_func)
        def _wrapped(request: HttpRequest, *args, **kwargs):
            check_capability(request.user, capability)
            return view_func(request, *args, **kwargs)

        _wrapped.capability = capability
        return _wrapped

    return _decorator
