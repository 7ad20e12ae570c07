# shootcore/apps/core/http.py
from __future__ import annotations

import functools
import json
import logging
from datetime import date, datetime
from typing import Any, Callable

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import NotFoundError, ShootCoreError, ValidationError

logger = logging.getLogger(__name__)


def error_response(exc: ShootCoreError) -> JsonResponse:
    return JsonResponse(exc.as_dict(), status=exc.status)


def json_endpoint(view_func: Callable):
    """
    Traduce los errores del core a JSON ``{"error": kind, "detail": ...}``.
    Cualquier otra excepción (fallas inesperadas de la BD) se propaga → 500.
    Se aplica por fuera de ``require_capability`` para que el 403 salga en JSON.
    """

    @functools.wraps(view_func)
    def _wrapped(request: HttpRequest, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except DjangoValidationError as exc:
            return error_response(ValidationError("; ".join(exc.messages)))
        except ShootCoreError as exc:
            logger.info("%s %s → %s: %s", request.method, request.path, exc.kind, exc.detail)
            return error_response(exc)

    return _wrapped


def read_json(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError("El cuerpo no es JSON válido.") from exc
    if not isinstance(data, dict):
        raise ValidationError("Se esperaba un objeto JSON.")
    return data


def require_fields(data: dict[str, Any], *names: str) -> None:
    missing = [n for n in names if data.get(n) in (None, "", [])]
    if missing:
        raise ValidationError(f"Faltan campos obligatorios: {', '.join(missing)}")


def get_or_404(model, **lookup):
    """Como get_object_or_404 pero con NotFoundError del core (sale en JSON)."""
    try:
        return model.objects.get(**lookup)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"{model._meta.verbose_name} no encontrado.") from None


def as_int(value: Any, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{field}' debe ser un entero.") from None


def as_date(value: Any, field: str) -> date:
    try:
        d = parse_date(str(value)) if value else None
    except ValueError:
        d = None
    if d is None:
        raise ValidationError(f"'{field}' debe ser una fecha YYYY-MM-DD.")
    return d


def as_datetime(value: Any, field: str) -> datetime:
    """ISO 8601; si viene sin zona se interpreta en la zona del proyecto."""
    try:
        dt = parse_datetime(str(value)) if value else None
    except ValueError:
        dt = None
    if dt is None:
        raise ValidationError(f"'{field}' debe ser fecha-hora ISO 8601.")
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt
