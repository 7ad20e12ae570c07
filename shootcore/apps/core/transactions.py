# shootcore/apps/core/transactions.py
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction

from .exceptions import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _max_retries() -> int:
    return int(getattr(settings, "SHOOTCORE", {}).get("TX_RETRIES", 3))


def atomic_with_retry(func: Callable[..., T]) -> Callable[..., T]:
    """
    Ejecuta ``func`` dentro de ``transaction.atomic`` y reintenta ante fallas
    de serialización/deadlock de la BD (OperationalError).

    - Agotados los reintentos → ConflictError (el cliente puede reintentar).
    - Violaciones de constraints únicos → ConflictError sin reintento.
    - Si ya estamos dentro de una transacción no se reintenta: el bloque
      externo es quien decide.
    """

    @functools.wraps(func)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        nested = transaction.get_connection().in_atomic_block
        attempts = 1 if nested else max(1, _max_retries())
        last_exc: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                with transaction.atomic():
                    return func(*args, **kwargs)
            except IntegrityError as exc:
                logger.warning("%s: constraint violado (%s)", func.__name__, exc)
                raise ConflictError("La operación viola una restricción de unicidad.") from exc
            except OperationalError as exc:
                if nested:
                    raise
                last_exc = exc
                logger.warning("%s: intento %s/%s falló por concurrencia (%s)", func.__name__, attempt, attempts, exc)
        raise ConflictError("La operación chocó con otra concurrente; refresca y reintenta.") from last_exc

    return _wrapped
