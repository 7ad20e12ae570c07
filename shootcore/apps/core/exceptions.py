# shootcore/apps/core/exceptions.py
"""
Taxonomía de errores del motor de squads y scores.

Cada error tiene un ``kind`` estable (lo que ve el cliente en el JSON) y un
``detail`` legible. Los servicios los lanzan; las vistas los traducen en un
único lugar (ver ``core.http.json_endpoint``).
"""
from __future__ import annotations


class ShootCoreError(Exception):
    kind = "error"
    status = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail

    def as_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class ValidationError(ShootCoreError):
    """Entrada mal formada o incompleta. Nunca se reintenta."""
    kind = "validation_error"
    status = 400


class UnauthorizedError(ShootCoreError):
    kind = "unauthorized"
    status = 403


class NotFoundError(ShootCoreError):
    kind = "not_found"
    status = 404


class ConflictError(ShootCoreError):
    """Pedido válido que viola capacidad/unicidad en este instante; se puede reintentar."""
    kind = "conflict"
    status = 409


class ConsistencyError(ShootCoreError):
    """Invariante entre entidades roto (p.ej. torneos distintos). No se reintenta."""
    kind = "consistency_error"
    status = 422
