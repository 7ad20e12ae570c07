# shootcore/apps/classification/policies.py
"""
Políticas de clasificación (A > B > C > D > E).

Una política recibe el historial agregado del atleta y, para las percentiles,
el de sus pares del mismo organismo. Se eligen por organismo en
``settings.SHOOTCORE["CLASSIFICATION_POLICIES"]``.
"""
from __future__ import annotations

from bisect import bisect_right
from fractions import Fraction
from typing import NamedTuple, Optional, Sequence

from django.conf import settings

from shootcore.apps.core.exceptions import ValidationError


class History(NamedTuple):
    targets_hit: int
    targets_thrown: int

    @property
    def ratio(self) -> Optional[Fraction]:
        if not self.targets_thrown:
            return None
        return Fraction(self.targets_hit, self.targets_thrown)


def class_labels() -> list[str]:
    return list(getattr(settings, "SHOOTCORE", {}).get("CLASS_LABELS", ["A", "B", "C", "D", "E"]))


class ClassificationPolicy:
    """Base: devuelve None mientras el historial no alcance ``min_targets``."""

    needs_peers = False

    def __init__(self, min_targets: int = 100, labels: Optional[Sequence[str]] = None):
        if min_targets < 0:
            raise ValidationError("min_targets no puede ser negativo.")
        self.min_targets = int(min_targets)
        self.labels = list(labels) if labels else class_labels()

    def eligible(self, history: History) -> bool:
        return history.targets_thrown > 0 and history.targets_thrown >= self.min_targets

    def classify(self, history: History, peers: Sequence[History] = ()) -> Optional[str]:
        if not self.eligible(history):
            return None
        return self._label(history, peers)

    def _label(self, history: History, peers: Sequence[History]) -> str:
        raise NotImplementedError


class FixedThresholdPolicy(ClassificationPolicy):
    """
    Umbrales fijos de hit_ratio, de mejor a peor. Con etiquetas A..E y
    thresholds [0.85, 0.75, 0.65, 0.50]: ≥0.85 → A, ≥0.75 → B, ... <0.50 → E.
    """

    def __init__(self, thresholds: Sequence[float], min_targets: int = 100, labels: Optional[Sequence[str]] = None):
        super().__init__(min_targets=min_targets, labels=labels)
        cuts = [Fraction(str(t)) for t in thresholds]
        if any(b >= a for a, b in zip(cuts, cuts[1:])):
            raise ValidationError("Los umbrales deben ser estrictamente decrecientes.")
        if len(cuts) != len(self.labels) - 1:
            raise ValidationError(f"Se esperaban {len(self.labels) - 1} umbrales para {len(self.labels)} clases.")
        self.thresholds = cuts

    def _label(self, history: History, peers: Sequence[History]) -> str:
        ratio = history.ratio
        for label, cut in zip(self.labels, self.thresholds):
            if ratio >= cut:
                return label
        return self.labels[-1]


class PercentileBucketPolicy(ClassificationPolicy):
    """
    Reparte por percentil dentro de los pares elegibles del mismo organismo:
    el mejor 1/N va a la primera clase, el siguiente 1/N a la segunda, etc.
    Los empates en ratio caen siempre en la misma clase.
    """

    needs_peers = True

    def _label(self, history: History, peers: Sequence[History]) -> str:
        pool = sorted(p.ratio for p in peers if self.eligible(p))
        if not pool:
            return self.labels[0]
        # fracción de pares estrictamente mejores que el atleta
        better = len(pool) - bisect_right(pool, history.ratio)
        share = Fraction(better, len(pool))
        idx = min(int(share * len(self.labels)), len(self.labels) - 1)
        return self.labels[idx]
