# shootcore/apps/classification/services.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from django.conf import settings
from django.db.models import Sum
from django.utils.module_loading import import_string

from shootcore.apps.accounts.models import CLASS_FIELDS, Athlete
from shootcore.apps.core.exceptions import ValidationError
from shootcore.apps.core.transactions import atomic_with_retry
from shootcore.apps.scoring.models import Score

from .policies import ClassificationPolicy, History

logger = logging.getLogger(__name__)


def _check_body(governing_body: str) -> str:
    body = (governing_body or "").strip().upper()
    if body not in CLASS_FIELDS:
        raise ValidationError(f"Organismo desconocido: '{governing_body}'. Usa {', '.join(CLASS_FIELDS)}.")
    return body


def policy_for(governing_body: str) -> ClassificationPolicy:
    """Instancia la política configurada para el organismo (ruta importable + OPTIONS)."""
    body = _check_body(governing_body)
    conf = getattr(settings, "SHOOTCORE", {}).get("CLASSIFICATION_POLICIES", {}).get(body)
    if not conf:
        raise ValidationError(f"No hay política de clasificación configurada para {body}.")
    policy_cls = import_string(conf["POLICY"])
    return policy_cls(**conf.get("OPTIONS", {}))


def _final_scores(governing_body: str):
    return Score.objects.filter(is_final=True, shoot__discipline__governing_body=governing_body)


def history_for(athlete: Athlete, governing_body: str) -> History:
    body = _check_body(governing_body)
    agg = _final_scores(body).filter(shoot__athlete=athlete).aggregate(
        hit=Sum("targets_hit"), thrown=Sum("targets_thrown")
    )
    return History(int(agg["hit"] or 0), int(agg["thrown"] or 0))


def peer_histories(governing_body: str) -> Dict[int, History]:
    body = _check_body(governing_body)
    rows = (
        _final_scores(body)
        .values("shoot__athlete_id")
        .annotate(hit=Sum("targets_hit"), thrown=Sum("targets_thrown"))
    )
    return {r["shoot__athlete_id"]: History(int(r["hit"] or 0), int(r["thrown"] or 0)) for r in rows}


def classify(athlete: Athlete, governing_body: str, policy: Optional[ClassificationPolicy] = None) -> Optional[str]:
    """
    Clase del atleta para el organismo según sus scores finales en disciplinas
    que ese organismo rige. None si el historial no alcanza el mínimo.
    """
    body = _check_body(governing_body)
    policy = policy or policy_for(body)
    history = history_for(athlete, body)
    peers = list(peer_histories(body).values()) if policy.needs_peers else ()
    return policy.classify(history, peers)


@atomic_with_retry
def apply_classification(athlete: Athlete, governing_body: str, policy: Optional[ClassificationPolicy] = None) -> Optional[str]:
    """Escribe la clase en el atleta. Sin historial suficiente no toca la clase vigente."""
    body = _check_body(governing_body)
    label = classify(athlete, body, policy)
    if label is None:
        return None
    field = CLASS_FIELDS[body]
    if getattr(athlete, field) != label:
        setattr(athlete, field, label)
        athlete.save(update_fields=[field])
        logger.info("Atleta %s: clase %s = %s", athlete.pk, body, label)
    return label


def classify_all(governing_body: str, *, apply: bool = False) -> Dict[str, int]:
    """Clasifica a todos los atletas con historial en el organismo; devuelve conteo por clase."""
    body = _check_body(governing_body)
    policy = policy_for(body)
    peers = peer_histories(body)
    pool = list(peers.values())
    counts: Dict[str, int] = {}
    for athlete in Athlete.objects.filter(pk__in=peers).order_by("pk"):
        label = policy.classify(peers[athlete.pk], pool if policy.needs_peers else ())
        key = label or "-"
        counts[key] = counts.get(key, 0) + 1
        if apply and label is not None:
            apply_classification(athlete, body, policy)
    return counts
