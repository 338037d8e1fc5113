"""
scoring.py — Weighted assessment and final score calculation.

Final score = exam score × 0.5 + assessment score × 0.5

The assessment score is the weighted mean of the component scores
(quizzes, homework, classwork, ...). Weights need not sum to 100; they are
normalised by their total. When every weight is zero the components are
treated as equally weighted.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from gradebook.ranking import competition_ranks, ordinal_label


EXAM_WEIGHT = 0.5
ASSESSMENT_WEIGHT = 0.5

# Weights applied to new subjects when the teacher has not customised them.
DEFAULT_COMPONENT_WEIGHTS: Dict[str, float] = {
    "Quizzes": 25.0,
    "Homework": 25.0,
    "Classwork": 25.0,
    "Participation": 25.0,
}


# ── Helpers ─────────────────────────────────────────────────────────

def as_number(val: Any) -> Optional[float]:
    """Convert to float, or None for missing / non-numeric / NaN values."""
    if val is None or isinstance(val, bool):
        return None
    try:
        v = float(val)
    except (TypeError, ValueError):
        return None
    return None if (np.isnan(v) or np.isinf(v)) else v


def parse_component_weights(raw: Optional[str]) -> Dict[str, float]:
    """
    Parse ``"Quizzes:30,Homework:20"`` into a weight mapping.

    Falls back to DEFAULT_COMPONENT_WEIGHTS when nothing valid is given.
    """
    weights: Dict[str, float] = {}
    for part in re.split(r"[,;]", raw or ""):
        if ":" not in part:
            continue
        name, _, value = part.partition(":")
        weight = as_number(value.strip())
        if name.strip() and weight is not None and weight >= 0:
            weights[name.strip()] = weight
    return weights or dict(DEFAULT_COMPONENT_WEIGHTS)


# ── Pure calculators ────────────────────────────────────────────────

def compute_assessment_score(components: Iterable[Tuple[float, float]]) -> float:
    """
    Weighted mean of ``(score, weight)`` pairs.

    Zero total weight falls back to the plain mean; no components gives 0.
    """
    pairs = [(float(score), float(weight)) for score, weight in components]
    if not pairs:
        return 0.0

    scores = np.array([p[0] for p in pairs])
    weights = np.array([p[1] for p in pairs])
    if (weights < 0).any():
        raise ValueError("Component weights must be non-negative.")

    total_weight = weights.sum()
    if total_weight == 0:
        return float(scores.mean())
    return float((scores * weights).sum() / total_weight)


def compute_final_score(exam_score: float, assessment_score: float) -> float:
    return EXAM_WEIGHT * float(exam_score) + ASSESSMENT_WEIGHT * float(assessment_score)


# ── Score records ───────────────────────────────────────────────────

def _weight_lookup(
    components: Optional[Sequence[Mapping[str, Any]]],
    default_weights: Mapping[str, float],
) -> Tuple[Dict[str, float], Dict[str, float]]:
    by_id: Dict[str, float] = {}
    by_name = {str(k).lower(): float(v) for k, v in default_weights.items()}
    for comp in components or []:
        weight = as_number(comp.get("weight"))
        if weight is None:
            continue
        if comp.get("id") is not None:
            by_id[str(comp["id"])] = weight
        if comp.get("name"):
            by_name[str(comp["name"]).lower()] = weight
    return by_id, by_name


def component_pairs(
    record: Mapping[str, Any],
    components: Optional[Sequence[Mapping[str, Any]]] = None,
    default_weights: Optional[Mapping[str, float]] = None,
) -> List[Tuple[float, float]]:
    """
    ``(score, weight)`` pairs for a score record's component scores.

    Keys are matched against component ids first, then names
    (case-insensitive). Unknown components weigh 1.
    """
    by_id, by_name = _weight_lookup(
        components, DEFAULT_COMPONENT_WEIGHTS if default_weights is None else default_weights
    )
    pairs = []
    for key, value in (record.get("class_assessment_scores") or {}).items():
        score = as_number(value)
        if score is None:
            continue
        key = str(key)
        weight = by_id.get(key, by_name.get(key.lower(), 1.0))
        pairs.append((score, weight))
    return pairs


def is_complete(
    record: Mapping[str, Any],
    components: Optional[Sequence[Mapping[str, Any]]] = None,
) -> bool:
    """
    True when the exam score and every component score are present.

    Components are matched like ``component_pairs``: exact id, or name
    case-insensitively.
    """
    if as_number(record.get("exam_score")) is None:
        return False
    scores = record.get("class_assessment_scores") or {}
    if not scores:
        return False
    if any(as_number(v) is None for v in scores.values()):
        return False

    keys = {str(k) for k in scores}
    lowered = {k.lower() for k in keys}
    for comp in components or []:
        by_id = comp.get("id") is not None and str(comp["id"]) in keys
        by_name = bool(comp.get("name")) and str(comp["name"]).lower() in lowered
        if not (by_id or by_name):
            return False
    return True


def score_record(
    record: Mapping[str, Any],
    components: Optional[Sequence[Mapping[str, Any]]] = None,
    default_weights: Optional[Mapping[str, float]] = None,
) -> Dict[str, Any]:
    """Return a copy of ``record`` with ``final_score`` recomputed (1 dp)."""
    exam = as_number(record.get("exam_score")) or 0.0
    assessment = compute_assessment_score(component_pairs(record, components, default_weights))
    scored = dict(record)
    scored["final_score"] = round(compute_final_score(exam, assessment), 1)
    return scored


def calculate_final_scores_and_ranks(
    records: Sequence[Mapping[str, Any]],
    components: Optional[Sequence[Mapping[str, Any]]] = None,
    default_weights: Optional[Mapping[str, float]] = None,
) -> List[Dict[str, Any]]:
    """
    Recompute final scores for a subject's records and rank them.

    Only complete records are ranked; incomplete ones follow with
    ``rank = None``.
    """
    if not records:
        return []

    complete, incomplete = [], []
    for record in records:
        scored = score_record(record, components, default_weights)
        if is_complete(record, components):
            complete.append(scored)
        else:
            scored["rank"] = None
            scored["rank_label"] = None
            incomplete.append(scored)

    ranks = competition_ranks([r["final_score"] for r in complete])
    for scored, rank in zip(complete, ranks):
        scored["rank"] = rank
        scored["rank_label"] = ordinal_label(rank)

    complete.sort(key=lambda r: r["rank"])
    return complete + incomplete
