"""
trends.py — Trend detection and at-risk / top-performer scoring.

Trend: the student's final scores, oldest first, are split into two halves
(first floor(n/2) vs the rest). A second-half mean at least 5 points higher
is "improving", at least 5 points lower is "declining", otherwise "stable".
Fewer than 3 scores is always "stable".

Risk score (0-100):
    max(0, 100 - average)
    + 20 if declining, -10 if improving
    + 5 per risk factor
clamped to 0-100.

Risk factors: overall average below 60, any subject averaging below 60,
declining trend. A student with no risk factors is not at risk at all.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np

from gradebook.narrative import (
    factor_declining_trend,
    factor_low_average,
    factor_struggling_subject,
)
from gradebook.scoring import as_number
from gradebook.subjects import subject_averages
from gradebook.timestamps import sort_chronologically


AT_RISK_THRESHOLD = 60
HIGH_PERFORMER_THRESHOLD = 85
TREND_THRESHOLD = 5
MIN_TREND_SCORES = 3

IMPROVING = "improving"
DECLINING = "declining"
STABLE = "stable"

TREND_ADJUSTMENT = {DECLINING: 20, IMPROVING: -10, STABLE: 0}
RISK_FACTOR_WEIGHT = 5


# ── Helpers ─────────────────────────────────────────────────────────

def _valid_scores(records: Iterable[Mapping[str, Any]]) -> List[float]:
    scores = (as_number(r.get("final_score")) for r in records)
    return [s for s in scores if s is not None]


def _subject_label(subject_id: str, subject_names: Optional[Mapping[str, str]]) -> str:
    if subject_names and subject_names.get(subject_id):
        return str(subject_names[subject_id])
    return subject_id


# ── Calculations ────────────────────────────────────────────────────

def average_score(records: Iterable[Mapping[str, Any]]) -> float:
    """Mean final score, ignoring records that have none. 0 when empty."""
    scores = _valid_scores(records)
    return float(np.mean(scores)) if scores else 0.0


def calculate_trend(records: Iterable[Mapping[str, Any]]) -> str:
    scores = _valid_scores(sort_chronologically(records))
    if len(scores) < MIN_TREND_SCORES:
        return STABLE

    midpoint = len(scores) // 2
    difference = np.mean(scores[midpoint:]) - np.mean(scores[:midpoint])

    if difference >= TREND_THRESHOLD:
        return IMPROVING
    if difference <= -TREND_THRESHOLD:
        return DECLINING
    return STABLE


def calculate_risk_score(average: float, trend: str, risk_factor_count: int) -> float:
    base = max(0.0, 100 - float(average))
    score = base + TREND_ADJUSTMENT.get(trend, 0) + risk_factor_count * RISK_FACTOR_WEIGHT
    return float(min(100.0, max(0.0, score)))


# ── Student Assessment ─────────────────────────────────────────────

def assess_risk(
    student: Mapping[str, Any],
    records: List[Mapping[str, Any]],
    subject_names: Optional[Mapping[str, str]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Risk assessment for one student, or None when nothing is flagged.
    """
    if not records:
        return None

    average = average_score(records)
    trend = calculate_trend(records)

    factors: List[str] = []
    if average < AT_RISK_THRESHOLD:
        factors.append(factor_low_average())
    for subject_id, subject_avg in subject_averages(records).items():
        if subject_avg < AT_RISK_THRESHOLD:
            factors.append(factor_struggling_subject(_subject_label(subject_id, subject_names)))
    if trend == DECLINING:
        factors.append(factor_declining_trend())

    if not factors:
        return None

    return {
        "student": dict(student),
        "risk_score": calculate_risk_score(average, trend, len(factors)),
        "risk_factors": factors,
        "trend": trend,
    }


def assess_top_performer(
    student: Mapping[str, Any],
    records: List[Mapping[str, Any]],
    subject_names: Optional[Mapping[str, str]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Top-performer entry for one student, or None.

    Strongest subjects are every subject averaging 85 or more.
    """
    if not records:
        return None

    average = average_score(records)
    strongest = [
        _subject_label(subject_id, subject_names)
        for subject_id, subject_avg in subject_averages(records).items()
        if subject_avg >= HIGH_PERFORMER_THRESHOLD
    ]

    if average < HIGH_PERFORMER_THRESHOLD and not strongest:
        return None

    return {
        "student": dict(student),
        "average_score": average,
        "strongest_subjects": strongest,
        "trend": calculate_trend(records),
    }
