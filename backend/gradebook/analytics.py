"""
analytics.py — Dashboard aggregations over already-fetched score records.

Computes:
- Letter grade distribution (histogram over grade bands)
- Subject average
- Per-component performance
- Student progress per trimester
- Top-N student leaderboard
"""

from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd

from gradebook.grading import GRADE_BANDS, distribution_labels, get_grade_label
from gradebook.scoring import as_number


def _round1(val: float) -> float:
    return round(float(val), 1)


def _truthy_scores(records: Sequence[Mapping[str, Any]]) -> List[float]:
    # A final score of 0 is treated as "not yet computed" here.
    scores = (as_number(r.get("final_score")) for r in records)
    return [s for s in scores if s]


# ── Distribution ────────────────────────────────────────────────────

def grade_distribution(records: Sequence[Mapping[str, Any]]) -> Dict[str, int]:
    """Count of final scores per grade band. A missing score counts as 0."""
    labels = distribution_labels()
    values = np.clip(
        [as_number(r.get("final_score")) or 0.0 for r in records], 0, 100
    )
    if len(values) == 0:
        return {label: 0 for label in labels}

    # Band edges low to high: 0, 50, 60, 70, 80, 100 (last bin is inclusive).
    edges = [band[0] for band in reversed(GRADE_BANDS)] + [100.0]
    counts, _ = np.histogram(values, bins=edges)
    return {label: int(c) for label, c in zip(labels, reversed(counts))}


def subject_average(records: Sequence[Mapping[str, Any]]) -> float:
    scores = _truthy_scores(records)
    return _round1(np.mean(scores)) if scores else 0.0


# ── Components & Progress ──────────────────────────────────────────

def component_performance(
    records: Sequence[Mapping[str, Any]],
    components: Sequence[Mapping[str, Any]],
) -> Dict[str, float]:
    """Average score per assessment component, keyed by component name."""
    names = {str(c.get("id")): str(c.get("name")) for c in components if c.get("name")}
    rows = []
    for record in records:
        for comp_id, value in (record.get("class_assessment_scores") or {}).items():
            score = as_number(value)
            if str(comp_id) in names and score is not None:
                rows.append({"component": names[str(comp_id)], "score": score})

    result = {name: 0.0 for name in names.values()}
    if rows:
        means = pd.DataFrame(rows).groupby("component")["score"].mean()
        result.update({name: _round1(mean) for name, mean in means.items()})
    return result


def student_progress(
    student_id: str,
    records: Sequence[Mapping[str, Any]],
    subjects: Sequence[Mapping[str, Any]],
) -> Dict[str, float]:
    """Mean final score per trimester for one student."""
    trimesters = {str(s.get("id")): s.get("trimester_id") for s in subjects}
    rows = []
    for record in records:
        if str(record.get("student_id")) != str(student_id):
            continue
        trimester = trimesters.get(str(record.get("subject_id")))
        score = as_number(record.get("final_score"))
        if trimester and score:
            rows.append({"trimester_id": str(trimester), "score": score})

    if not rows:
        return {}
    means = pd.DataFrame(rows).groupby("trimester_id", sort=False)["score"].mean()
    return {tid: _round1(mean) for tid, mean in means.items()}


# ── Leaderboard ─────────────────────────────────────────────────────

def top_students(
    records: Sequence[Mapping[str, Any]],
    students: Sequence[Mapping[str, Any]],
    limit: int = 5,
) -> List[Dict[str, Any]]:
    """
    Highest average final scores with their letter grade.

    Students missing from the roster are skipped.
    """
    roster = {str(s.get("id")): s for s in students}
    rows = [
        {"student_id": str(r.get("student_id")), "score": as_number(r.get("final_score"))}
        for r in records
        if as_number(r.get("final_score")) and str(r.get("student_id")) in roster
    ]
    if not rows:
        return []

    means = (
        pd.DataFrame(rows)
        .groupby("student_id", sort=False)["score"].mean()
        .round(1)
        .sort_values(ascending=False, kind="stable")
    )
    return [
        {
            "student": dict(roster[sid]),
            "average_score": float(mean),
            "grade": get_grade_label(mean),
        }
        for sid, mean in means.head(limit).items()
    ]
