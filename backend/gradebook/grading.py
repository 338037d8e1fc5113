"""
grading.py — Letter grade bands for 0-100 final scores.

  A (80-100), B (70-79), C (60-69), D (50-59), F (0-49)
"""

from typing import Any, Dict, List, Optional

from gradebook.scoring import as_number


# (min_score, label, range, description), ordered high to low.
GRADE_BANDS = [
    (80.0, "A", "80-100", "Excellent"),
    (70.0, "B", "70-79", "Very Good"),
    (60.0, "C", "60-69", "Good"),
    (50.0, "D", "50-59", "Satisfactory"),
    (0.0, "F", "0-49", "Needs Improvement"),
]


def _clamp_score(score: Any) -> Optional[float]:
    value = as_number(score)
    if value is None:
        return None
    return max(0.0, min(100.0, value))


def get_grade(score: Any) -> Dict[str, Any]:
    """Return grade info for a 0-100 score."""
    value = _clamp_score(score)
    if value is None:
        return {"label": "-", "description": "No score"}

    for min_score, label, _, desc in GRADE_BANDS:
        if value >= min_score:
            return {"label": label, "description": desc, "score": round(value, 1)}
    return {"label": "F", "description": "Needs Improvement", "score": round(value, 1)}


def get_grade_label(score: Any) -> str:
    return get_grade(score)["label"]


def distribution_labels() -> List[str]:
    """Chart labels, e.g. 'A (80-100%)'."""
    return [f"{label} ({rng}%)" for _, label, rng, _ in GRADE_BANDS]
