"""
summary.py — Class-wide performance summary for one teacher.

Subject class averages are the mean of every student's final scores in that
subject. Subjects averaging 75+ are "top" (best first); below 70 they are
"improvement areas" (worst first). The class average pools every valid
score in every subject rather than averaging the subject averages.
"""

from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from gradebook.narrative import NOT_ENOUGH_DATA, generate_class_summary
from gradebook.scoring import as_number


TOP_SUBJECT_THRESHOLD = 75
IMPROVEMENT_THRESHOLD = 70


def empty_summary(text: str = NOT_ENOUGH_DATA) -> Dict[str, Any]:
    return {
        "summary": text,
        "class_average": 0,
        "top_subjects": [],
        "improvement_areas": [],
    }


def class_subject_scores(
    subjects: Sequence[Mapping[str, Any]],
    scores_by_student: Mapping[str, List[Mapping[str, Any]]],
) -> Dict[str, List[float]]:
    """Final scores per subject name across all students."""
    names = {str(s.get("id")): str(s.get("name")) for s in subjects}
    pooled: Dict[str, List[float]] = {name: [] for name in names.values()}

    for records in scores_by_student.values():
        for record in records:
            name = names.get(str(record.get("subject_id")))
            score = as_number(record.get("final_score"))
            if name is not None and score is not None:
                pooled[name].append(score)
    return pooled


def build_performance_summary(
    students: Sequence[Mapping[str, Any]],
    subjects: Sequence[Mapping[str, Any]],
    scores_by_student: Mapping[str, List[Mapping[str, Any]]],
    at_risk_count: int,
    top_performer_count: int,
) -> Dict[str, Any]:
    if not subjects or not students:
        return empty_summary()

    pooled = class_subject_scores(subjects, scores_by_student)
    averages = {name: float(np.mean(s)) for name, s in pooled.items() if s}
    all_scores = [score for s in pooled.values() for score in s]
    class_average = float(np.mean(all_scores)) if all_scores else 0.0

    top_subjects = sorted(
        (name for name, avg in averages.items() if avg >= TOP_SUBJECT_THRESHOLD),
        key=lambda name: averages[name], reverse=True,
    )
    improvement_areas = sorted(
        (name for name, avg in averages.items() if avg < IMPROVEMENT_THRESHOLD),
        key=lambda name: averages[name],
    )

    return {
        "summary": generate_class_summary(
            len(students), len(subjects), class_average,
            top_subjects, improvement_areas, at_risk_count, top_performer_count,
        ),
        "class_average": class_average,
        "top_subjects": top_subjects,
        "improvement_areas": improvement_areas,
    }
