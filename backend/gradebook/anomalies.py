"""
anomalies.py — Irregularities in a student's per-subject score history.

Rules, applied to the subject's final scores oldest first:
- sudden-drop:        a consecutive change of -20 or worse (high at -30)
- sudden-improvement: a consecutive change of +25 or more (high at +40)
- inconsistent-performance: population std dev above 15 over 3+ scores
  (high above 25)
"""

from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from gradebook.narrative import (
    narrate_inconsistent_performance,
    narrate_sudden_drop,
    narrate_sudden_improvement,
)
from gradebook.scoring import as_number
from gradebook.timestamps import sort_chronologically


SUDDEN_DROP = "sudden-drop"
SUDDEN_IMPROVEMENT = "sudden-improvement"
INCONSISTENT = "inconsistent-performance"

DROP_THRESHOLD = -20
DROP_HIGH = -30
IMPROVEMENT_THRESHOLD = 25
IMPROVEMENT_HIGH = 40
STD_THRESHOLD = 15
STD_HIGH = 25

UNKNOWN_SUBJECT = "Unknown Subject"


def _anomaly(
    student: Mapping[str, Any],
    subject_id: str,
    subject_name: str,
    anomaly_type: str,
    description: str,
    severity: str,
) -> Dict[str, Any]:
    return {
        "student_id": student.get("id"),
        "student_name": student.get("name"),
        "subject_id": subject_id,
        "subject_name": subject_name,
        "anomaly_type": anomaly_type,
        "description": description,
        "severity": severity,
    }


def detect_subject_anomalies(
    student: Mapping[str, Any],
    subject_id: str,
    subject_name: Optional[str],
    records: List[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Anomalies for one (student, subject) history."""
    subject_name = subject_name or UNKNOWN_SUBJECT
    name = str(student.get("name", student.get("id", "")))

    scores = [as_number(r.get("final_score")) for r in sort_chronologically(records)]
    scores = [s for s in scores if s is not None]

    anomalies: List[Dict[str, Any]] = []
    if len(scores) < 2:
        return anomalies

    for previous, current in zip(scores, scores[1:]):
        delta = current - previous
        if delta <= DROP_THRESHOLD:
            anomalies.append(_anomaly(
                student, subject_id, subject_name, SUDDEN_DROP,
                narrate_sudden_drop(name, subject_name, previous, current),
                "high" if delta <= DROP_HIGH else "medium",
            ))
        if delta >= IMPROVEMENT_THRESHOLD:
            anomalies.append(_anomaly(
                student, subject_id, subject_name, SUDDEN_IMPROVEMENT,
                narrate_sudden_improvement(name, subject_name, previous, current),
                "high" if delta >= IMPROVEMENT_HIGH else "medium",
            ))

    if len(scores) >= 3:
        std_dev = float(np.std(scores))
        if std_dev > STD_THRESHOLD:
            anomalies.append(_anomaly(
                student, subject_id, subject_name, INCONSISTENT,
                narrate_inconsistent_performance(name, subject_name, std_dev),
                "high" if std_dev > STD_HIGH else "medium",
            ))

    return anomalies


def detect_anomalies(
    student: Mapping[str, Any],
    records: List[Mapping[str, Any]],
    subject_names: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, Any]]:
    """Anomalies across every subject in a student's score history."""
    by_subject: Dict[str, List[Mapping[str, Any]]] = {}
    for record in records:
        by_subject.setdefault(str(record.get("subject_id")), []).append(record)

    anomalies: List[Dict[str, Any]] = []
    for subject_id, subject_records in by_subject.items():
        anomalies.extend(detect_subject_anomalies(
            student, subject_id, (subject_names or {}).get(subject_id), subject_records,
        ))
    return anomalies
