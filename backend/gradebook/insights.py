"""
insights.py — Teacher-level insight generation over the document store.

Each public function takes the store accessor explicitly, fetches one
teacher's roster and score histories (sequentially, one student at a time),
then runs the pure calculations from trends.py, anomalies.py and summary.py.

Every function fails soft: a student whose scores cannot be fetched is
skipped, and any other error is logged and answered with an empty result of
the right shape so the dashboard always renders.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from gradebook.anomalies import detect_anomalies
from gradebook.narrative import SUMMARY_ERROR
from gradebook.scoring import calculate_final_scores_and_ranks
from gradebook.summary import build_performance_summary, empty_summary
from gradebook.trends import assess_risk, assess_top_performer

logger = logging.getLogger(__name__)

Histories = Dict[str, List[Dict[str, Any]]]


# ── Fetching ────────────────────────────────────────────────────────

def _owned(
    records: Sequence[Dict[str, Any]],
    teacher_id: str,
    organization_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Drop anything belonging to another teacher or organization."""
    return [
        r for r in records
        if r.get("teacher_id") == teacher_id
        and (organization_id is None or r.get("organization_id") == organization_id)
    ]


def _subject_names(store, teacher_id: str, organization_id: Optional[str] = None) -> Dict[str, str]:
    try:
        subjects = _owned(store.get_subjects(teacher_id), teacher_id, organization_id)
    except Exception as exc:
        logger.warning("Could not fetch subjects for teacher %s: %s", teacher_id, exc)
        return {}
    return {str(s.get("id")): str(s.get("name")) for s in subjects}


def _fetch_histories(
    store,
    teacher_id: str,
    students: Sequence[Mapping[str, Any]],
    organization_id: Optional[str] = None,
) -> Histories:
    histories: Histories = {}
    for student in students:
        student_id = str(student.get("id"))
        try:
            scores = store.get_scores(student_id, teacher_id)
        except Exception as exc:
            logger.warning("Skipping student %s: score fetch failed: %s", student_id, exc)
            continue
        histories[student_id] = _owned(scores, teacher_id, organization_id)
    return histories


def _load(
    store, teacher_id: str, organization_id: Optional[str] = None
) -> Tuple[List[Dict[str, Any]], Dict[str, str], Histories]:
    students = _owned(store.get_students(teacher_id), teacher_id, organization_id)
    subject_names = _subject_names(store, teacher_id, organization_id)
    histories = _fetch_histories(store, teacher_id, students, organization_id)
    return students, subject_names, histories


# ── Pure assembly ──────────────────────────────────────────────────

def _at_risk(students, histories: Histories, subject_names) -> List[Dict[str, Any]]:
    results = []
    for student in students:
        records = histories.get(str(student.get("id")))
        entry = assess_risk(student, records or [], subject_names)
        if entry:
            results.append(entry)
    return sorted(results, key=lambda r: r["risk_score"], reverse=True)


def _top_performers(students, histories: Histories, subject_names) -> List[Dict[str, Any]]:
    results = []
    for student in students:
        records = histories.get(str(student.get("id")))
        entry = assess_top_performer(student, records or [], subject_names)
        if entry:
            results.append(entry)
    return sorted(results, key=lambda r: r["average_score"], reverse=True)


def _anomalies(students, histories: Histories, subject_names) -> List[Dict[str, Any]]:
    results: List[Dict[str, Any]] = []
    for student in students:
        records = histories.get(str(student.get("id")))
        if records:
            results.extend(detect_anomalies(student, records, subject_names))
    return results


# ── Public API ──────────────────────────────────────────────────────

def get_at_risk_students(store, teacher_id: str, organization_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """Students with at least one risk factor, highest risk first."""
    try:
        students, subject_names, histories = _load(store, teacher_id, organization_id)
        return _at_risk(students, histories, subject_names)
    except Exception:
        logger.exception("Error identifying at-risk students for teacher %s", teacher_id)
        return []


def get_top_performers(store, teacher_id: str, organization_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """High performers, best average first."""
    try:
        students, subject_names, histories = _load(store, teacher_id, organization_id)
        return _top_performers(students, histories, subject_names)
    except Exception:
        logger.exception("Error identifying top performers for teacher %s", teacher_id)
        return []


def get_anomalies(store, teacher_id: str, organization_id: Optional[str] = None) -> List[Dict[str, Any]]:
    try:
        students, subject_names, histories = _load(store, teacher_id, organization_id)
        return _anomalies(students, histories, subject_names)
    except Exception:
        logger.exception("Error detecting score anomalies for teacher %s", teacher_id)
        return []


def get_performance_summary(store, teacher_id: str, organization_id: Optional[str] = None) -> Dict[str, Any]:
    """Natural-language class summary with class average and subject lists."""
    try:
        subjects = _owned(store.get_subjects(teacher_id), teacher_id, organization_id)
        students = _owned(store.get_students(teacher_id), teacher_id, organization_id)
        if not subjects or not students:
            return empty_summary()

        histories = _fetch_histories(store, teacher_id, students, organization_id)
        names = {str(s.get("id")): str(s.get("name")) for s in subjects}
        return build_performance_summary(
            students, subjects, histories,
            at_risk_count=len(_at_risk(students, histories, names)),
            top_performer_count=len(_top_performers(students, histories, names)),
        )
    except Exception:
        logger.exception("Error generating performance summary for teacher %s", teacher_id)
        return empty_summary(SUMMARY_ERROR)


def generate_all_insights(store, teacher_id: str, organization_id: Optional[str] = None) -> Dict[str, Any]:
    """Every insight for the dashboard from a single fetch of the roster."""
    try:
        students, subject_names, histories = _load(store, teacher_id, organization_id)
        at_risk = _at_risk(students, histories, subject_names)
        top = _top_performers(students, histories, subject_names)
        subjects = [{"id": sid, "name": name} for sid, name in subject_names.items()]
        return {
            "at_risk_students": at_risk,
            "top_performers": top,
            "summary": build_performance_summary(
                students, subjects, histories, len(at_risk), len(top)
            ),
            "anomalies": _anomalies(students, histories, subject_names),
        }
    except Exception:
        logger.exception("Error generating insights for teacher %s", teacher_id)
        return {
            "at_risk_students": [],
            "top_performers": [],
            "summary": empty_summary(SUMMARY_ERROR),
            "anomalies": [],
        }


def rank_subject(
    store,
    subject_id: str,
    teacher_id: str,
    default_weights: Optional[Mapping[str, float]] = None,
) -> List[Dict[str, Any]]:
    """Recompute final scores and ranks for every score in one subject."""
    try:
        scores = _owned(store.get_scores_by_subject(subject_id, teacher_id), teacher_id)
        components = _owned(store.get_components(subject_id, teacher_id), teacher_id)
        return calculate_final_scores_and_ranks(scores, components, default_weights)
    except Exception:
        logger.exception("Error ranking subject %s for teacher %s", subject_id, teacher_id)
        return []
