"""
store.py — Read accessors for the hosted document store.

Analytics functions receive an accessor explicitly; any object with these
methods works:

    get_students(teacher_id)                  -> list of student dicts
    get_subjects(teacher_id)                  -> list of subject dicts
    get_scores(student_id, teacher_id)        -> list of score dicts
    get_components(subject_id, teacher_id)    -> list of component dicts
    get_scores_by_subject(subject_id, teacher_id)

``InMemoryStore`` serves fixtures and tests; ``FirestoreStore`` (see
firestore.py) reads the hosted database over HTTP.
"""

import os
from typing import Any, Dict, List, Optional, Sequence


class StoreError(RuntimeError):
    """Raised when the document store cannot be read."""


def _owned_by(items: Sequence[Dict[str, Any]], teacher_id: str, **match: Any) -> List[Dict[str, Any]]:
    return [
        dict(item)
        for item in items
        if item.get("teacher_id") == teacher_id
        and all(item.get(k) == v for k, v in match.items())
    ]


class InMemoryStore:
    """Accessor over plain lists of records, filtered by owning teacher."""

    def __init__(
        self,
        students: Optional[Sequence[Dict[str, Any]]] = None,
        subjects: Optional[Sequence[Dict[str, Any]]] = None,
        scores: Optional[Sequence[Dict[str, Any]]] = None,
        components: Optional[Sequence[Dict[str, Any]]] = None,
    ):
        self.students = list(students or [])
        self.subjects = list(subjects or [])
        self.scores = list(scores or [])
        self.components = list(components or [])

    def get_students(self, teacher_id: str) -> List[Dict[str, Any]]:
        return _owned_by(self.students, teacher_id)

    def get_subjects(self, teacher_id: str) -> List[Dict[str, Any]]:
        return _owned_by(self.subjects, teacher_id)

    def get_scores(self, student_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        return _owned_by(self.scores, teacher_id, student_id=student_id)

    def get_scores_by_subject(self, subject_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        return _owned_by(self.scores, teacher_id, subject_id=subject_id)

    def get_components(self, subject_id: str, teacher_id: str) -> List[Dict[str, Any]]:
        return sorted(
            _owned_by(self.components, teacher_id, subject_id=subject_id),
            key=lambda c: str(c.get("name", "")),
        )


def store_from_env():
    """Build the HTTP accessor from FIRESTORE_* environment variables."""
    from gradebook.firestore import FirestoreStore

    project_id = os.getenv("FIRESTORE_PROJECT_ID", "").strip()
    if not project_id:
        raise StoreError("FIRESTORE_PROJECT_ID is not set.")

    return FirestoreStore(
        project_id=project_id,
        database=os.getenv("FIRESTORE_DATABASE", "(default)").strip(),
        token=os.getenv("FIRESTORE_TOKEN", "").strip() or None,
        timeout=float(os.getenv("STORE_TIMEOUT_SECONDS", "10")),
    )
