"""
Shared sample roster for insight, store and route tests.

Teacher t1 has three students:
- Alice (s1): Mathematics 50 -> 40 -> 30, at risk and declining
- Brian (s2): English 95 -> 70, Mathematics 90 -> 92, top performer
- Carol (s3): no scores
Teacher t2 owns a student and scores that must never leak into t1's results.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from gradebook.store import InMemoryStore, StoreError

DAY_MS = 86_400_000
BASE_MS = 1_700_000_000_000


def score(score_id, student_id, subject_id, final, day, teacher_id="t1", **extra):
    record = {
        "id": score_id,
        "student_id": student_id,
        "subject_id": subject_id,
        "final_score": final,
        "teacher_id": teacher_id,
        "organization_id": "org1",
        "created_at": BASE_MS + day * DAY_MS,
    }
    record.update(extra)
    return record


STUDENTS = [
    {"id": "s1", "name": "Alice", "grade_level_id": "g1", "teacher_id": "t1", "organization_id": "org1"},
    {"id": "s2", "name": "Brian", "grade_level_id": "g1", "teacher_id": "t1", "organization_id": "org1"},
    {"id": "s3", "name": "Carol", "grade_level_id": "g1", "teacher_id": "t1", "organization_id": "org1"},
    {"id": "x1", "name": "Xavier", "grade_level_id": "g9", "teacher_id": "t2", "organization_id": "org2"},
]

SUBJECTS = [
    {"id": "m", "name": "Mathematics", "trimester_id": "T1", "teacher_id": "t1", "organization_id": "org1"},
    {"id": "e", "name": "English", "trimester_id": "T2", "teacher_id": "t1", "organization_id": "org1"},
    {"id": "z", "name": "Zoology", "trimester_id": "T1", "teacher_id": "t2", "organization_id": "org2"},
]

SCORES = [
    score("a1", "s1", "m", 50, 1),
    score("a2", "s1", "m", 40, 2),
    score("a3", "s1", "m", 30, 3),
    score("b1", "s2", "e", 95, 1),
    score("b2", "s2", "e", 70, 2),
    score("b3", "s2", "m", 90, 3),
    score("b4", "s2", "m", 92, 4),
    score("x1", "x1", "z", 10, 1, teacher_id="t2"),
]


class LeakyStore(InMemoryStore):
    """Returns another teacher's record alongside Alice's scores."""

    def get_scores(self, student_id, teacher_id):
        scores = super().get_scores(student_id, teacher_id)
        if student_id == "s1":
            scores.append(score("leak", "s1", "m", 100, 9, teacher_id="t2"))
        return scores


class FlakyStore(InMemoryStore):
    """Fails to fetch scores for the listed students."""

    def __init__(self, *args, failing=("s3",), **kwargs):
        super().__init__(*args, **kwargs)
        self.failing = set(failing)

    def get_scores(self, student_id, teacher_id):
        if student_id in self.failing:
            raise StoreError(f"timeout fetching {student_id}")
        return super().get_scores(student_id, teacher_id)


class BrokenStore(InMemoryStore):
    def get_students(self, teacher_id):
        raise StoreError("store unavailable")


@pytest.fixture
def store():
    return InMemoryStore(students=STUDENTS, subjects=SUBJECTS, scores=SCORES)


@pytest.fixture
def flaky_store():
    return FlakyStore(students=STUDENTS, subjects=SUBJECTS, scores=SCORES)


@pytest.fixture
def leaky_store():
    return LeakyStore(students=STUDENTS, subjects=SUBJECTS, scores=SCORES)


@pytest.fixture
def broken_store():
    return BrokenStore(students=STUDENTS, subjects=SUBJECTS, scores=SCORES)
