"""
Analytics routes — chart aggregations over posted score records.
"""

from fastapi import APIRouter, HTTPException

from gradebook.analytics import (
    component_performance,
    grade_distribution,
    student_progress,
    subject_average,
    top_students,
)

router = APIRouter()


def _scores_from_payload(payload: dict) -> list:
    """Extract score records from request payload."""
    scores = payload.get("scores")
    if scores is None:
        raise HTTPException(400, "No scores provided.")
    return scores


@router.post("/distribution")
async def distribution(payload: dict):
    """Letter grade distribution of final scores."""
    return grade_distribution(_scores_from_payload(payload))


@router.post("/subject-average")
async def average(payload: dict):
    return {"average_score": subject_average(_scores_from_payload(payload))}


@router.post("/component-performance")
async def components(payload: dict):
    """Average score per assessment component."""
    return component_performance(
        _scores_from_payload(payload), payload.get("components") or []
    )


@router.post("/student-progress/{student_id}")
async def progress(student_id: str, payload: dict):
    """Mean final score per trimester for one student."""
    return student_progress(
        student_id, _scores_from_payload(payload), payload.get("subjects") or []
    )


@router.post("/top-students")
async def leaderboard(payload: dict):
    limit = int(payload.get("limit", 5))
    return top_students(
        _scores_from_payload(payload), payload.get("students") or [], limit=limit
    )
