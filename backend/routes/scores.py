"""
Score routes — assessment/final score calculation and class ranking.
"""

from fastapi import APIRouter, Depends, HTTPException

from gradebook.insights import rank_subject
from gradebook.scoring import (
    calculate_final_scores_and_ranks,
    compute_assessment_score,
    compute_final_score,
)
from routes.dependencies import get_default_weights, get_store

router = APIRouter()


def _number(payload: dict, key: str) -> float:
    try:
        return float(payload[key])
    except KeyError:
        raise HTTPException(400, f"'{key}' is required.")
    except (TypeError, ValueError):
        raise HTTPException(400, f"'{key}' must be a number.")


@router.post("/assessment")
async def assessment_score(payload: dict):
    """Weighted class-assessment score from component scores and weights."""
    components = payload.get("components") or []
    try:
        pairs = [(c["score"], c.get("weight", 0)) for c in components]
        return {"assessment_score": compute_assessment_score(pairs)}
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise HTTPException(400, f"Invalid components: {exc}")


@router.post("/final")
async def final_score(payload: dict):
    exam = _number(payload, "exam_score")
    assessment = _number(payload, "assessment_score")
    return {"final_score": compute_final_score(exam, assessment)}


@router.post("/rank")
async def rank(payload: dict, default_weights=Depends(get_default_weights)):
    """Recompute final scores for the posted records and rank them."""
    scores = payload.get("scores")
    if not scores:
        raise HTTPException(400, "No scores provided.")
    try:
        ranked = calculate_final_scores_and_ranks(
            scores, payload.get("components"), default_weights
        )
    except (AttributeError, TypeError, ValueError) as exc:
        raise HTTPException(400, f"Invalid scores: {exc}")
    return {"scores": ranked}


@router.get("/subject/{subject_id}")
def subject_ranking(
    subject_id: str,
    teacher_id: str,
    store=Depends(get_store),
    default_weights=Depends(get_default_weights),
):
    """Ranked scores for one subject, read from the document store."""
    return {"scores": rank_subject(store, subject_id, teacher_id, default_weights)}
