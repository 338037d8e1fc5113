"""
Insight routes — at-risk students, top performers, class summary, anomalies.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from gradebook.insights import (
    generate_all_insights,
    get_anomalies,
    get_at_risk_students,
    get_performance_summary,
    get_top_performers,
)
from routes.dependencies import get_store

router = APIRouter()

INSIGHT_TYPES = {
    "at-risk": get_at_risk_students,
    "top-performers": get_top_performers,
    "summary": get_performance_summary,
    "anomalies": get_anomalies,
    "all": generate_all_insights,
}


@router.get("")
def ai_insights(
    teacher_id: Optional[str] = None,
    type: Optional[str] = None,
    organization_id: Optional[str] = None,
    store=Depends(get_store),
):
    """
    Deterministic dashboard insights for one teacher.
    ``type`` is one of at-risk, top-performers, summary, anomalies, all.
    """
    if not teacher_id:
        raise HTTPException(400, "Teacher ID is required.")
    handler = INSIGHT_TYPES.get(type or "")
    if handler is None:
        raise HTTPException(400, "Invalid insight type.")
    return handler(store, teacher_id, organization_id)
