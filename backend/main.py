"""
Gradebook Analytics — scoring, ranking and insight API
FastAPI backend entry point.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gradebook.scoring import EXAM_WEIGHT, ASSESSMENT_WEIGHT
from gradebook.trends import AT_RISK_THRESHOLD, HIGH_PERFORMER_THRESHOLD
from routes.analytics import router as analytics_router
from routes.insights import router as insights_router
from routes.scores import router as scores_router
from routes.dependencies import get_default_weights

# Load environment
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]

app = FastAPI(
    title="Gradebook Analytics API",
    description=(
        "Weighted scores, class rankings and performance insights. "
        "Every insight is a deterministic statistical rule."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(scores_router, prefix="/api/scores", tags=["Scores"])
app.include_router(analytics_router, prefix="/api/analytics", tags=["Analytics"])
app.include_router(insights_router, prefix="/api/ai-insights", tags=["Insights"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "school_name": SCHOOL_NAME}


@app.get("/api/config")
async def get_config():
    """Return scoring configuration to the frontend."""
    return {
        "school_name": SCHOOL_NAME,
        "exam_weight": EXAM_WEIGHT,
        "assessment_weight": ASSESSMENT_WEIGHT,
        "default_component_weights": get_default_weights(),
        "at_risk_threshold": AT_RISK_THRESHOLD,
        "high_performer_threshold": HIGH_PERFORMER_THRESHOLD,
    }
