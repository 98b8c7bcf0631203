"""
Analysis API Routes

Weekly health pattern analysis: mood timeline, health score and summary
computed from the user's last seven journal entries.
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_database, get_generative_client
from app.api.models import AnalysisRequest
from app.features.analysis.models import AnalysisStatus, HealthAnalysis
from app.features.analysis.patterns import analysis_status, analyze_health_patterns
from app.features.database.client import DatabaseClient
from app.services.generative import GenerativeClient

router = APIRouter(tags=["Analysis"])
logger = logging.getLogger("Plusnote.API.Analysis")


@router.post("/analysis/patterns", response_model=HealthAnalysis)
async def analyze_patterns(
    request: AnalysisRequest,
    db: DatabaseClient = Depends(get_database),
    llm: GenerativeClient = Depends(get_generative_client),
) -> HealthAnalysis:
    """
    Analyze the last seven entries.

    Returns 400 when fewer than seven entries exist; the generative endpoint
    is not contacted in that case.
    """
    return await analyze_health_patterns(request.user_id, db, llm)


@router.get("/analysis/status/{user_id}", response_model=AnalysisStatus)
def get_analysis_status(user_id: str, db: DatabaseClient = Depends(get_database)) -> AnalysisStatus:
    """How many more entries are needed before weekly insights unlock."""
    return analysis_status(db, user_id)
