"""
Weekly health pattern analysis.

Turns the user's last seven journal entries into a mood timeline, a 0-100
health score and a one-sentence summary:

    fetch 7 newest -> reverse to chronological -> prompt -> generate -> parse

Fewer than seven entries is a precondition failure raised before the
generative endpoint is contacted.
"""

import logging

from app.features.analysis.models import AnalysisStatus, HealthAnalysis
from app.features.analysis.parser import parse_analysis
from app.features.analysis.prompts import build_pattern_prompt
from app.features.database.client import DatabaseClient
from app.services.generative import ANALYSIS_CONFIG, GenerativeClient
from app.shared.constants import ANALYSIS_ENTRY_COUNT
from app.shared.errors import AnalysisParseError, InsufficientDataError

logger = logging.getLogger("Plusnote.Analysis")


def entries_needed(entry_count: int) -> int:
    """How many more entries unlock the weekly insights."""
    return max(ANALYSIS_ENTRY_COUNT - entry_count, 0)


def health_score_label(score: int) -> str:
    if score >= 81:
        return "Excellent"
    if score >= 61:
        return "Good"
    if score >= 31:
        return "Fair"
    return "Poor"


def analysis_status(db: DatabaseClient, user_id: str) -> AnalysisStatus:
    count = db.journals.count(user_id)
    needed = entries_needed(count)
    return AnalysisStatus(entry_count=count, entries_needed=needed, unlocked=needed == 0)


async def analyze_health_patterns(
    user_id: str,
    db: DatabaseClient,
    llm: GenerativeClient,
) -> HealthAnalysis:
    """
    Run the weekly pattern analysis for a user.

    Raises:
        InsufficientDataError: Fewer than seven entries exist
        ConfigurationError / UpstreamServiceError: From the generative client
        AnalysisParseError: The model output does not fit the contract
    """
    recent = db.journals.list_recent(user_id, limit=ANALYSIS_ENTRY_COUNT)
    if len(recent) < ANALYSIS_ENTRY_COUNT:
        logger.info(
            "Pattern analysis skipped: not enough entries",
            extra={"user_id": user_id, "entry_count": len(recent)},
        )
        raise InsufficientDataError(
            "Not enough entries for analysis",
            details={
                "entry_count": len(recent),
                "entries_needed": entries_needed(len(recent)),
            },
        )

    # Fetched newest first; the prompt wants oldest first.
    chronological = list(reversed(recent))

    prompt = build_pattern_prompt(chronological)
    result = await llm.generate([prompt], ANALYSIS_CONFIG, purpose="analysis")
    analysis = parse_analysis(result.text)

    expected_dates = [entry.log_date for entry in chronological]
    returned_dates = [point.date for point in analysis.mood_timeline]
    if returned_dates != expected_dates:
        logger.error(
            "Mood timeline dates do not match the analysed entries",
            extra={
                "expected": [d.isoformat() for d in expected_dates],
                "returned": [d.isoformat() for d in returned_dates],
            },
        )
        raise AnalysisParseError("Mood timeline dates do not match the journal entries")

    logger.info(
        "Health pattern analysis completed",
        extra={
            "user_id": user_id,
            "health_score": analysis.health_score,
            "score_label": health_score_label(analysis.health_score),
        },
    )
    return analysis
