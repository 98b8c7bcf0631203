"""Weekly health pattern analysis."""

from app.features.analysis.models import AnalysisStatus, HealthAnalysis, MoodDayPoint, MoodLabel
from app.features.analysis.parser import parse_analysis, strip_code_fences
from app.features.analysis.patterns import (
    analysis_status,
    analyze_health_patterns,
    entries_needed,
    health_score_label,
)

__all__ = [
    "AnalysisStatus",
    "HealthAnalysis",
    "MoodDayPoint",
    "MoodLabel",
    "parse_analysis",
    "strip_code_fences",
    "analysis_status",
    "analyze_health_patterns",
    "entries_needed",
    "health_score_label",
]
