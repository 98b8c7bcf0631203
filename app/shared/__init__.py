# Shared constants and utilities
from .constants import (
    ANALYSIS_ENTRY_COUNT,
    REPORT_WINDOW_DAYS,
    MOOD_EMOJIS,
    MEDICAL_DISCLAIMER,
)

__all__ = [
    "ANALYSIS_ENTRY_COUNT",
    "REPORT_WINDOW_DAYS",
    "MOOD_EMOJIS",
    "MEDICAL_DISCLAIMER",
]
