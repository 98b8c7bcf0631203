"""
Shared constants for the health journal service.
"""

# Supabase tables
HEALTH_LOGS_TABLE = "health_logs"
PROFILES_TABLE = "profiles"

# Weekly pattern analysis needs exactly this many entries
ANALYSIS_ENTRY_COUNT = 7

# Report window in days
REPORT_WINDOW_DAYS = 30

# Chat context sizes
CHAT_CONTEXT_ENTRIES = 10
CHAT_HISTORY_MESSAGES = 5

DEFAULT_PATIENT_NAME = "Patient"
PRODUCT_NAME = "Plusnote AI Health Journal"

# Fixed mood vocabulary and emoji mapping used by the mood timeline
MOOD_EMOJIS = {
    "Happy": "😊",
    "Calm": "😌",
    "Neutral": "😐",
    "Anxious": "😰",
    "Angry": "😡",
    "Low": "😔",
    "Sick": "🤒",
    "Excited": "🤩",
}

REPORT_SECTIONS = [
    ("Executive Summary", "Brief overview of the reporting period and key findings"),
    ("Symptom Analysis", "Most frequent symptoms, patterns, and timing"),
    ("Lifestyle Factors", "Sleep patterns, mood trends, diet observations"),
    ("Potential Correlations", "Any patterns between lifestyle factors and symptoms"),
    ("Recommendations for Healthcare Provider", "Key discussion points for medical consultation"),
]

MEDICAL_DISCLAIMER = (
    "This report is generated from self-reported health journal entries and is not a medical "
    "diagnosis. It is intended to facilitate discussion with healthcare providers. Please consult "
    "with qualified medical professionals for any health concerns or before making changes to "
    "treatment plans."
)
