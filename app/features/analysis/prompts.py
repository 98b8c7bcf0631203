"""
LLM prompts for the health journal.
Centralized prompt templates for consistent AI behavior.
"""

import json
from typing import List, Sequence

from app.features.journal.models import JournalEntry
from app.shared.constants import (
    ANALYSIS_ENTRY_COUNT,
    MOOD_EMOJIS,
    REPORT_SECTIONS,
    REPORT_WINDOW_DAYS,
)
from app.shared.errors import InsufficientDataError


def _rating(value) -> str:
    return f"{value}/10" if value is not None else "N/A"


def _tags(tags: Sequence[str], empty: str = "none") -> str:
    return ", ".join(tags) if tags else empty


def format_pattern_line(day: int, entry: JournalEntry) -> str:
    """One ``Day N (date): "text" (Mood..., Sleep..., Tags...)`` line."""
    return (
        f'Day {day} ({entry.log_date.isoformat()}): "{entry.entry_text}" '
        f"(Mood: {_rating(entry.mood_rating)}, Sleep: {_rating(entry.sleep_rating)}, "
        f"Tags: {_tags(entry.tags)})"
    )


def build_pattern_prompt(entries: Sequence[JournalEntry]) -> str:
    """
    Build the weekly pattern analysis prompt.

    ``entries`` must already be in chronological order (oldest first);
    they are labelled Day 1..Day 7 in the order given.
    """
    if len(entries) < ANALYSIS_ENTRY_COUNT:
        raise InsufficientDataError(
            "Not enough entries for analysis",
            details={"entry_count": len(entries), "required": ANALYSIS_ENTRY_COUNT},
        )

    window = list(entries)[-ANALYSIS_ENTRY_COUNT:]
    entry_lines = "\n".join(format_pattern_line(i, entry) for i, entry in enumerate(window, start=1))
    labels = ", ".join(MOOD_EMOJIS)
    emoji_map = ", ".join(f"{label}: {emoji}" for label, emoji in MOOD_EMOJIS.items())
    first_date = window[0].log_date.isoformat()

    return f"""
Analyze these {ANALYSIS_ENTRY_COUNT} daily health journal entries and provide:

1. MOOD_TIMELINE: For each day, identify the dominant mood expressed. Use exactly one of these labels: {labels}

2. HEALTH_SCORE: Based on the overall tone, symptoms, sleep quality, and wellbeing indicators, rate the person's overall health from 0-100 as an integer

3. SUMMARY: A brief, encouraging 1-sentence summary of their week

Journal entries:
{entry_lines}

Respond ONLY with valid JSON (no markdown, no code blocks) in this exact format:
{{
  "mood_timeline": [
    {{"date": "{first_date}", "mood": "Calm", "mood_emoji": "{MOOD_EMOJIS['Calm']}"}},
    ...continue for all {ANALYSIS_ENTRY_COUNT} days, one object per day, using each day's exact date in order
  ],
  "health_score": 75,
  "summary": "You've been managing stress well and maintaining good sleep habits this week!"
}}

Use these exact mood-to-emoji mappings:
{emoji_map}
""".strip()


def build_report_prompt(entries: Sequence[JournalEntry], patient_name: str) -> str:
    """Build the 30-day report prompt with the dataset embedded as JSON."""
    health_data = [
        {
            "date": entry.log_date.isoformat(),
            "entry": entry.entry_text,
            "mood": entry.mood_rating,
            "sleep": entry.sleep_rating,
            "symptoms": entry.symptoms,
            "tags": entry.tags,
        }
        for entry in entries
    ]
    structure = "\n".join(
        f"{i}. **{title}** - {description}"
        for i, (title, description) in enumerate(REPORT_SECTIONS, start=1)
    )

    return f"""You are a health data analyst creating a medical-style summary report for a patient to share with their doctor. Analyze the provided health journal entries and create a comprehensive, professional report.

PATIENT: {patient_name}
REPORTING PERIOD: Last {REPORT_WINDOW_DAYS} Days

REPORT STRUCTURE:
{structure}

GUIDELINES:
- Address the report for "{patient_name}"
- Use professional, medical-style language
- Focus on objective observations, not diagnoses
- Highlight patterns and frequencies
- Note any concerning trends
- Include specific dates and data points
- Format for easy physician review using markdown headings and bold text

Health Journal Data for {patient_name} (Last {REPORT_WINDOW_DAYS} Days):
{json.dumps(health_data, indent=2, ensure_ascii=False, default=str)}

Generate a comprehensive health report that {patient_name} can confidently share with their healthcare provider."""


CHAT_SYSTEM_PROMPT_TEMPLATE = """You are a warm, empathetic AI health journal companion named "Health Assistant". Your role is to:

1. Help users reflect on their daily health experiences
2. Ask thoughtful follow-up questions about their wellbeing
3. Identify potential patterns between symptoms, food, sleep, and mood
4. Provide gentle guidance (NOT medical advice)
5. Encourage consistent journaling habits

IMPORTANT GUIDELINES:
- Always be warm, supportive, and non-judgmental
- Never provide medical advice or diagnose conditions
- Encourage users to consult healthcare professionals for medical concerns
- Focus on patterns and correlations, not causation
- Ask open-ended questions to encourage reflection
- Keep responses conversational and under 150 words

User's Recent Health Context:
{health_context}

Recent Conversation:
{conversation_context}

Remember: You're a journaling companion, not a doctor. Focus on emotional support and pattern recognition."""


def format_chat_context(entries: Sequence[JournalEntry]) -> str:
    if not entries:
        return "No health logs available yet."
    return "\n".join(
        f"{entry.log_date.isoformat()}: {entry.entry_text} "
        f"(Mood: {_rating(entry.mood_rating)}, Sleep: {_rating(entry.sleep_rating)}, "
        f"Tags: {_tags(entry.tags, empty='None')})"
        for entry in entries
    )


def build_chat_prompt(entries: Sequence[JournalEntry], history_lines: List[str]) -> str:
    """System prompt for the chat assistant, with journal and conversation context."""
    return CHAT_SYSTEM_PROMPT_TEMPLATE.format(
        health_context=format_chat_context(entries),
        conversation_context="\n".join(history_lines),
    )
