"""Result contract for the weekly pattern analysis."""

import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, StrictInt, field_validator, model_validator

from app.shared.constants import ANALYSIS_ENTRY_COUNT, MOOD_EMOJIS


class MoodLabel(str, Enum):
    HAPPY = "Happy"
    CALM = "Calm"
    NEUTRAL = "Neutral"
    ANXIOUS = "Anxious"
    ANGRY = "Angry"
    LOW = "Low"
    SICK = "Sick"
    EXCITED = "Excited"

    @property
    def emoji(self) -> str:
        return MOOD_EMOJIS[self.value]


class MoodDayPoint(BaseModel):
    """One day of the mood timeline."""
    date: datetime.date
    mood: MoodLabel
    mood_emoji: str

    @model_validator(mode="after")
    def _canonical_emoji(self) -> "MoodDayPoint":
        # The label is authoritative; the model sometimes drifts on emoji.
        self.mood_emoji = self.mood.emoji
        return self


class HealthAnalysis(BaseModel):
    """Seven-day mood timeline, 0-100 health score and a one-line summary."""
    mood_timeline: List[MoodDayPoint] = Field(
        min_length=ANALYSIS_ENTRY_COUNT, max_length=ANALYSIS_ENTRY_COUNT
    )
    health_score: StrictInt = Field(ge=0, le=100)
    summary: str = Field(min_length=1)

    @field_validator("summary")
    @classmethod
    def _strip_summary(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("summary must not be blank")
        return value


class AnalysisStatus(BaseModel):
    """How close a user is to unlocking weekly insights."""
    entry_count: int
    entries_needed: int
    unlocked: bool
