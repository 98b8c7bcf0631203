"""
Journal entry and profile models.

Rows come straight from the ``health_logs`` and ``profiles`` Supabase tables;
the models validate them on the way in and out of the API.
"""

from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.shared.constants import DEFAULT_PATIENT_NAME


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _clean_tags(tags: Optional[List[str]]) -> List[str]:
    """Strip blanks and duplicates, keeping first-seen order."""
    cleaned: List[str] = []
    for tag in tags or []:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class JournalEntry(BaseModel):
    """One dated health log as stored in ``health_logs``."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    log_date: date
    entry_text: str
    mood_rating: Optional[int] = Field(default=None, ge=1, le=10)
    sleep_rating: Optional[int] = Field(default=None, ge=1, le=10)
    symptoms: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> str:
        return str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> List[str]:
        return value or []


class JournalEntryCreate(BaseModel):
    """Payload for a new journal entry."""

    entry_text: str = Field(min_length=1)
    mood_rating: Optional[int] = Field(default=None, ge=1, le=10)
    sleep_rating: Optional[int] = Field(default=None, ge=1, le=10)
    symptoms: Optional[Any] = None
    tags: List[str] = Field(default_factory=list)
    log_date: date = Field(default_factory=_today)

    @field_validator("entry_text")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please write something about your day.")
        return value

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: List[str]) -> List[str]:
        return _clean_tags(value)

    def to_row(self, user_id: str) -> dict:
        return {
            "user_id": user_id,
            "entry_text": self.entry_text,
            "mood_rating": self.mood_rating,
            "sleep_rating": self.sleep_rating,
            "symptoms": self.symptoms,
            "tags": self.tags or None,
            "log_date": self.log_date.isoformat(),
        }


class JournalEntryUpdate(BaseModel):
    """Partial update; only fields explicitly sent are written."""

    entry_text: Optional[str] = Field(default=None, min_length=1)
    mood_rating: Optional[int] = Field(default=None, ge=1, le=10)
    sleep_rating: Optional[int] = Field(default=None, ge=1, le=10)
    symptoms: Optional[Any] = None
    tags: Optional[List[str]] = None
    log_date: Optional[date] = None

    @field_validator("entry_text")
    @classmethod
    def _require_text(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("Entry text cannot be blank")
        return value

    def to_row(self) -> dict:
        row = self.model_dump(exclude_unset=True)
        if "tags" in row:
            row["tags"] = _clean_tags(row["tags"]) or None
        if row.get("log_date") is not None:
            row["log_date"] = row["log_date"].isoformat()
        return row


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> str:
        return str(value)

    @property
    def resolved_name(self) -> str:
        """Display name, else the email's local part, else 'Patient'."""
        if self.display_name and self.display_name.strip():
            return self.display_name.strip()
        if self.email:
            return self.email.split("@")[0]
        return DEFAULT_PATIENT_NAME


class ProfileUpdate(BaseModel):
    display_name: str = Field(min_length=1, max_length=100)
