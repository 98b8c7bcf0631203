"""Journal entries and user profiles."""

from app.features.journal.models import (
    JournalEntry,
    JournalEntryCreate,
    JournalEntryUpdate,
    UserProfile,
    ProfileUpdate,
)

__all__ = [
    "JournalEntry",
    "JournalEntryCreate",
    "JournalEntryUpdate",
    "UserProfile",
    "ProfileUpdate",
]
