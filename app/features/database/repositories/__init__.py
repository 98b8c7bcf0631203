"""Database Repositories - Organized data access."""

from app.features.database.repositories.journals import JournalsRepository
from app.features.database.repositories.profiles import ProfilesRepository

__all__ = [
    "JournalsRepository",
    "ProfilesRepository",
]
