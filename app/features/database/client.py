"""
Database Client - Unified Access to the Journal Repositories

Thin wrapper that hands the Supabase client to each repository.
"""

import logging
from functools import lru_cache

from app.core.database import get_supabase
from app.features.database.repositories.journals import JournalsRepository
from app.features.database.repositories.profiles import ProfilesRepository

logger = logging.getLogger("Plusnote.Database")


class DatabaseClient:
    """
    Unified database client providing access to all repositories.

    Usage:
        db = get_database_client()
        entries = db.journals.list_recent(user_id, limit=7)
        name = db.profiles.display_name_for(user_id)
    """

    def __init__(self, client=None):
        self._client = client if client is not None else get_supabase()

        self.journals = JournalsRepository(self._client)
        self.profiles = ProfilesRepository(self._client)

        logger.info("Database client initialized with all repositories")

    @property
    def client(self):
        """Direct access to Supabase client for advanced queries."""
        return self._client


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    """Get the singleton database client."""
    return DatabaseClient()
