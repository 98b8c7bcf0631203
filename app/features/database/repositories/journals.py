"""
Journal Repository - health log data access operations.

Handles all ``health_logs`` operations:
- Listing a user's entries (most recent window, date range, everything)
- Creating, updating and deleting single entries

Mutations return the affected row so callers can update their local state
without re-fetching the whole journal.
"""

import logging
from datetime import date
from typing import List, Optional

from app.features.journal.models import JournalEntry, JournalEntryCreate, JournalEntryUpdate
from app.shared.constants import HEALTH_LOGS_TABLE
from app.shared.errors import DatabaseError, NotFoundError

logger = logging.getLogger("Plusnote.Database.Journals")


class JournalsRepository:
    """Repository for journal entry operations."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    def _table(self):
        return self.client.table(HEALTH_LOGS_TABLE)

    def list_recent(self, user_id: str, limit: int) -> List[JournalEntry]:
        """Most recent entries for a user, newest first."""
        try:
            result = self._table().select("*").eq(
                "user_id", user_id
            ).order("log_date", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"Error fetching recent journal entries: {e}")
            raise DatabaseError("Failed to fetch health logs", operation="select") from e
        return [JournalEntry.model_validate(row) for row in result.data or []]

    def list_since(self, user_id: str, since: date) -> List[JournalEntry]:
        """Entries with ``log_date >= since``, oldest first."""
        try:
            result = self._table().select("*").eq(
                "user_id", user_id
            ).gte("log_date", since.isoformat()).order("log_date").execute()
        except Exception as e:
            logger.error(f"Error fetching journal entries since {since}: {e}")
            raise DatabaseError("Failed to fetch health logs", operation="select") from e
        return [JournalEntry.model_validate(row) for row in result.data or []]

    def list_all(self, user_id: str, limit: Optional[int] = None) -> List[JournalEntry]:
        """All entries for a user, newest first."""
        try:
            query = self._table().select("*").eq("user_id", user_id).order("log_date", desc=True)
            if limit:
                query = query.limit(limit)
            result = query.execute()
        except Exception as e:
            logger.error(f"Error listing journal entries: {e}")
            raise DatabaseError("Failed to fetch health logs", operation="select") from e
        return [JournalEntry.model_validate(row) for row in result.data or []]

    def count(self, user_id: str) -> int:
        """Number of entries a user has written."""
        try:
            result = self._table().select("id", count="exact").eq("user_id", user_id).execute()
        except Exception as e:
            logger.error(f"Error counting journal entries: {e}")
            raise DatabaseError("Failed to count health logs", operation="count") from e
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def get(self, entry_id: str) -> JournalEntry:
        """Get a single entry by ID."""
        try:
            result = self._table().select("*").eq("id", entry_id).execute()
        except Exception as e:
            logger.error(f"Error fetching journal entry {entry_id}: {e}")
            raise DatabaseError("Failed to fetch health log", operation="select") from e
        if not result.data:
            raise NotFoundError(f"Journal entry {entry_id} not found")
        return JournalEntry.model_validate(result.data[0])

    def create(self, user_id: str, entry: JournalEntryCreate) -> JournalEntry:
        """Insert a new entry and return the stored row."""
        try:
            result = self._table().insert(entry.to_row(user_id)).execute()
        except Exception as e:
            logger.error(f"Error creating journal entry: {e}")
            raise DatabaseError("Failed to save health log", operation="insert") from e
        if not result.data:
            raise DatabaseError("Insert returned no row", operation="insert")

        created = JournalEntry.model_validate(result.data[0])
        logger.info(f"Journal entry created: {created.id}")
        return created

    def update(self, entry_id: str, changes: JournalEntryUpdate) -> JournalEntry:
        """Apply a partial update and return the updated row."""
        row = changes.to_row()
        if not row:
            return self.get(entry_id)

        try:
            result = self._table().update(row).eq("id", entry_id).execute()
        except Exception as e:
            logger.error(f"Error updating journal entry {entry_id}: {e}")
            raise DatabaseError("Failed to update health log", operation="update") from e
        if not result.data:
            raise NotFoundError(f"Journal entry {entry_id} not found")

        logger.info(f"Journal entry updated: {entry_id}")
        return JournalEntry.model_validate(result.data[0])

    def delete(self, entry_id: str) -> JournalEntry:
        """Delete an entry and return the removed row."""
        try:
            result = self._table().delete().eq("id", entry_id).execute()
        except Exception as e:
            logger.error(f"Error deleting journal entry {entry_id}: {e}")
            raise DatabaseError("Failed to delete health log", operation="delete") from e
        if not result.data:
            raise NotFoundError(f"Journal entry {entry_id} not found")

        logger.info(f"Journal entry deleted: {entry_id}")
        return JournalEntry.model_validate(result.data[0])
