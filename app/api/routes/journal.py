"""
Journal API Routes

CRUD for health log entries. Every mutation returns the affected entry so
clients can update their local list without re-fetching.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_database
from app.features.database.client import DatabaseClient
from app.features.journal.models import JournalEntry, JournalEntryCreate, JournalEntryUpdate

router = APIRouter(tags=["Journal"])
logger = logging.getLogger("Plusnote.API.Journal")


@router.get("/journal/{user_id}/entries", response_model=List[JournalEntry])
def list_entries(
    user_id: str,
    limit: int = Query(default=100, ge=1, le=500),
    db: DatabaseClient = Depends(get_database),
) -> List[JournalEntry]:
    """List a user's entries, newest first."""
    return db.journals.list_all(user_id, limit=limit)


@router.post("/journal/{user_id}/entries", response_model=JournalEntry, status_code=201)
def create_entry(
    user_id: str,
    entry: JournalEntryCreate,
    db: DatabaseClient = Depends(get_database),
) -> JournalEntry:
    """Record a new journal entry (log_date defaults to today)."""
    return db.journals.create(user_id, entry)


@router.patch("/journal/entries/{entry_id}", response_model=JournalEntry)
def update_entry(
    entry_id: str,
    changes: JournalEntryUpdate,
    db: DatabaseClient = Depends(get_database),
) -> JournalEntry:
    return db.journals.update(entry_id, changes)


@router.delete("/journal/entries/{entry_id}", response_model=JournalEntry)
def delete_entry(
    entry_id: str,
    db: DatabaseClient = Depends(get_database),
) -> JournalEntry:
    """Delete an entry and return what was removed."""
    return db.journals.delete(entry_id)
