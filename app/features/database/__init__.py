"""
Database Feature Module - Organized Data Access Layer

Usage:
    from app.features.database import get_database_client

    db = get_database_client()
    entries = db.journals.list_recent(user_id, limit=7)
"""

from app.features.database.client import DatabaseClient, get_database_client

__all__ = [
    "DatabaseClient",
    "get_database_client",
]
