"""
Features Module - Self-contained feature units.

Each feature is a modular unit with its own logic:
- database: Supabase repositories for journal entries and profiles
- journal: Entry and profile models
- analysis: Weekly pattern prompts, parsing and scoring
- reports: 30-day physician report and PDF rendering
- chat: Journaling companion
"""

# Core services that other features depend on
from app.features.database import get_database_client, DatabaseClient

__all__ = [
    "get_database_client",
    "DatabaseClient",
]
