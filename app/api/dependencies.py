from functools import lru_cache

from fastapi import Depends

from app.features.chat.service import HealthChatService
from app.features.database.client import DatabaseClient, get_database_client
from app.features.reports.renderer import PdfRenderer
from app.services.generative import GenerativeClient, create_generative_client


def get_database() -> DatabaseClient:
    """Provide the singleton Supabase-backed database client."""
    return get_database_client()


@lru_cache(maxsize=1)
def get_generative_client() -> GenerativeClient:
    """Provide a singleton generative client for the configured provider."""
    return create_generative_client()


@lru_cache(maxsize=1)
def get_pdf_renderer() -> PdfRenderer:
    return PdfRenderer()


def get_chat_service(
    db: DatabaseClient = Depends(get_database),
    llm: GenerativeClient = Depends(get_generative_client),
) -> HealthChatService:
    """Chat service wired to the shared database and generative clients."""
    return HealthChatService(db, llm)
