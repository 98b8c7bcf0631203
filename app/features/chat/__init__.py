"""Chat feature module."""

from app.features.chat.service import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ChatSession,
    HealthChatService,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ChatSession",
    "HealthChatService",
]
