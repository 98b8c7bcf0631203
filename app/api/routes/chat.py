"""
Chat API Routes.

Conversational journaling companion. The client owns the conversation and
sends its history with each message.
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_chat_service
from app.features.chat import ChatRequest, ChatResponse, HealthChatService

logger = logging.getLogger("Plusnote.API.Chat")
router = APIRouter(tags=["Chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, service: HealthChatService = Depends(get_chat_service)):
    """
    Reply to a journaling message.

    Example requests:
    - "I slept badly again, is that connected to my headaches?"
    - "How has my mood been this week?"
    """
    return await service.process(request)
