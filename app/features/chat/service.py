"""
Chat Service - journaling companion with access to the user's recent entries.

Each request carries its own conversation state: the caller sends the
history it holds, the service answers and hands back the extended history.
Nothing about a conversation is kept in the process.
"""

import logging
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.features.analysis.prompts import build_chat_prompt
from app.features.database.client import DatabaseClient
from app.services.generative import CHAT_CONFIG, GenerativeClient
from app.shared.constants import CHAT_CONTEXT_ENTRIES, CHAT_HISTORY_MESSAGES
from app.shared.errors import DatabaseError, EmptyCompletionError

logger = logging.getLogger("Plusnote.Chat")

EMPTY_REPLY_FALLBACK = (
    "I'm here to listen and support you. Can you tell me more about how you're feeling today?"
)


class ChatMessage(BaseModel):
    """A single message in the conversation."""
    role: Literal["user", "assistant"]
    content: str


class ChatSession(BaseModel):
    """Conversation state owned by the caller."""
    messages: List[ChatMessage] = Field(default_factory=list)

    def recent(self, limit: int = CHAT_HISTORY_MESSAGES) -> List[ChatMessage]:
        return self.messages[-limit:] if limit > 0 else []

    def add(self, role: str, content: str) -> None:
        self.messages.append(ChatMessage(role=role, content=content))


class ChatRequest(BaseModel):
    """Request to the chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    message: str = Field(min_length=1)
    conversation_history: List[ChatMessage] = Field(default_factory=list, alias="conversationHistory")


class ChatResponse(BaseModel):
    """Response from the chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    response: str
    conversation_history: List[ChatMessage] = Field(alias="conversationHistory")


class HealthChatService:
    """Answers chat messages using the user's recent journal as context."""

    def __init__(self, db: DatabaseClient, llm: GenerativeClient):
        self.db = db
        self.llm = llm

    def _recent_entries(self, user_id: str):
        try:
            return self.db.journals.list_recent(user_id, limit=CHAT_CONTEXT_ENTRIES)
        except DatabaseError as exc:
            # Chat still works without journal context.
            logger.error(f"Error fetching logs for chat context: {exc.message}")
            return []

    async def reply(self, user_id: str, message: str, session: ChatSession) -> ChatSession:
        """
        Answer ``message`` and return the session extended with both turns.

        The prompt sees the last few messages of ``session`` as they were
        before this message.
        """
        entries = self._recent_entries(user_id)
        history_lines = [f"{m.role}: {m.content}" for m in session.recent()]

        system_prompt = build_chat_prompt(entries, history_lines)
        try:
            result = await self.llm.generate(
                [system_prompt, f"User message: {message}"],
                CHAT_CONFIG,
                purpose="chat",
            )
            answer = result.text.strip()
        except EmptyCompletionError as exc:
            logger.warning(f"Chat model returned no text, using fallback reply: {exc.message}")
            answer = ""
        answer = answer or EMPTY_REPLY_FALLBACK

        updated = session.model_copy(deep=True)
        updated.add("user", message)
        updated.add("assistant", answer)

        logger.info(
            "Chat reply generated",
            extra={"user_id": user_id, "context_entries": len(entries)},
        )
        return updated

    async def process(self, request: ChatRequest) -> ChatResponse:
        session = ChatSession(messages=list(request.conversation_history))
        updated = await self.reply(request.user_id, request.message, session)
        return ChatResponse(
            response=updated.messages[-1].content,
            conversation_history=updated.messages,
        )
