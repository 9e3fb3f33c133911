"""
Parley Chat Router - POST /api/chat

One request is one turn: validate, call the selected provider (with at
most one tool round-trip), persist, and answer with the new messages.

Failures answer with ``{"error": ...}`` via the registered exception
handlers: 400 for validation, 500 for configuration/provider/internal.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from models import Message, TurnRequest
from routers.chat_orchestration import TurnDispatcher
from routers.deps import get_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class ChatRequestBody(BaseModel):
    """Inbound chat body; everything is optional so the dispatcher owns validation."""

    model_config = ConfigDict(populate_by_name=True)

    messages: Optional[List[Message]] = None
    selected_llm: Optional[str] = Field(default=None, alias="selectedLLM")
    conversation_id: Optional[str] = Field(default=None, alias="conversationId")
    user_id: Optional[str] = Field(default=None, alias="userId")

    def to_turn(self) -> TurnRequest:
        return TurnRequest(
            messages=tuple(self.messages or ()),
            provider_id=self.selected_llm,
            conversation_id=self.conversation_id,
            caller_id=self.user_id,
        )


@router.post("/chat")
async def chat(body: ChatRequestBody, dispatcher: TurnDispatcher = Depends(get_dispatcher)) -> Any:
    """Run one chat turn and return ``{messages, toolResults, conversationId}``."""
    result = await dispatcher.handle_turn(body.to_turn())
    return result.to_wire()
