"""
Parley Conversations Router - proxy to the external conversation store

The browser reads and edits history through this service so it only
needs one origin. Store failures surface as 502.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from errors import ValidationError
from services.conversation_store import ConversationStoreClient
from routers.deps import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations")


class ConversationUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    last_llm: Optional[str] = Field(default=None, alias="lastLLM")


@router.get("")
async def list_conversations(userId: Optional[str] = None, store: ConversationStoreClient = Depends(get_store)):
    """List a user's conversations"""
    if not userId:
        raise ValidationError("User ID is required", parameter="userId")
    return await store.list_conversations(userId)


@router.get("/{conversation_id}")
async def get_conversation(conversation_id: str, store: ConversationStoreClient = Depends(get_store)):
    """Conversation with its messages"""
    return await store.get_conversation(conversation_id)


@router.patch("/{conversation_id}")
async def update_conversation(
    conversation_id: str, data: ConversationUpdate, store: ConversationStoreClient = Depends(get_store)
):
    """Rename a conversation or change its last-used provider"""
    if data.title is None and data.last_llm is None:
        raise ValidationError("Nothing to update", expected="title or lastLLM")
    updated = await store.update_conversation(conversation_id, title=data.title, last_llm=data.last_llm)
    return updated or {"success": True, "id": conversation_id}


@router.delete("/{conversation_id}")
async def delete_conversation(conversation_id: str, store: ConversationStoreClient = Depends(get_store)):
    """Delete a conversation"""
    await store.delete_conversation(conversation_id)
    return {"success": True, "id": conversation_id}
