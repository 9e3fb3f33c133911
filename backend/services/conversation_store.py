"""
Conversation Persistence Gateway - REST client for the external conversation store.

Provides:
- ConversationStoreClient: create / append / patch / fetch / list / delete
- ConversationGateway.save(): the post-turn write path used by the chat dispatcher

Store endpoints (BACKEND_URL):
    POST   /api/conversations                     create (seeded with messages)
    GET    /api/conversations?userId=             list
    GET    /api/conversations/{id}/messages       fetch conversation + messages
    POST   /api/conversations/{id}/messages       append one message
    PATCH  /api/conversations/{id}                update title / lastLLM
    DELETE /api/conversations/{id}                delete

Chat responsiveness takes priority over durability: save() never raises,
it logs and returns None instead.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from config import runtime_config
from errors import PersistenceError, log_error
from models import Message, ToolResult

logger = logging.getLogger(__name__)

TITLE_WORDS = 6
DEFAULT_TITLE = "New Conversation"


def generate_conversation_title(content: str) -> str:
    """First six words of the opening message, with an ellipsis when truncated."""
    words = content.split(" ")
    title = " ".join(words[:TITLE_WORDS])
    return title + ("..." if len(words) > TITLE_WORDS else "")


def _message_record(message: Message, provider_id: str, tool_results: Sequence[ToolResult]) -> Dict[str, Any]:
    """Store representation of one message; assistant messages carry provider + tool results."""
    is_assistant = message.role == "assistant"
    return {
        "role": message.role,
        "content": message.content,
        "llmProvider": provider_id if is_assistant else None,
        "toolResults": [r.to_wire() for r in tool_results] if is_assistant and tool_results else None,
    }


class ConversationStoreClient:
    """Thin async client for the conversation store REST API.

    Every method raises PersistenceError on transport failure or a non-2xx status.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or runtime_config.backend_url).rstrip("/")
        self._timeout = timeout or runtime_config.http_timeout
        self._transport = transport

    async def create_conversation(
        self, user_id: str, title: str, last_llm: str, messages: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        return await self._send("POST", "/api/conversations", json={
            "userId": user_id,
            "title": title,
            "lastLLM": last_llm,
            "messages": messages,
        })

    async def add_message(self, conversation_id: str, message: Dict[str, Any]) -> Dict[str, Any]:
        return await self._send("POST", f"/api/conversations/{conversation_id}/messages", json=message)

    async def update_conversation(
        self, conversation_id: str, title: Optional[str] = None, last_llm: Optional[str] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if last_llm is not None:
            body["lastLLM"] = last_llm
        return await self._send("PATCH", f"/api/conversations/{conversation_id}", json=body)

    async def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        return await self._send("GET", f"/api/conversations/{conversation_id}/messages")

    async def list_conversations(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._send("GET", "/api/conversations", params={"userId": user_id})

    async def delete_conversation(self, conversation_id: str) -> None:
        await self._send("DELETE", f"/api/conversations/{conversation_id}")

    async def _send(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise PersistenceError(
                f"Conversation store unreachable at {self.base_url}", details=str(e), path=path
            ) from e

        if resp.status_code >= 400:
            raise PersistenceError(
                f"Conversation store returned {resp.status_code}",
                details=resp.text[:200],
                status_code=resp.status_code,
                path=path,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise PersistenceError("Conversation store returned invalid JSON", details=str(e), path=path) from e


class ConversationGateway:
    """Post-turn persistence: create on first turn, append afterwards."""

    def __init__(self, store: Optional[ConversationStoreClient] = None):
        self.store = store or ConversationStoreClient()

    async def save(
        self,
        conversation_id: Optional[str],
        caller_id: str,
        full_history: Sequence[Message],
        provider_id: str,
        new_messages: Sequence[Message],
        tool_results: Sequence[ToolResult] = (),
    ) -> Optional[str]:
        """Persist a finished turn.

        Args:
            conversation_id: Existing conversation, or None to create one
            caller_id: Owning user id
            full_history: Inbound history plus the new assistant messages
            provider_id: Provider that produced the answer (stored as lastLLM)
            new_messages: Messages to append to an existing conversation
            tool_results: Tool results attached to assistant messages

        Returns:
            The conversation id, or None if the store could not be written.
        """
        try:
            if not conversation_id:
                first = full_history[0].text() if full_history else ""
                title = generate_conversation_title(first or DEFAULT_TITLE)
                created = await self.store.create_conversation(
                    user_id=caller_id,
                    title=title,
                    last_llm=provider_id,
                    messages=[_message_record(m, provider_id, tool_results) for m in full_history],
                )
                new_id = created.get("id") if isinstance(created, dict) else None
                if new_id is None or new_id == "" or isinstance(new_id, (dict, list, bool)):
                    raise PersistenceError(
                        "Conversation store did not return an id", details=repr(created)[:200]
                    )
                new_id = str(new_id)
                logger.info(f"Created conversation {new_id} ({len(full_history)} messages)")
                return new_id

            # Sequential, one request per message; a mid-loop failure leaves a partial append
            for message in new_messages:
                await self.store.add_message(conversation_id, _message_record(message, provider_id, tool_results))
            await self.store.update_conversation(conversation_id, last_llm=provider_id)
            logger.info(f"Appended {len(new_messages)} messages to conversation {conversation_id}")
            return conversation_id

        except PersistenceError as e:
            log_error(logger, e, context="save_conversation", include_traceback=False)
            return None
