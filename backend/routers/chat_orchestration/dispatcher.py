"""
Parley Turn Dispatcher - validates a turn, routes it to a provider, persists it

Every precondition is checked before any network call:
- message sequence non-empty
- caller id present
- caller has an active tool session
- selected provider has a credential
"""

import logging
from typing import Callable, List, Optional

from config import RuntimeConfig, runtime_config
from errors import ConfigurationError, ErrorCode, ValidationError
from logging_config import log_message_in, log_message_out
from models import Message, TurnRequest, TurnResult
from providers import ProviderAdapter, get_provider
from services.conversation_store import ConversationGateway
from services.tool_registry import ToolRegistryClient, ToolSessionManager

from .turn_handler import MAX_TOOL_CALLS_PER_TURN, TurnHandler

logger = logging.getLogger(__name__)

_PROVIDER_LABELS = {"gemini": "Gemini", "claude": "Claude", "chatgpt": "OpenAI"}


class TurnDispatcher:
    """Entry point for one inbound chat turn."""

    def __init__(
        self,
        sessions: ToolSessionManager,
        gateway: ConversationGateway,
        config: Optional[RuntimeConfig] = None,
        provider_factory: Optional[Callable[[str, RuntimeConfig], ProviderAdapter]] = None,
        max_tool_calls: int = MAX_TOOL_CALLS_PER_TURN,
    ):
        self.sessions = sessions
        self.gateway = gateway
        self.config = config or runtime_config
        self.provider_factory = provider_factory or get_provider
        self.max_tool_calls = max_tool_calls

    def validate(self, request: TurnRequest) -> ToolRegistryClient:
        """Raise ValidationError for an unusable request; return the caller's tool client."""
        if not request.messages:
            raise ValidationError("Messages array is required", parameter="messages")
        if not request.caller_id:
            raise ValidationError("User ID is required", parameter="userId")

        client = self.sessions.peek(request.caller_id)
        if client is None or not client.is_connected():
            raise ValidationError(
                "Not connected to MCP server",
                code=ErrorCode.VALIDATION_NO_TOOL_SESSION,
                caller_id=request.caller_id,
            )
        return client

    async def handle_turn(self, request: TurnRequest) -> TurnResult:
        """Run one turn end to end.

        Raises:
            ValidationError: bad request or no tool session (400)
            ConfigurationError: provider credential missing (500)
            ProviderError: provider failure; nothing is persisted
        """
        tool_client = self.validate(request)

        provider_id = self.config.resolve_provider(request.provider_id)
        if not self.config.credential_for(provider_id):
            raise ConfigurationError(
                f"{_PROVIDER_LABELS[provider_id]} API key not configured",
                provider=provider_id,
            )

        last = request.last_message
        log_message_in(
            logger,
            last.text() if last else "",
            provider=provider_id,
            conversation=request.conversation_id or "new",
            caller=request.caller_id,
        )

        adapter = self.provider_factory(provider_id, self.config)
        handler = TurnHandler(max_tool_calls=self.max_tool_calls)
        new_messages, tool_results = await handler.run(
            adapter, request.messages, tool_client.get_tools(), tool_client
        )

        full_history: List[Message] = [*request.messages, *new_messages]
        if request.conversation_id:
            to_save = [request.messages[-1], *new_messages]
        else:
            to_save = full_history

        conversation_id = await self.gateway.save(
            request.conversation_id,
            request.caller_id,
            full_history,
            provider_id,
            to_save,
            tool_results,
        )

        log_message_out(
            logger,
            tools_used=[r.tool_name for r in tool_results],
            messages=len(new_messages),
            conversation_id=conversation_id,
        )
        return TurnResult(messages=new_messages, tool_results=tool_results, conversation_id=conversation_id)
