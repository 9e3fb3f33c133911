"""
Parley Turn Handler - one provider exchange with at most one tool round-trip

Flow:
1. Initial call with tools -> direct answer or tool request
2. Execute the requested tool against the caller's tool session
3. Follow-up call carrying the tool result -> final answer

The handler is provider-agnostic; each ProviderAdapter owns its wire format.
"""

import logging
import time
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from errors import ParleyError, ProviderError, ToolExecutionError, format_tool_failure
from logging_config import log_llm, log_tool
from models import Message, ToolDescriptor, ToolResult
from providers.base import DirectAnswer, ProviderAdapter, ToolCall, ToolRequested

logger = logging.getLogger(__name__)

# Only the first tool call a provider requests is executed
MAX_TOOL_CALLS_PER_TURN = 1

FALLBACK_MESSAGE = "I received your message but couldn't generate a response."


class TurnState(str, Enum):
    SENDING = "sending"
    AWAITING_RESPONSE = "awaiting_response"
    DIRECT_ANSWER = "direct_answer"
    TOOL_REQUESTED = "tool_requested"
    EXECUTING_TOOL = "executing_tool"
    SENDING_FOLLOW_UP = "sending_follow_up"
    AWAITING_FOLLOW_UP = "awaiting_follow_up"
    TOOL_ERROR = "tool_error"
    DONE = "done"


class TurnHandler:
    """Runs one chat turn against a provider adapter.

    Tool failures become a visible assistant message and the turn still
    succeeds. Provider failures raise ProviderError and abort the turn.
    """

    def __init__(self, max_tool_calls: int = MAX_TOOL_CALLS_PER_TURN):
        self.max_tool_calls = max_tool_calls
        self.state = TurnState.DONE
        self.transitions: List[TurnState] = []

    def _enter(self, state: TurnState) -> None:
        self.state = state
        self.transitions.append(state)
        logger.debug(f"Turn state -> {state.value}")

    async def run(
        self,
        adapter: ProviderAdapter,
        messages: Sequence[Message],
        tools: Sequence[ToolDescriptor],
        tool_client,
    ) -> Tuple[List[Message], List[ToolResult]]:
        """Execute the turn.

        Args:
            adapter: Provider adapter for the selected LLM
            messages: Full inbound conversation
            tools: Tool descriptors from the caller's tool session
            tool_client: Object with async call_tool(name, args)

        Returns:
            (new assistant messages, tool results)

        Raises:
            ProviderError: provider transport or response-shape failure
        """
        self.transitions = []
        provider_messages = adapter.adapt_messages(messages)
        provider_tools = adapter.adapt_tools(tools) if tools else None

        self._enter(TurnState.SENDING)
        raw = await self._send(adapter, provider_messages, provider_tools, phase="initial")
        self._enter(TurnState.AWAITING_RESPONSE)
        outcome = adapter.parse_response(raw)

        replies: List[str] = []
        tool_results: List[ToolResult] = []

        if isinstance(outcome, DirectAnswer):
            self._enter(TurnState.DIRECT_ANSWER)
            replies.append(outcome.text)

        elif isinstance(outcome, ToolRequested):
            self._enter(TurnState.TOOL_REQUESTED)
            if outcome.text:
                replies.append(outcome.text)

            calls = outcome.calls[: self.max_tool_calls]
            if len(outcome.calls) > len(calls):
                logger.info(
                    f"{adapter.provider_name} requested {len(outcome.calls)} tool calls, "
                    f"executing first {len(calls)}"
                )

            executed = []
            failure: Optional[str] = None
            self._enter(TurnState.EXECUTING_TOOL)
            for call in calls:
                try:
                    result = await self._execute(call, tool_client)
                except ParleyError as e:
                    failure = format_tool_failure(call.name, e)
                    break
                executed.append((call, result))
                tool_results.append(ToolResult(tool_name=call.name, tool_args=call.arguments, result=result))

            if failure is not None:
                self._enter(TurnState.TOOL_ERROR)
                replies.append(failure)
            else:
                self._enter(TurnState.SENDING_FOLLOW_UP)
                follow_up = adapter.build_follow_up(provider_messages, raw, executed)
                follow_raw = await self._send(adapter, follow_up, provider_tools, phase="follow-up")
                self._enter(TurnState.AWAITING_FOLLOW_UP)
                follow_outcome = adapter.parse_response(follow_raw)
                if isinstance(follow_outcome, ToolRequested) and follow_outcome.calls:
                    # A second round-trip is never made
                    logger.info(f"{adapter.provider_name} requested another tool after follow-up, ignoring")
                self._enter(TurnState.DIRECT_ANSWER)
                replies.append(follow_outcome.text)

        self._enter(TurnState.DONE)
        new_messages = [Message(role="assistant", content=text) for text in replies if text]
        if not new_messages:
            new_messages = [Message(role="assistant", content=FALLBACK_MESSAGE)]
        return new_messages, tool_results

    async def _send(self, adapter: ProviderAdapter, messages, tools, phase: str) -> dict:
        log_llm(logger, "start", adapter.provider_id, adapter.model, phase)
        started = time.time()
        try:
            raw = await adapter.send_turn(messages, tools)
        except ProviderError as e:
            log_llm(logger, "error", adapter.provider_id, adapter.model, phase, time.time() - started, error=e.message)
            raise
        except Exception as e:
            log_llm(logger, "error", adapter.provider_id, adapter.model, phase, time.time() - started, error=e)
            raise ProviderError(
                f"{adapter.provider_name} request failed",
                details=str(e),
                provider=adapter.provider_id,
                model=adapter.model,
            ) from e
        log_llm(logger, "end", adapter.provider_id, adapter.model, phase, time.time() - started)
        return raw

    async def _execute(self, call: ToolCall, tool_client):
        if call.error:
            log_tool(logger, call.name, "error", error=call.error)
            raise ToolExecutionError(call.error, tool_name=call.name)

        log_tool(logger, call.name, "start", args=call.arguments)
        try:
            result = await tool_client.call_tool(call.name, call.arguments)
        except ParleyError as e:
            log_tool(logger, call.name, "error", error=e.message)
            raise
        log_tool(logger, call.name, "end")
        return result
