"""
Anthropic Provider - wraps the Anthropic SDK (Messages API).

Tool requests arrive as ``tool_use`` content blocks; results go back as a
user turn of ``tool_result`` blocks keyed by ``tool_use_id``.
"""

import logging
from typing import Any, Dict, List, Optional

from errors import ProviderError
from providers import formats
from providers.base import (
    DirectAnswer,
    ExecutedCalls,
    ProviderAdapter,
    ProviderTurnOutcome,
    ToolCall,
    ToolRequested,
    decode_arguments,
    response_to_dict,
    result_to_text,
)

logger = logging.getLogger(__name__)


class ClaudeAdapter(ProviderAdapter):
    """Provider that calls the Anthropic API."""

    provider_id = "claude"

    def __init__(self, api_key: str = "", model: str = "", max_tokens: int = 4000, client: Any = None):
        super().__init__(api_key, model or "claude-3-5-sonnet-20241022")
        self.max_tokens = max_tokens
        self._client = client

    @property
    def provider_name(self) -> str:
        return "Claude"

    def _get_client(self):
        if self._client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ProviderError(
                    "anthropic package not installed",
                    details="Install with: pip install anthropic",
                    provider=self.provider_id,
                    error_type="dependency",
                ) from e
            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    def adapt_tools(self, tools) -> Optional[List[Dict[str, Any]]]:
        return formats.tools_to_claude(tools) or None

    def adapt_messages(self, messages) -> List[Dict[str, Any]]:
        return formats.messages_to_claude(messages)

    async def send_turn(self, messages, tools) -> Dict[str, Any]:
        client = self._get_client()
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if tools:
            kwargs["tools"] = tools

        try:
            response = await client.messages.create(**kwargs)
            return response_to_dict(response)
        except Exception as e:
            raise ProviderError(
                f"Claude request failed: {e}", provider=self.provider_id, model=self.model
            ) from e

    def parse_response(self, raw: Dict[str, Any]) -> ProviderTurnOutcome:
        blocks = raw.get("content")
        if not isinstance(blocks, list):
            raise ProviderError(
                "Invalid response structure from Claude",
                details="content is not a list of blocks",
                provider=self.provider_id,
                error_type="invalid",
            )

        calls = []
        texts = []
        for block in blocks:
            block_type = block.get("type")
            if block_type == "tool_use":
                arguments, error = decode_arguments(block.get("input"))
                calls.append(ToolCall(
                    name=block.get("name", ""),
                    arguments=arguments,
                    call_id=block.get("id"),
                    error=error,
                ))
            elif block_type == "text":
                texts.append(block.get("text") or "")

        text = "".join(texts)
        if calls:
            return ToolRequested(calls=tuple(calls), text=text)
        return DirectAnswer(text=text)

    def build_follow_up(self, messages, raw, executed: ExecutedCalls) -> List[Dict[str, Any]]:
        # Only the tool_use blocks that were executed; every tool_use needs a matching tool_result
        executed_ids = {call.call_id for call, _ in executed}
        assistant_blocks = []
        for block in raw.get("content") or []:
            if block.get("type") == "text" and block.get("text"):
                assistant_blocks.append({"type": "text", "text": block["text"]})
            elif block.get("type") == "tool_use" and block.get("id") in executed_ids:
                assistant_blocks.append({
                    "type": "tool_use",
                    "id": block["id"],
                    "name": block.get("name", ""),
                    "input": block.get("input") or {},
                })

        tool_results = [
            {"type": "tool_result", "tool_use_id": call.call_id, "content": result_to_text(result)}
            for call, result in executed
        ]
        return [
            *messages,
            {"role": "assistant", "content": assistant_blocks},
            {"role": "user", "content": tool_results},
        ]
