"""
OpenAI-Compatible Provider - wraps the OpenAI SDK with configurable base_url.

Covers OpenAI and any OpenAI-compatible chat completions endpoint.
Tool requests arrive as ``message.tool_calls`` with JSON-string arguments;
results go back as ``{"role": "tool", "tool_call_id": ...}`` messages.
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


class OpenAIAdapter(ProviderAdapter):
    """Provider for OpenAI-compatible APIs."""

    provider_id = "chatgpt"

    def __init__(self, api_key: str = "", model: str = "", base_url: str = "", client: Any = None):
        super().__init__(api_key, model or "gpt-4")
        self._base_url = base_url or None  # None = default OpenAI endpoint
        self._client = client

    @property
    def provider_name(self) -> str:
        return "ChatGPT"

    def _get_client(self):
        if self._client is None:
            try:
                import openai
            except ImportError as e:
                raise ProviderError(
                    "openai package not installed",
                    details="Install with: pip install openai",
                    provider=self.provider_id,
                    error_type="dependency",
                ) from e

            kwargs = {"api_key": self._api_key}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = openai.AsyncOpenAI(**kwargs)
        return self._client

    def adapt_tools(self, tools) -> Optional[List[Dict[str, Any]]]:
        return formats.tools_to_openai(tools) or None

    def adapt_messages(self, messages) -> List[Dict[str, Any]]:
        return formats.messages_to_openai(messages)

    async def send_turn(self, messages, tools) -> Dict[str, Any]:
        client = self._get_client()
        kwargs: Dict[str, Any] = {"model": self.model, "messages": messages}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = await client.chat.completions.create(**kwargs)
            return response_to_dict(response)
        except Exception as e:
            raise ProviderError(
                f"OpenAI request failed: {e}", provider=self.provider_id, model=self.model
            ) from e

    def parse_response(self, raw: Dict[str, Any]) -> ProviderTurnOutcome:
        message = self._message(raw)
        text = message.get("content") or ""

        calls = []
        for tool_call in message.get("tool_calls") or []:
            function = tool_call.get("function") or {}
            arguments, error = decode_arguments(function.get("arguments"))
            calls.append(ToolCall(
                name=function.get("name", ""),
                arguments=arguments,
                call_id=tool_call.get("id"),
                error=error,
            ))

        if calls:
            return ToolRequested(calls=tuple(calls), text=text)
        return DirectAnswer(text=text)

    def build_follow_up(self, messages, raw, executed: ExecutedCalls) -> List[Dict[str, Any]]:
        message = self._message(raw)
        executed_ids = {call.call_id for call, _ in executed}
        assistant = {
            "role": "assistant",
            "content": message.get("content"),
            "tool_calls": [
                {
                    "id": tc.get("id"),
                    "type": "function",
                    "function": {
                        "name": (tc.get("function") or {}).get("name", ""),
                        "arguments": (tc.get("function") or {}).get("arguments") or "{}",
                    },
                }
                for tc in message.get("tool_calls") or []
                if tc.get("id") in executed_ids
            ],
        }
        results = [
            {"role": "tool", "tool_call_id": call.call_id, "content": result_to_text(result)}
            for call, result in executed
        ]
        return [*messages, assistant, *results]

    def _message(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        choices = raw.get("choices")
        if not choices:
            raise ProviderError(
                "Invalid response structure from OpenAI",
                details="no choices in response",
                provider=self.provider_id,
                error_type="invalid",
            )
        return choices[0].get("message") or {}
